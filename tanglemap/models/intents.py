# tanglemap/models/intents.py
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field
from tanglemap.models.geometry import Point

class OpenIntent(BaseModel):
    """Ask the host to show (raise or create) the window of a tangle."""
    kind: Literal["open"] = "open"
    tangle_id: int

class LinkIntent(BaseModel):
    """Ask the note store to add a link from one tangle to another."""
    kind: Literal["link"] = "link"
    source_id: int
    target_id: int

class PositionsIntent(BaseModel):
    """Ask the note store to remember where dragged tangles were dropped."""
    kind: Literal["positions"] = "positions"
    positions: dict[int, Point]

Intent = Annotated[
    Union[OpenIntent, LinkIntent, PositionsIntent],
    Field(discriminator="kind"),
]
