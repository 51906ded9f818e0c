# tanglemap/models/gestures.py
import time
from enum import Enum
from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field, RootModel

class Button(int, Enum):
    PRIMARY = 1
    MIDDLE = 2
    SECONDARY = 3

class Modifier(str, Enum):
    SHIFT = "shift"
    CTRL = "ctrl"
    ALT = "alt"

class _PointerEvent(BaseModel):
    x: float
    y: float
    # Milliseconds on a monotonic clock. Hosts should send their own; an
    # untimed event is stamped with the server clock on arrival.
    time_ms: float = Field(default_factory=lambda: time.monotonic() * 1000.0)
    modifiers: frozenset[Modifier] = frozenset()

class PressEvent(_PointerEvent):
    kind: Literal["press"] = "press"
    button: Button = Button.PRIMARY

class MoveEvent(_PointerEvent):
    kind: Literal["move"] = "move"

class ReleaseEvent(_PointerEvent):
    kind: Literal["release"] = "release"
    button: Button = Button.PRIMARY

class ScrollEvent(_PointerEvent):
    kind: Literal["scroll"] = "scroll"
    dy: float

class PinchEvent(_PointerEvent):
    kind: Literal["pinch"] = "pinch"
    scale: float

GestureEvent = Annotated[
    Union[PressEvent, MoveEvent, ReleaseEvent, ScrollEvent, PinchEvent],
    Field(discriminator="kind"),
]

class GesturePayload(RootModel[GestureEvent]):
    """Request body wrapper; the JSON body is the bare event."""
