# tanglemap/api/router.py
from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field
from tanglemap.models.frame import Frame
from tanglemap.models.gestures import GesturePayload
from tanglemap.models.graph import NodeView, StoreFeed
from tanglemap.models.intents import Intent
from tanglemap.services.map_service import MapService
from tanglemap.core.limiter import limiter

router = APIRouter(prefix="/map")

map_service = MapService()

# --- Request Models ---
class ResizeRequest(BaseModel):
    width: float
    height: float

class VisibilityRequest(BaseModel):
    visible: bool

class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=200)

class FeedAccepted(BaseModel):
    nodes: int
    edges: int

def get_map_service() -> MapService:
    return map_service

@router.put("/feed", status_code=status.HTTP_202_ACCEPTED, response_model=FeedAccepted, tags=["Feed"])
@limiter.limit("120/minute")
async def submit_feed(
    request: Request,
    feed: StoreFeed,
    service: MapService = Depends(get_map_service)
):
    """Replaces the link graph; applied at the next tick boundary."""
    snapshot = service.submit_feed(feed.tangles, feed.links)
    return FeedAccepted(nodes=len(snapshot.nodes), edges=len(snapshot.edges))

@router.post("/gestures", response_model=list[Intent], tags=["Input"])
async def handle_gesture(
    payload: GesturePayload,
    service: MapService = Depends(get_map_service)
):
    return service.handle_gesture(payload.root)

@router.get("/intents", response_model=list[Intent], tags=["Input"])
async def drain_intents(service: MapService = Depends(get_map_service)):
    return service.drain_intents()

@router.get("/frame", response_model=Frame, tags=["Rendering"])
async def get_frame(service: MapService = Depends(get_map_service)):
    return service.latest_frame

@router.post("/tick", response_model=Frame, tags=["Rendering"])
@limiter.limit("600/minute")
async def tick(
    request: Request,
    service: MapService = Depends(get_map_service)
):
    """Advances one tick for hosts that drive the map from their own frame clock."""
    return service.step()

@router.post("/resize", status_code=status.HTTP_204_NO_CONTENT, tags=["Viewport"])
async def resize(
    resize_request: ResizeRequest,
    service: MapService = Depends(get_map_service)
):
    service.resize(resize_request.width, resize_request.height)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/viewport/reset", status_code=status.HTTP_204_NO_CONTENT, tags=["Viewport"])
async def reset_viewport(service: MapService = Depends(get_map_service)):
    service.reset_view()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/visibility", status_code=status.HTTP_204_NO_CONTENT, tags=["Viewport"])
async def set_visibility(
    visibility: VisibilityRequest,
    service: MapService = Depends(get_map_service)
):
    service.set_visible(visibility.visible)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/search", status_code=status.HTTP_204_NO_CONTENT, tags=["Viewport"])
async def search(
    search_request: SearchRequest,
    service: MapService = Depends(get_map_service)
):
    service.search(search_request.query)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/nodes/{node_id}", response_model=NodeView, tags=["Nodes"])
async def get_node(
    node_id: int,
    service: MapService = Depends(get_map_service)
):
    return service.node_view(node_id)

@router.post("/nodes/{node_id}/focus", status_code=status.HTTP_204_NO_CONTENT, tags=["Nodes"])
async def focus_node(
    node_id: int,
    service: MapService = Depends(get_map_service)
):
    """Centres the viewport on a tangle, e.g. the first search hit."""
    service.focus(node_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
