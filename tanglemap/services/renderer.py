# tanglemap/services/renderer.py
from tanglemap.core.config import settings
from tanglemap.models.frame import EdgeShape, Frame, LassoShape, NodeShape, SelfLoopShape
from tanglemap.models.geometry import Point, clamp, distance
from tanglemap.models.graph import GraphSnapshot
from tanglemap.services.interaction import InteractionController
from tanglemap.services.layout_engine import LayoutEngine
from tanglemap.services.viewport import Viewport

EMPTY_MAP_MESSAGE = "No tangles yet"
BASE_EDGE_WIDTH = 1.5
MAX_EDGE_WIDTH = 6.0
MIN_NODE_RADIUS = 3.0
MAX_NODE_RADIUS = 40.0

def shorten_title(title: str, max_chars: int) -> str:
    if len(title) <= max_chars:
        return title
    return title[: max(1, max_chars - 1)].rstrip() + "…"

class Renderer:
    """Builds a screen-space display list from the current layout; draws nothing itself."""

    def __init__(
        self,
        node_radius: float = settings.NODE_RADIUS,
        label_min_zoom: float = settings.LABEL_MIN_ZOOM,
        label_max_chars: int = settings.LABEL_MAX_CHARS,
    ):
        self.node_radius = node_radius
        self.label_min_zoom = label_min_zoom
        self.label_max_chars = label_max_chars

    def render(
        self,
        snapshot: GraphSnapshot,
        engine: LayoutEngine,
        viewport: Viewport,
        controller: InteractionController | None = None,
        search_query: str = "",
    ) -> Frame:
        zoom = viewport.zoom
        radius = clamp(self.node_radius * zoom, MIN_NODE_RADIUS, MAX_NODE_RADIUS)
        frame = Frame(width=int(viewport.width), height=int(viewport.height), zoom=zoom)

        if not snapshot.nodes:
            frame.message = EMPTY_MAP_MESSAGE
            return frame

        screen: dict[int, Point] = {
            node_id: viewport.to_screen(position)
            for node_id, position in engine.positions().items()
            if node_id in snapshot.nodes
        }

        for edge in snapshot.edges:
            start = screen.get(edge.source_id)
            end = screen.get(edge.target_id)
            if start is None or end is None:
                continue
            if edge.is_self_loop:
                frame.self_loops.append(
                    SelfLoopShape(
                        node_id=edge.source_id,
                        center=Point(start.x + radius, start.y - radius),
                        radius=radius * 0.75,
                    )
                )
                continue
            frame.edges.append(
                EdgeShape(
                    source_id=edge.source_id,
                    target_id=edge.target_id,
                    start=start,
                    end=self._arrow_tip(start, end, radius),
                    width=min(MAX_EDGE_WIDTH, BASE_EDGE_WIDTH * edge.multiplicity),
                )
            )

        selection = controller.selection if controller is not None else set()
        query = search_query.strip().lower()
        show_labels = zoom >= self.label_min_zoom
        for node_id, node in snapshot.nodes.items():
            center = screen.get(node_id)
            if center is None:
                continue
            frame.nodes.append(
                NodeShape(
                    id=node_id,
                    center=center,
                    radius=radius,
                    color=node.color,
                    shape="star" if node.star else "circle",
                    star=node.star,
                    title=node.title,
                    label=shorten_title(node.title, self.label_max_chars) if show_labels else None,
                    selected=node_id in selection,
                    highlighted=bool(query) and query in node.title.lower(),
                    pinned=engine.state(node_id).pinned,
                )
            )

        if controller is not None:
            frame.link_preview = controller.link_preview()
            lasso = controller.lasso_rect()
            if lasso is not None:
                frame.lasso = LassoShape(top_left=lasso[0], bottom_right=lasso[1])
        return frame

    @staticmethod
    def _arrow_tip(start: Point, end: Point, radius: float) -> Point:
        """Pull the line end back to the target's rim so the arrow head stays visible."""
        length = distance(start, end)
        if length <= radius:
            return end
        return end - (end - start).scale(radius / length)
