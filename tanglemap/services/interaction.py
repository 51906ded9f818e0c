# tanglemap/services/interaction.py
import logging
from enum import Enum
from tanglemap.core.config import settings
from tanglemap.models.geometry import Point, distance
from tanglemap.models.gestures import (
    Button,
    GestureEvent,
    Modifier,
    MoveEvent,
    PinchEvent,
    PressEvent,
    ReleaseEvent,
    ScrollEvent,
)
from tanglemap.models.intents import Intent, LinkIntent, OpenIntent, PositionsIntent
from tanglemap.services.layout_engine import LayoutEngine
from tanglemap.services.viewport import Viewport

logger = logging.getLogger(__name__)

class GestureState(str, Enum):
    IDLE = "idle"
    PAN_DRAGGING = "pan_dragging"
    NODE_DRAGGING = "node_dragging"
    PENDING_CLICK = "pending_click"
    LINK_DRAGGING = "link_dragging"
    LASSO_SELECTING = "lasso_selecting"

class InteractionController:
    """
    Turns pointer gestures into viewport changes, node drags, selection changes
    and intents for the host window.

    Every public entry point first calls `reconcile()`, so a node deleted by the
    note store while it is captured drops the gesture back to IDLE instead of
    touching a node that no longer exists.
    """

    def __init__(
        self,
        engine: LayoutEngine,
        viewport: Viewport,
        hit_radius_px: float = settings.HIT_RADIUS_PX,
        drag_threshold_px: float = settings.DRAG_THRESHOLD_PX,
        double_click_ms: float = settings.DOUBLE_CLICK_MS,
    ):
        self.engine = engine
        self.viewport = viewport
        self.hit_radius_px = hit_radius_px
        self.drag_threshold_px = drag_threshold_px
        self.double_click_ms = double_click_ms

        self.state = GestureState.IDLE
        self.selection: set[int] = set()
        self._captured: int | None = None
        self._press_point = Point(0.0, 0.0)
        self._press_time = 0.0
        self._last_pointer = Point(0.0, 0.0)
        self._pan_moved = False
        self._drag_offsets: dict[int, Point] = {}
        self._last_click: tuple[int, float] | None = None
        self._link_end: Point | None = None
        self._lasso: tuple[Point, Point] | None = None

        self._handlers = {
            "press": self._on_press,
            "move": self._on_move,
            "release": self._on_release,
            "scroll": self._on_scroll,
            "pinch": self._on_pinch,
        }

    @property
    def captured_node(self) -> int | None:
        return self._captured

    def handle(self, event: GestureEvent) -> list[Intent]:
        self.reconcile()
        return self._handlers[event.kind](event)

    def hit_test(self, point: Point) -> int | None:
        """Nearest node within the hit radius in screen space; snapshot order breaks ties."""
        best_id = None
        best_distance = 0.0
        for node_id, position in self.engine.positions().items():
            gap = distance(self.viewport.to_screen(position), point)
            if gap > self.hit_radius_px:
                continue
            if best_id is None or gap < best_distance:
                best_id = node_id
                best_distance = gap
        return best_id

    def reconcile(self) -> None:
        if self._captured is not None and not self.engine.has(self._captured):
            logger.info("Tangle %s disappeared during a %s gesture; resetting.", self._captured, self.state.value)
            self.cancel()
        self.selection = {node_id for node_id in self.selection if self.engine.has(node_id)}
        if self._last_click is not None and not self.engine.has(self._last_click[0]):
            self._last_click = None

    def cancel(self) -> None:
        for node_id in self._drag_offsets:
            if self.engine.has(node_id):
                self.engine.unpin(node_id)
        self._drag_offsets = {}
        self._captured = None
        self._link_end = None
        self._lasso = None
        self._pan_moved = False
        self.state = GestureState.IDLE

    # --- Overlays for the renderer ---
    def link_preview(self) -> tuple[Point, Point] | None:
        if self.state != GestureState.LINK_DRAGGING or self._captured is None or self._link_end is None:
            return None
        return self.viewport.to_screen(self.engine.position(self._captured)), self._link_end

    def lasso_rect(self) -> tuple[Point, Point] | None:
        """Screen-space (top_left, bottom_right) of the active lasso."""
        if self.state != GestureState.LASSO_SELECTING or self._lasso is None:
            return None
        first = self.viewport.to_screen(self._lasso[0])
        second = self.viewport.to_screen(self._lasso[1])
        return (
            Point(min(first.x, second.x), min(first.y, second.y)),
            Point(max(first.x, second.x), max(first.y, second.y)),
        )

    # --- Event handlers ---
    def _on_press(self, event: PressEvent) -> list:
        point = Point(event.x, event.y)
        if not point.is_finite():
            logger.warning("Ignoring press at non-finite position.")
            return []
        if self.state != GestureState.IDLE:
            # The release of the previous gesture never arrived.
            self.cancel()

        self._press_point = point
        self._press_time = event.time_ms
        self._last_pointer = point

        if event.button == Button.SECONDARY:
            node_id = self.hit_test(point)
            if node_id is not None:
                self._captured = node_id
                self._link_end = point
                self._last_click = None
                self.state = GestureState.LINK_DRAGGING
            return []

        if event.button != Button.PRIMARY:
            return []

        if Modifier.SHIFT in event.modifiers and Modifier.ALT in event.modifiers:
            anchor = self.viewport.to_simulation(point)
            self.selection = set()
            self._lasso = (anchor, anchor)
            self._last_click = None
            self.state = GestureState.LASSO_SELECTING
            return []

        node_id = self.hit_test(point)
        if node_id is None:
            self._pan_moved = False
            self.state = GestureState.PAN_DRAGGING
            return []

        if Modifier.CTRL in event.modifiers:
            if node_id in self.selection:
                self.selection.discard(node_id)
            else:
                self.selection.add(node_id)
            return []

        self._captured = node_id
        self.state = GestureState.PENDING_CLICK
        return []

    def _on_move(self, event: MoveEvent) -> list:
        point = Point(event.x, event.y)
        if not point.is_finite():
            logger.warning("Ignoring move to non-finite position.")
            return []

        if self.state == GestureState.PENDING_CLICK:
            if distance(point, self._press_point) > self.drag_threshold_px:
                self._begin_node_drag()
                self._drag_to(point)
        elif self.state == GestureState.NODE_DRAGGING:
            self._drag_to(point)
        elif self.state == GestureState.PAN_DRAGGING:
            self.viewport.pan_by(point - self._last_pointer)
            if distance(point, self._press_point) > self.drag_threshold_px:
                self._pan_moved = True
                self._last_click = None
        elif self.state == GestureState.LINK_DRAGGING:
            self._link_end = point
        elif self.state == GestureState.LASSO_SELECTING and self._lasso is not None:
            self._lasso = (self._lasso[0], self.viewport.to_simulation(point))

        self._last_pointer = point
        return []

    def _on_release(self, event: ReleaseEvent) -> list:
        point = Point(event.x, event.y)
        if not point.is_finite():
            point = self._last_pointer

        intents = []
        if self.state == GestureState.PENDING_CLICK and self._captured is not None:
            intents = self._click(self._captured, self._press_time)
        elif self.state == GestureState.NODE_DRAGGING:
            self._drag_to(point)
            positions = {
                node_id: self.engine.position(node_id)
                for node_id in self._drag_offsets
                if self.engine.has(node_id)
            }
            if positions:
                intents = [PositionsIntent(positions=positions)]
        elif self.state == GestureState.PAN_DRAGGING:
            if not self._pan_moved:
                self.selection = set()
        elif self.state == GestureState.LINK_DRAGGING and self._captured is not None:
            target_id = self.hit_test(point)
            if target_id is not None and target_id != self._captured:
                intents = [LinkIntent(source_id=self._captured, target_id=target_id)]
        elif self.state == GestureState.LASSO_SELECTING and self._lasso is not None:
            self._select_in_lasso(self._lasso[0], self.viewport.to_simulation(point))

        self.cancel()
        return intents

    def _on_scroll(self, event: ScrollEvent) -> list:
        if self.state != GestureState.NODE_DRAGGING:
            self.viewport.zoom_at(Viewport.scroll_factor(event.dy), Point(event.x, event.y))
        return []

    def _on_pinch(self, event: PinchEvent) -> list:
        if self.state != GestureState.NODE_DRAGGING:
            self.viewport.zoom_at(event.scale, Point(event.x, event.y))
        return []

    # --- Helpers ---
    def _click(self, node_id: int, time_ms: float) -> list:
        previous = self._last_click
        if previous is not None and previous[0] == node_id:
            elapsed = time_ms - previous[1]
            if 0.0 <= elapsed <= self.double_click_ms:
                self._last_click = None
                return [OpenIntent(tangle_id=node_id)]
        self._last_click = (node_id, time_ms)
        self.selection = {node_id}
        return []

    def _begin_node_drag(self) -> None:
        captured = self._captured
        if len(self.selection) > 1 and captured in self.selection:
            group = [node_id for node_id in self.selection if self.engine.has(node_id)]
        else:
            group = [captured]

        # A drag between two clicks means they are no longer a double-click.
        self._last_click = None
        origin = self.engine.position(captured)
        self._drag_offsets = {}
        for node_id in group:
            self.engine.pin(node_id)
            self._drag_offsets[node_id] = self.engine.position(node_id) - origin
        self.state = GestureState.NODE_DRAGGING

    def _drag_to(self, point: Point) -> None:
        target = self.viewport.to_simulation(point)
        for node_id, offset in self._drag_offsets.items():
            if self.engine.has(node_id):
                self.engine.move_to(node_id, target + offset)

    def _select_in_lasso(self, first: Point, second: Point) -> None:
        left, right = min(first.x, second.x), max(first.x, second.x)
        top, bottom = min(first.y, second.y), max(first.y, second.y)
        self.selection = {
            node_id
            for node_id, position in self.engine.positions().items()
            if left <= position.x <= right and top <= position.y <= bottom
        }
