# tanglemap/services/map_service.py
import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from contextlib import suppress
from tanglemap.core.config import Settings, settings as default_settings
from tanglemap.core.exceptions import NodeNotFoundException
from tanglemap.models.frame import Frame
from tanglemap.models.gestures import GestureEvent
from tanglemap.models.graph import GraphSnapshot, LinkRecord, NodeView, TangleRecord
from tanglemap.models.intents import Intent
from tanglemap.services.interaction import InteractionController
from tanglemap.services.layout_engine import LayoutEngine, LayoutParams
from tanglemap.services.renderer import Renderer
from tanglemap.services.snapshot_builder import SnapshotBuilder
from tanglemap.services.viewport import Viewport

logger = logging.getLogger(__name__)

IntentListener = Callable[[Intent], None]

class MapService:
    """
    Owns one tangle map: the layout, the viewport, gesture handling and the
    fixed-interval loop that ticks and redraws it.

    Snapshots may be submitted at any time but are only applied at the start
    of `step()`, so a tick never sees half of a rebuild.
    """

    def __init__(self, config: Settings | None = None, seed: int | None = None):
        self.config = config or default_settings
        self.builder = SnapshotBuilder()
        self.engine = LayoutEngine(LayoutParams.from_settings(self.config), seed=seed)
        self.viewport = Viewport(
            self.config.CANVAS_WIDTH,
            self.config.CANVAS_HEIGHT,
            zoom_min=self.config.ZOOM_MIN,
            zoom_max=self.config.ZOOM_MAX,
        )
        self.controller = InteractionController(
            self.engine,
            self.viewport,
            hit_radius_px=self.config.HIT_RADIUS_PX,
            drag_threshold_px=self.config.DRAG_THRESHOLD_PX,
            double_click_ms=self.config.DOUBLE_CLICK_MS,
        )
        self.renderer = Renderer(
            node_radius=self.config.NODE_RADIUS,
            label_min_zoom=self.config.LABEL_MIN_ZOOM,
            label_max_chars=self.config.LABEL_MAX_CHARS,
        )
        self.search_query = ""
        self.visible = True
        self.latest_frame: Frame = self._render()
        self.intents: asyncio.Queue = asyncio.Queue(maxsize=max(1, self.config.INTENT_QUEUE_SIZE))

        self._pending: GraphSnapshot | None = None
        self._listeners: list[IntentListener] = []
        self._visible_event = asyncio.Event()
        self._visible_event.set()
        self._task: asyncio.Task | None = None

    @property
    def snapshot(self) -> GraphSnapshot:
        return self.engine.snapshot

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # --- Note store side ---
    def submit_feed(self, tangles: Iterable[TangleRecord], links: Iterable[LinkRecord]) -> GraphSnapshot:
        snapshot = self.builder.build(tangles, links)
        self.submit_snapshot(snapshot)
        return snapshot

    def submit_snapshot(self, snapshot: GraphSnapshot) -> None:
        # Only the newest snapshot matters; an unapplied older one is simply replaced.
        self._pending = snapshot

    # --- Loop ---
    def step(self) -> Frame:
        pending, self._pending = self._pending, None
        if pending is not None:
            self._apply(pending)
        self.engine.tick(center=self.viewport.pan)
        self.latest_frame = self._render()
        return self.latest_frame

    def _apply(self, snapshot: GraphSnapshot) -> None:
        diff = self.builder.diff(self.engine.snapshot, snapshot)
        self.engine.apply_snapshot(snapshot, center=self.viewport.pan)
        self.controller.reconcile()
        if diff.is_title_only:
            logger.debug("Applied title-only snapshot (%d retitled).", len(diff.retitled))
        else:
            logger.info(
                "Applied snapshot: %d nodes, %d edges (+%d/-%d nodes).",
                len(snapshot.nodes), len(snapshot.edges), len(diff.added), len(diff.removed),
            )

    def _render(self) -> Frame:
        return self.renderer.render(
            self.engine.snapshot,
            self.engine,
            self.viewport,
            self.controller,
            search_query=self.search_query,
        )

    async def run(self) -> None:
        interval = self.config.TICK_INTERVAL_MS / 1000.0
        deadline = time.monotonic()
        while True:
            if not self._visible_event.is_set():
                await self._visible_event.wait()
                deadline = time.monotonic()
            self.step()
            deadline += interval
            delay = deadline - time.monotonic()
            if delay < 0:
                # Fell behind; skip the missed ticks instead of bursting to catch up.
                deadline = time.monotonic()
                delay = 0
            await asyncio.sleep(delay)

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.create_task(self.run())
            logger.info("Tangle map loop started (%d ms interval).", self.config.TICK_INTERVAL_MS)
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Tangle map loop stopped after %d ticks.", self.engine.tick_count)

    def set_visible(self, visible: bool) -> None:
        if visible == self.visible:
            return
        self.visible = visible
        if visible:
            self._visible_event.set()
        else:
            self._visible_event.clear()
        logger.info("Tangle map %s.", "resumed" if visible else "paused")

    # --- Host window side ---
    def add_listener(self, listener: IntentListener) -> None:
        self._listeners.append(listener)

    def handle_gesture(self, event: GestureEvent) -> list[Intent]:
        intents = self.controller.handle(event)
        for intent in intents:
            self._enqueue(intent)
            for listener in self._listeners:
                listener(intent)
        return intents

    def _enqueue(self, intent: Intent) -> None:
        if self.intents.full():
            # Nobody is draining; keep the newest intents only.
            dropped = self.intents.get_nowait()
            logger.debug("Intent queue full; dropped %s intent.", dropped.kind)
        self.intents.put_nowait(intent)

    def drain_intents(self) -> list[Intent]:
        drained = []
        while not self.intents.empty():
            drained.append(self.intents.get_nowait())
        return drained

    def resize(self, width: float, height: float) -> None:
        self.viewport.resize(width, height)

    def search(self, query: str) -> None:
        self.search_query = query

    def reset_view(self) -> None:
        self.viewport.reset()

    def focus(self, node_id: int) -> None:
        """Pans so the given tangle sits at the centre of the canvas; zoom is kept."""
        self._require(node_id)
        self.viewport.center_on(self.engine.position(node_id))

    def _require(self, node_id: int) -> None:
        if not self.engine.snapshot.has_node(node_id) or not self.engine.has(node_id):
            raise NodeNotFoundException(f"Tangle {node_id} is not on the map.")

    def node_view(self, node_id: int) -> NodeView:
        self._require(node_id)
        node = self.engine.snapshot.nodes[node_id]
        state = self.engine.state(node_id)
        return NodeView(
            id=node.id,
            title=node.title,
            color=node.color,
            star=node.star,
            position=state.position,
            velocity=state.velocity,
            pinned=state.pinned,
            selected=node_id in self.controller.selection,
        )
