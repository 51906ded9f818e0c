# tanglemap/services/layout_engine.py
import logging
import math
import random
from pydantic import BaseModel
from tanglemap.core.config import Settings, settings
from tanglemap.core.exceptions import NodeNotFoundException
from tanglemap.models.geometry import ORIGIN, Point
from tanglemap.models.graph import EMPTY_SNAPSHOT, GraphSnapshot, MapNode, NodeState

logger = logging.getLogger(__name__)

class LayoutParams(BaseModel):
    repulsion: float = 5000.0
    rest_length: float = 100.0
    spring_k: float = 0.05
    damping: float = 0.85
    centering: float = 0.01
    max_force: float = 20.0
    min_distance: float = 1.0
    spawn_spread: float = 200.0

    @classmethod
    def from_settings(cls, config: Settings) -> "LayoutParams":
        return cls(
            repulsion=config.REPULSION,
            rest_length=config.REST_LENGTH,
            spring_k=config.SPRING_K,
            damping=config.DAMPING,
            centering=config.CENTERING,
            max_force=config.MAX_FORCE,
            min_distance=config.MIN_DISTANCE,
            spawn_spread=config.SPAWN_SPREAD,
        )

class LayoutEngine:
    """
    Continuous force-directed relaxation over the current GraphSnapshot.

    Each tick applies all-pairs repulsion, one spring per linked pair, a light
    pull towards the visual centre and velocity damping. Pinned nodes keep
    their position but still push and pull the others.
    """

    def __init__(self, params: LayoutParams | None = None, seed: int | None = None):
        self.params = params or LayoutParams.from_settings(settings)
        self._rng = random.Random(seed)
        self._snapshot: GraphSnapshot = EMPTY_SNAPSHOT
        self._states: dict[int, NodeState] = {}
        self._springs: list[tuple[int, int]] = []
        self.tick_count = 0

    @property
    def snapshot(self) -> GraphSnapshot:
        return self._snapshot

    def apply_snapshot(self, snapshot: GraphSnapshot, center: Point = ORIGIN) -> None:
        """Swap in a new snapshot, keeping the state of every node that survives it."""
        previous = self._states
        states: dict[int, NodeState] = {}
        for node_id, node in snapshot.nodes.items():
            if node_id in previous:
                states[node_id] = previous[node_id]
            else:
                states[node_id] = NodeState(position=self._spawn_position(node, snapshot, states, center))

        self._states = states
        self._snapshot = snapshot
        self._springs = [
            (source_id, target_id)
            for source_id, target_id in snapshot.springs()
            if source_id in states and target_id in states
        ]

    def _spawn_position(
        self,
        node: MapNode,
        snapshot: GraphSnapshot,
        placed: dict[int, NodeState],
        center: Point,
    ) -> Point:
        if node.saved_position is not None and node.saved_position.is_finite():
            return node.saved_position

        angle = self._rng.uniform(0.0, 2.0 * math.pi)
        for neighbor_id in snapshot.neighbors(node.id):
            neighbor = placed.get(neighbor_id) or self._states.get(neighbor_id)
            if neighbor is not None:
                offset = Point(math.cos(angle), math.sin(angle)).scale(self.params.rest_length)
                return neighbor.position + offset

        radius = self._rng.uniform(0.0, self.params.spawn_spread)
        anchor = center if center.is_finite() else ORIGIN
        return anchor + Point(math.cos(angle), math.sin(angle)).scale(radius)

    def tick(self, center: Point = ORIGIN) -> None:
        self.tick_count += 1
        ids = list(self._states)
        count = len(ids)
        if count == 0:
            return
        if not center.is_finite():
            center = ORIGIN

        p = self.params
        states = [self._states[node_id] for node_id in ids]
        xs = [state.position.x for state in states]
        ys = [state.position.y for state in states]
        fx = [0.0] * count
        fy = [0.0] * count

        # 1. Repulsion between every unordered pair
        for a in range(count):
            for b in range(a + 1, count):
                dx = xs[a] - xs[b]
                dy = ys[a] - ys[b]
                dist = math.hypot(dx, dy)
                if dist == 0.0:
                    angle = self._rng.uniform(0.0, 2.0 * math.pi)
                    ux, uy = math.cos(angle), math.sin(angle)
                else:
                    ux, uy = dx / dist, dy / dist
                dist = max(dist, p.min_distance)
                force = p.repulsion / (dist * dist)
                fx[a] += ux * force
                fy[a] += uy * force
                fx[b] -= ux * force
                fy[b] -= uy * force

        # 2. One spring per linked pair
        index = {node_id: i for i, node_id in enumerate(ids)}
        for source_id, target_id in self._springs:
            a = index[source_id]
            b = index[target_id]
            dx = xs[b] - xs[a]
            dy = ys[b] - ys[a]
            dist = math.hypot(dx, dy)
            if dist == 0.0:
                # No direction to pull along; repulsion separates them first.
                continue
            force = p.spring_k * (dist - p.rest_length)
            fx[a] += dx / dist * force
            fy[a] += dy / dist * force
            fx[b] -= dx / dist * force
            fy[b] -= dy / dist * force

        # 3. Centering, clamping and integration
        for i, state in enumerate(states):
            if state.pinned:
                state.velocity = ORIGIN
                continue

            force_x = fx[i] + (center.x - xs[i]) * p.centering
            force_y = fy[i] + (center.y - ys[i]) * p.centering
            if not (math.isfinite(force_x) and math.isfinite(force_y)):
                force_x = force_y = 0.0
            magnitude = math.hypot(force_x, force_y)
            if magnitude > p.max_force:
                force_x *= p.max_force / magnitude
                force_y *= p.max_force / magnitude

            vx = (state.velocity.x + force_x) * p.damping
            vy = (state.velocity.y + force_y) * p.damping
            if not (math.isfinite(vx) and math.isfinite(vy)):
                vx = vy = 0.0
            state.velocity = Point(vx, vy)
            state.position = Point(xs[i] + vx, ys[i] + vy)

    def has(self, node_id: int) -> bool:
        return node_id in self._states

    def ids(self) -> list[int]:
        return list(self._states)

    def state(self, node_id: int) -> NodeState:
        try:
            return self._states[node_id]
        except KeyError:
            raise NodeNotFoundException(f"Tangle {node_id} is not on the map.") from None

    def position(self, node_id: int) -> Point:
        return self.state(node_id).position

    def positions(self) -> dict[int, Point]:
        return {node_id: state.position for node_id, state in self._states.items()}

    def pin(self, node_id: int) -> None:
        state = self.state(node_id)
        state.pinned = True
        state.velocity = ORIGIN

    def unpin(self, node_id: int) -> None:
        self.state(node_id).pinned = False

    def move_to(self, node_id: int, point: Point) -> None:
        if not point.is_finite():
            logger.warning("Ignoring non-finite position for tangle %s.", node_id)
            return
        state = self.state(node_id)
        state.position = Point(float(point.x), float(point.y))
        state.velocity = ORIGIN

    def kinetic_energy(self) -> float:
        return sum(
            state.velocity.x ** 2 + state.velocity.y ** 2
            for state in self._states.values()
        )
