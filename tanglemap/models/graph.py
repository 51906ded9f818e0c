# tanglemap/models/graph.py
from pydantic import BaseModel, ConfigDict, Field
from tanglemap.models.geometry import Point, ORIGIN

DEFAULT_NODE_COLOR = "#b388ff"

# --- Note store feed ---
class TangleRecord(BaseModel):
    id: int
    title: str
    color: str | None = None
    star: str | None = None
    is_deleted: bool = False
    position: Point | None = None

class LinkRecord(BaseModel):
    source_id: int
    target_id: int

class StoreFeed(BaseModel):
    tangles: list[TangleRecord] = Field(default_factory=list)
    links: list[LinkRecord] = Field(default_factory=list)

# --- Snapshot ---
class MapNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    color: str = DEFAULT_NODE_COLOR
    star: str | None = None
    saved_position: Point | None = None

class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_id: int
    target_id: int
    multiplicity: int = 1

    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id

class GraphSnapshot(BaseModel):
    """
    Immutable view of the link graph. Every edge references a node of the same
    snapshot; the builder guarantees it, nothing here re-checks it.
    """
    model_config = ConfigDict(frozen=True)

    nodes: dict[int, MapNode] = Field(default_factory=dict)
    edges: tuple[Edge, ...] = ()

    def has_node(self, node_id: int) -> bool:
        return node_id in self.nodes

    def springs(self) -> list[tuple[int, int]]:
        """Distinct unordered linked pairs, self-loops excluded, in edge order."""
        seen: set[frozenset[int]] = set()
        pairs = []
        for edge in self.edges:
            if edge.is_self_loop:
                continue
            key = frozenset((edge.source_id, edge.target_id))
            if key in seen:
                continue
            seen.add(key)
            pairs.append((edge.source_id, edge.target_id))
        return pairs

    def neighbors(self, node_id: int) -> list[int]:
        result = []
        for edge in self.edges:
            if edge.is_self_loop:
                continue
            if edge.source_id == node_id and edge.target_id not in result:
                result.append(edge.target_id)
            elif edge.target_id == node_id and edge.source_id not in result:
                result.append(edge.source_id)
        return result

EMPTY_SNAPSHOT = GraphSnapshot()

# --- Layout state ---
class NodeState(BaseModel):
    position: Point
    velocity: Point = ORIGIN
    pinned: bool = False

class NodeView(BaseModel):
    id: int
    title: str
    color: str
    star: str | None = None
    position: Point
    velocity: Point
    pinned: bool
    selected: bool
