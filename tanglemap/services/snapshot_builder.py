# tanglemap/services/snapshot_builder.py
import logging
from collections.abc import Iterable
from pydantic import BaseModel, Field
from tanglemap.models.graph import (
    DEFAULT_NODE_COLOR,
    Edge,
    GraphSnapshot,
    LinkRecord,
    MapNode,
    TangleRecord,
)

logger = logging.getLogger(__name__)

class SnapshotDiff(BaseModel):
    added: list[int] = Field(default_factory=list)
    removed: list[int] = Field(default_factory=list)
    retitled: list[int] = Field(default_factory=list)
    edges_changed: bool = False

    @property
    def is_title_only(self) -> bool:
        return not (self.added or self.removed or self.edges_changed)

class SnapshotBuilder:
    """Turns the note store's tangle and link records into a GraphSnapshot."""

    def build(self, tangles: Iterable[TangleRecord], links: Iterable[LinkRecord]) -> GraphSnapshot:
        nodes: dict[int, MapNode] = {}
        for record in tangles:
            if record.is_deleted:
                # A later delete record for the same id wins over an earlier live one.
                nodes.pop(record.id, None)
                continue
            nodes[record.id] = MapNode(
                id=record.id,
                title=record.title,
                color=record.color or DEFAULT_NODE_COLOR,
                star=record.star,
                saved_position=record.position,
            )

        counts: dict[tuple[int, int], int] = {}
        dropped = 0
        for link in links:
            if link.source_id not in nodes or link.target_id not in nodes:
                dropped += 1
                continue
            pair = (link.source_id, link.target_id)
            counts[pair] = counts.get(pair, 0) + 1

        if dropped:
            logger.debug("Dropped %d dangling link(s) while building snapshot.", dropped)

        edges = tuple(
            Edge(source_id=source_id, target_id=target_id, multiplicity=count)
            for (source_id, target_id), count in counts.items()
        )
        return GraphSnapshot(nodes=nodes, edges=edges)

    @staticmethod
    def diff(old: GraphSnapshot, new: GraphSnapshot) -> SnapshotDiff:
        old_ids = set(old.nodes)
        new_ids = set(new.nodes)
        retitled = [
            node_id for node_id in new.nodes
            if node_id in old_ids and old.nodes[node_id].title != new.nodes[node_id].title
        ]
        return SnapshotDiff(
            added=[node_id for node_id in new.nodes if node_id not in old_ids],
            removed=[node_id for node_id in old.nodes if node_id not in new_ids],
            retitled=retitled,
            edges_changed=set(old.edges) != set(new.edges),
        )
