import pytest

from tanglemap.models.geometry import Point
from tanglemap.models.graph import Edge, GraphSnapshot, LinkRecord, MapNode, TangleRecord
from tanglemap.services.layout_engine import LayoutEngine, LayoutParams
from tanglemap.services.renderer import EMPTY_MAP_MESSAGE, Renderer, shorten_title
from tanglemap.services.snapshot_builder import SnapshotBuilder
from tanglemap.services.viewport import Viewport


@pytest.fixture
def viewport():
    return Viewport(800, 600, zoom_min=0.2, zoom_max=5.0)


def layout(tangles, links=()):
    snapshot = SnapshotBuilder().build(
        [TangleRecord(**t) for t in tangles],
        [LinkRecord(source_id=s, target_id=t) for s, t in links],
    )
    engine = LayoutEngine(LayoutParams(), seed=1)
    engine.apply_snapshot(snapshot)
    return snapshot, engine


def test_empty_map_shows_message(viewport):
    engine = LayoutEngine(LayoutParams(), seed=1)
    frame = Renderer().render(GraphSnapshot(), engine, viewport)
    assert frame.message == EMPTY_MAP_MESSAGE
    assert frame.nodes == []
    assert (frame.width, frame.height) == (800, 600)


def test_nodes_and_edges_are_in_screen_space(viewport):
    snapshot, engine = layout(
        [
            {"id": 1, "title": "Inbox", "position": (0.0, 0.0)},
            {"id": 2, "title": "Ideas", "position": (100.0, 0.0), "color": "#ff8800"},
        ],
        [(1, 2)],
    )

    frame = Renderer(node_radius=10.0).render(snapshot, engine, viewport)

    assert frame.message is None
    centers = {shape.id: shape.center for shape in frame.nodes}
    assert centers == {1: Point(400.0, 300.0), 2: Point(500.0, 300.0)}
    assert frame.nodes[1].color == "#ff8800"
    (edge,) = frame.edges
    assert edge.start == Point(400.0, 300.0)
    # The arrow stops at the target's rim.
    assert edge.end == Point(490.0, 300.0)
    assert edge.arrow


def test_labels_hidden_when_zoomed_out_and_long_titles_shortened(viewport):
    long_title = "A very long tangle title that keeps going"
    snapshot, engine = layout([{"id": 1, "title": long_title, "position": (0.0, 0.0)}])
    renderer = Renderer(label_min_zoom=0.6, label_max_chars=12)

    (shape,) = renderer.render(snapshot, engine, viewport).nodes
    assert shape.label == shorten_title(long_title, 12)
    assert shape.label.endswith("…")
    assert len(shape.label) <= 12
    assert shape.title == long_title

    viewport.zoom = 0.5
    (shape,) = renderer.render(snapshot, engine, viewport).nodes
    assert shape.label is None


def test_shorten_title_keeps_short_titles():
    assert shorten_title("Inbox", 32) == "Inbox"


def test_self_loop_is_drawn_as_loop_not_edge(viewport):
    snapshot, engine = layout([{"id": 1, "title": "Me", "position": (0.0, 0.0)}], [(1, 1)])

    frame = Renderer(node_radius=10.0).render(snapshot, engine, viewport)

    assert frame.edges == []
    (loop,) = frame.self_loops
    assert loop.node_id == 1
    assert loop.center == Point(410.0, 290.0)
    assert loop.radius == pytest.approx(7.5)


def test_edge_with_missing_endpoint_is_skipped(viewport):
    nodes = {1: MapNode(id=1, title="A", saved_position=Point(0.0, 0.0))}
    snapshot = GraphSnapshot(nodes=nodes, edges=(Edge(source_id=1, target_id=5),))
    engine = LayoutEngine(LayoutParams(), seed=1)
    engine.apply_snapshot(snapshot)

    frame = Renderer().render(snapshot, engine, viewport)

    assert frame.edges == []
    assert [shape.id for shape in frame.nodes] == [1]


def test_repeated_links_draw_thicker_edges(viewport):
    tangles = [
        {"id": 1, "title": "A", "position": (0.0, 0.0)},
        {"id": 2, "title": "B", "position": (100.0, 0.0)},
    ]
    snapshot, engine = layout(tangles, [(1, 2)] * 10 + [(2, 1)])

    frame = Renderer().render(snapshot, engine, viewport)

    widths = {(e.source_id, e.target_id): e.width for e in frame.edges}
    assert widths == {(1, 2): 6.0, (2, 1): 1.5}


def test_search_highlights_and_star_shape(viewport):
    snapshot, engine = layout(
        [
            {"id": 1, "title": "Garden plans", "position": (0.0, 0.0), "star": "★"},
            {"id": 2, "title": "Groceries", "position": (100.0, 0.0)},
        ]
    )

    frame = Renderer().render(snapshot, engine, viewport, search_query="  GARDEN ")

    shapes = {shape.id: shape for shape in frame.nodes}
    assert shapes[1].highlighted and not shapes[2].highlighted
    assert shapes[1].shape == "star" and shapes[1].star == "★"
    assert shapes[2].shape == "circle"

    frame = Renderer().render(snapshot, engine, viewport, search_query="")
    assert not any(shape.highlighted for shape in frame.nodes)


def test_node_radius_follows_zoom(viewport):
    snapshot, engine = layout([{"id": 1, "title": "A", "position": (0.0, 0.0)}])
    viewport.zoom = 2.0
    (shape,) = Renderer(node_radius=10.0).render(snapshot, engine, viewport).nodes
    assert shape.radius == 20.0
