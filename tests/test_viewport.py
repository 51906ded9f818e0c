import math

import pytest

from tanglemap.models.geometry import Point
from tanglemap.services.viewport import Viewport


def make_viewport(pan=(0.0, 0.0), zoom=1.0) -> Viewport:
    viewport = Viewport(800, 600, zoom_min=0.2, zoom_max=5.0)
    viewport.pan = Point(*pan)
    viewport.zoom = zoom
    return viewport


@pytest.mark.parametrize("pan", [(0.0, 0.0), (123.4, -56.7), (-1e4, 3e3)])
@pytest.mark.parametrize("zoom", [0.2, 0.75, 1.0, 3.3, 5.0])
@pytest.mark.parametrize("point", [(0.0, 0.0), (400.0, 300.0), (799.5, 12.25), (-40.0, 900.0)])
def test_to_screen_inverts_to_simulation(pan, zoom, point):
    viewport = make_viewport(pan, zoom)
    round_trip = viewport.to_screen(viewport.to_simulation(Point(*point)))
    assert round_trip.x == pytest.approx(point[0], abs=1e-6)
    assert round_trip.y == pytest.approx(point[1], abs=1e-6)


@pytest.mark.parametrize("factor", [0.5, 0.9, 1.1, 2.0, 100.0, 0.001])
@pytest.mark.parametrize("anchor", [(400.0, 300.0), (0.0, 0.0), (733.0, 41.0)])
def test_zoom_keeps_anchor_fixed(factor, anchor):
    viewport = make_viewport((25.0, -80.0), 1.5)
    before = viewport.to_simulation(Point(*anchor))

    viewport.zoom_at(factor, Point(*anchor))

    after = viewport.to_simulation(Point(*anchor))
    assert after.x == pytest.approx(before.x, abs=1e-9)
    assert after.y == pytest.approx(before.y, abs=1e-9)


def test_zoom_is_clamped():
    viewport = make_viewport()
    viewport.zoom_at(1000.0, Point(10.0, 10.0))
    assert viewport.zoom == 5.0
    viewport.zoom_at(1e-9, Point(10.0, 10.0))
    assert viewport.zoom == 0.2


def test_pan_converts_screen_delta_by_zoom():
    viewport = make_viewport(zoom=2.0)
    viewport.pan_by(Point(10.0, -4.0))
    assert viewport.pan == Point(-5.0, 2.0)


def test_pan_keeps_dragged_point_under_pointer():
    viewport = make_viewport(zoom=0.5)
    grabbed = viewport.to_simulation(Point(100.0, 100.0))
    viewport.pan_by(Point(30.0, 20.0))
    moved = viewport.to_screen(grabbed)
    assert moved.x == pytest.approx(130.0)
    assert moved.y == pytest.approx(120.0)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_input_never_reaches_state(bad):
    viewport = make_viewport((5.0, 5.0), 1.0)

    viewport.pan_by(Point(bad, 1.0))
    viewport.zoom_at(bad, Point(10.0, 10.0))
    viewport.zoom_at(-2.0, Point(10.0, 10.0))
    viewport.zoom_at(2.0, Point(bad, bad))

    assert viewport.pan.is_finite()
    assert math.isfinite(viewport.zoom)
    # The NaN anchor falls back to the screen centre, which maps to pan.
    assert viewport.pan == Point(5.0, 5.0)
    assert viewport.zoom == 2.0


def test_scroll_factor():
    assert Viewport.scroll_factor(-1.0) == pytest.approx(1.1)
    assert Viewport.scroll_factor(1.0) == pytest.approx(0.9)
    assert Viewport.scroll_factor(50.0) > 0
    assert Viewport.scroll_factor(math.nan) == 1.0


def test_resize_moves_screen_center_and_clamps():
    viewport = make_viewport()
    viewport.resize(1024, 768)
    assert viewport.screen_center == Point(512.0, 384.0)
    viewport.resize(-5, math.nan)
    assert viewport.width == 1.0
    assert viewport.height == 1.0


def test_reset_and_center_on():
    viewport = make_viewport((10.0, 10.0), 3.0)
    viewport.center_on(Point(-7.0, 2.0))
    assert viewport.to_simulation(viewport.screen_center) == Point(-7.0, 2.0)
    viewport.reset()
    assert viewport.pan == Point(0.0, 0.0)
    assert viewport.zoom == 1.0
