# tanglemap/services/viewport.py
import logging
import math
from tanglemap.core.config import settings
from tanglemap.models.geometry import ORIGIN, Point, clamp

logger = logging.getLogger(__name__)

SCROLL_ZOOM_STEP = 0.1
MIN_SCROLL_FACTOR = 0.1

class Viewport:
    """
    Maps simulation space to screen pixels and back.

    `pan` is the simulation point shown at the centre of the canvas and `zoom`
    is the number of pixels per simulation unit:

        to_screen(p)     = (p - pan) * zoom + screen_center
        to_simulation(s) = (s - screen_center) / zoom + pan
    """

    def __init__(
        self,
        width: float = settings.CANVAS_WIDTH,
        height: float = settings.CANVAS_HEIGHT,
        zoom_min: float = settings.ZOOM_MIN,
        zoom_max: float = settings.ZOOM_MAX,
    ):
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.width = 1.0
        self.height = 1.0
        self.pan = ORIGIN
        self.zoom = clamp(1.0, zoom_min, zoom_max)
        self.resize(width, height)

    @property
    def screen_center(self) -> Point:
        return Point(self.width / 2.0, self.height / 2.0)

    def to_screen(self, point: Point) -> Point:
        center = self.screen_center
        return Point(
            (point[0] - self.pan.x) * self.zoom + center.x,
            (point[1] - self.pan.y) * self.zoom + center.y,
        )

    def to_simulation(self, point: Point) -> Point:
        center = self.screen_center
        return Point(
            (point[0] - center.x) / self.zoom + self.pan.x,
            (point[1] - center.y) / self.zoom + self.pan.y,
        )

    def pan_by(self, delta: Point) -> None:
        """Drag the content by a screen-space delta."""
        if not (math.isfinite(delta[0]) and math.isfinite(delta[1])):
            logger.warning("Ignoring non-finite pan delta %r.", delta)
            return
        self.pan = Point(
            self.pan.x - delta[0] / self.zoom,
            self.pan.y - delta[1] / self.zoom,
        )

    def zoom_at(self, factor: float, anchor: Point) -> None:
        """Scale by `factor` keeping the simulation point under `anchor` fixed."""
        if not math.isfinite(factor) or factor <= 0.0:
            logger.warning("Ignoring invalid zoom factor %r.", factor)
            return
        if not (math.isfinite(anchor[0]) and math.isfinite(anchor[1])):
            anchor = self.screen_center

        fixed = self.to_simulation(anchor)
        self.zoom = clamp(self.zoom * factor, self.zoom_min, self.zoom_max)
        center = self.screen_center
        self.pan = Point(
            fixed.x - (anchor[0] - center.x) / self.zoom,
            fixed.y - (anchor[1] - center.y) / self.zoom,
        )

    @staticmethod
    def scroll_factor(dy: float) -> float:
        if not math.isfinite(dy):
            return 1.0
        return max(MIN_SCROLL_FACTOR, 1.0 - dy * SCROLL_ZOOM_STEP)

    def resize(self, width: float, height: float) -> None:
        if not math.isfinite(width) or width < 1.0:
            width = 1.0
        if not math.isfinite(height) or height < 1.0:
            height = 1.0
        self.width = float(width)
        self.height = float(height)

    def center_on(self, point: Point) -> None:
        if point.is_finite():
            self.pan = Point(float(point.x), float(point.y))

    def reset(self) -> None:
        self.pan = ORIGIN
        self.zoom = clamp(1.0, self.zoom_min, self.zoom_max)
