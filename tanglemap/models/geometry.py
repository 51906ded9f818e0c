# tanglemap/models/geometry.py
import math
from typing import NamedTuple

class Point(NamedTuple):
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other[0], self.y + other[1])

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other[0], self.y - other[1])

    def scale(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

ORIGIN = Point(0.0, 0.0)

def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
