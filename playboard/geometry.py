"""Geometry kernel.

Pure functions over polylines: path strings, smoothing, arc length,
arrow clipping and rectangle tests. Nothing here holds state.

Every function is total for the inputs it documents. Callers filter
out malformed routes (fewer than two points) before asking for
arc-length positions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .core.point import Point


# =============================================================================
# Path Strings
# =============================================================================

def _fmt(value: float) -> str:
    """Format a coordinate without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def smooth_path(points: Sequence[Point]) -> str:
    """SVG path through the points using quadratic segments.

    Each interior point is a control point and the midpoint between it
    and its successor is the through-point, so the curve rounds every
    corner without overshooting. The path ends with a straight line into
    the final point.
    """
    if len(points) < 2:
        return ""
    first = points[0]
    if len(points) == 2:
        last = points[1]
        return f"M {_fmt(first.x)} {_fmt(first.y)} L {_fmt(last.x)} {_fmt(last.y)}"

    parts = [f"M {_fmt(first.x)} {_fmt(first.y)}"]
    for i in range(1, len(points) - 1):
        curr = points[i]
        mid = curr.midpoint(points[i + 1])
        parts.append(
            f"Q {_fmt(curr.x)} {_fmt(curr.y)} {_fmt(mid.x)} {_fmt(mid.y)}"
        )
    last = points[-1]
    parts.append(f"L {_fmt(last.x)} {_fmt(last.y)}")
    return " ".join(parts)


def segment_path(points: Sequence[Point]) -> str:
    """SVG path of straight segments (rigid and marker routes)."""
    if len(points) < 2:
        return ""
    return "M " + " L ".join(f"{_fmt(p.x)},{_fmt(p.y)}" for p in points)


# =============================================================================
# Point Reduction
# =============================================================================

def smooth_positions(points: Sequence[Point]) -> list[Point]:
    """One pass of a 3-point moving average over the interior points.

    Endpoints are kept. Fewer than three points come back unchanged.
    """
    if len(points) < 3:
        return list(points)

    smoothed = [points[0]]
    for i in range(1, len(points) - 1):
        prev, curr, nxt = points[i - 1], points[i], points[i + 1]
        smoothed.append(Point(
            (prev.x + curr.x + nxt.x) / 3,
            (prev.y + curr.y + nxt.y) / 3,
        ))
    smoothed.append(points[-1])
    return smoothed


# =============================================================================
# Arc Length
# =============================================================================

def path_length(points: Sequence[Point]) -> float:
    """Sum of Euclidean segment lengths."""
    return sum(points[i - 1].distance_to(points[i]) for i in range(1, len(points)))


def position_at_distance(points: Sequence[Point], distance: float) -> Point:
    """Point at cumulative arc length `distance` along the polyline.

    Clamped to the first point for distance <= 0 and to the last point
    once distance reaches the path length. Zero-length segments are
    stepped over.
    """
    if not points:
        return Point.zero()
    if distance <= 0:
        return points[0]

    travelled = 0.0
    for i in range(1, len(points)):
        start, end = points[i - 1], points[i]
        segment = start.distance_to(end)
        if segment == 0:
            continue
        if distance <= travelled + segment:
            return start.lerp(end, (distance - travelled) / segment)
        travelled += segment

    return points[-1]


# =============================================================================
# Arrows
# =============================================================================

def clip_for_arrow(points: Sequence[Point], gap: float) -> list[Point]:
    """Shorten the final segment by `gap` pixels so an arrowhead fits.

    The clipped end never passes the start of the final segment. A
    zero-length final segment uses ratio 0, which collapses the end onto
    the previous point instead of dividing by zero.
    """
    if len(points) < 2:
        return list(points)

    before, last = points[-2], points[-1]
    segment = before.distance_to(last)
    stop = max(0.0, segment - gap)
    ratio = stop / segment if segment > 0 else 0.0

    clipped = list(points[:-1])
    clipped.append(before.lerp(last, ratio))
    return clipped


def arrowhead(
    points: Sequence[Point],
    length: float = 7.0,
    width: float = 4.0,
) -> Optional[tuple[Point, Point, Point]]:
    """Triangle (tip, left, right) for an arrow at the end of the polyline.

    Oriented along the final segment. Returns None when there is no
    direction to point in.
    """
    if len(points) < 2:
        return None
    before, tip = points[-2], points[-1]
    direction = tip - before
    size = direction.length()
    if size == 0:
        return None

    unit = direction / size
    normal = Point(-unit.y, unit.x)
    base = tip - unit * length
    return (tip, base + normal * width, base - normal * width)


# =============================================================================
# Thumbnails
# =============================================================================

def fit_to_viewbox(
    points: Sequence[Point],
    size: float = 50.0,
    padding: float = 10.0,
) -> list[Point]:
    """Scale and center a polyline inside a square box.

    Uses one scale for both axes so the shape keeps its proportions. A
    zero extent on either axis is treated as 1.
    """
    if not points:
        return []
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    min_x, min_y = min(xs), min(ys)
    width = (max(xs) - min_x) or 1.0
    height = (max(ys) - min_y) or 1.0

    inner = size - padding * 2
    scale = min(inner / width, inner / height)
    offset_x = (size - width * scale) / 2 - min_x * scale
    offset_y = (size - height * scale) / 2 - min_y * scale

    return [Point(p.x * scale + offset_x, p.y * scale + offset_y) for p in points]


# =============================================================================
# Rectangle Tests
# =============================================================================

@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with normalized corners. Bounds are inclusive."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_corners(cls, a: Point, b: Point) -> Rect:
        """Build from two opposite corners given in any order."""
        return cls(min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))

    @classmethod
    def around(cls, center: Point, half_width: float, half_height: float) -> Rect:
        """Bounding box of extent (2*half_width, 2*half_height) at center."""
        return cls(
            center.x - half_width,
            center.y - half_height,
            center.x + half_width,
            center.y + half_height,
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, point: Point) -> bool:
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def overlaps(self, other: Rect) -> bool:
        return not (other.max_x < self.min_x or other.min_x > self.max_x or
                    other.max_y < self.min_y or other.min_y > self.max_y)


def point_in_rect(point: Point, rect: Rect) -> bool:
    """Players and text boxes: anchor point inside the rectangle."""
    return rect.contains(point)


def polyline_in_rect(points: Iterable[Point], rect: Rect) -> bool:
    """Routes: at least one vertex inside the rectangle."""
    return any(rect.contains(p) for p in points)


def circle_in_rect(center: Point, radius: float, rect: Rect) -> bool:
    """Circles: bounding box of the circle overlaps the rectangle.

    Deliberately conservative; a rectangle touching only the corner of
    the bounding box still selects the circle.
    """
    return rect.overlaps(Rect.around(center, radius, radius))


def icon_in_rect(center: Point, size: float, rect: Rect) -> bool:
    """Icons: square bounding box of the given size overlaps the rectangle."""
    half = size / 2
    return rect.overlaps(Rect.around(center, half, half))
