"""2D point implementation for the board.

All positions on the board are Points in canvas-local pixels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """Immutable 2D point / vector.

    Coordinate system:
        Origin (0, 0) = Top-left corner of the board
        +X = Right
        +Y = Down (toward the offense's backfield)

    All units in pixels.
    """
    x: float = 0.0
    y: float = 0.0

    # =========================================================================
    # Arithmetic Operations
    # =========================================================================

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Point:
        return Point(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Point:
        return Point(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> Point:
        if scalar == 0:
            return Point(0, 0)
        return Point(self.x / scalar, self.y / scalar)

    # =========================================================================
    # Vector Operations
    # =========================================================================

    def length(self) -> float:
        """Magnitude of the vector from the origin."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Point) -> float:
        """Euclidean distance to another point."""
        return math.hypot(other.x - self.x, other.y - self.y)

    def lerp(self, other: Point, t: float) -> Point:
        """Linear interpolation to another point."""
        return Point(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t
        )

    def midpoint(self, other: Point) -> Point:
        """Point halfway to another point."""
        return Point((self.x + other.x) / 2, (self.y + other.y) / 2)

    def step_toward(self, target: Point, distance: float) -> Point:
        """Move up to `distance` toward target without passing it.

        A zero-length direction leaves the point where it is.
        """
        gap = self.distance_to(target)
        if gap == 0 or distance <= 0:
            return self
        if distance >= gap:
            return target
        return self.lerp(target, distance / gap)

    def translated(self, dx: float, dy: float) -> Point:
        """Return the point shifted by (dx, dy)."""
        return Point(self.x + dx, self.y + dy)

    # =========================================================================
    # Utility
    # =========================================================================

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Point:
        return cls(float(data.get("x", 0.0)), float(data.get("y", 0.0)))

    def __iter__(self):
        yield self.x
        yield self.y

    def __repr__(self) -> str:
        return f"Point({self.x:.2f}, {self.y:.2f})"

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"

    @classmethod
    def zero(cls) -> Point:
        """Origin."""
        return cls(0, 0)
