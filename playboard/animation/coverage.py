"""Defensive coverage patterns.

A pattern is a list of normalized target positions in [0, 1] x [0, 1].
Defenders take pattern slots by their order in the defense collection
when playback starts. Defenders without a slot, and every defender under
a pattern with no positions, pursue the nearest offense player instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.point import Point


@dataclass(frozen=True)
class CoveragePattern:
    """A named set of zone targets, one per defender slot."""
    id: str
    name: str
    positions: tuple[Point, ...] = ()
    description: str = ""

    @property
    def is_man(self) -> bool:
        """No fixed assignments; every defender pursues."""
        return not self.positions

    def target_for(self, slot: int, width: float, height: float) -> Optional[Point]:
        """Field position for a defender slot, or None to pursue."""
        if slot < 0 or slot >= len(self.positions):
            return None
        target = self.positions[slot]
        return Point(target.x * width, target.y * height)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "positions": [p.to_dict() for p in self.positions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CoveragePattern:
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            positions=tuple(Point.from_dict(p) for p in data.get("positions", [])),
            description=data.get("description", ""),
        )


def _pattern(id: str, name: str, description: str, positions: Sequence[tuple]) -> CoveragePattern:
    return CoveragePattern(
        id=id,
        name=name,
        description=description,
        positions=tuple(Point(x, y) for x, y in positions),
    )


# Targets are fractions of the field; (0, 0) is the top-left corner
DEFAULT_COVERAGES: dict[str, CoveragePattern] = {
    "cover-2": _pattern(
        "cover-2", "Cover 2", "Two deep safeties, three underneath",
        [(0.2, 0.15), (0.8, 0.15), (0.3, 0.35), (0.5, 0.35), (0.7, 0.35)],
    ),
    "cover-3": _pattern(
        "cover-3", "Cover 3", "Three deep zones, two underneath",
        [(0.2, 0.15), (0.5, 0.15), (0.8, 0.15), (0.35, 0.35), (0.65, 0.35)],
    ),
    "man-coverage": _pattern(
        "man-coverage", "Man Coverage", "Man-to-man, follow nearest receiver",
        [],
    ),
    "cover-4": _pattern(
        "cover-4", "Cover 4", "Four deep zones, one underneath",
        [(0.2, 0.15), (0.4, 0.15), (0.6, 0.15), (0.8, 0.15), (0.5, 0.4)],
    ),
}


def get_coverage(pattern_id: Optional[str]) -> Optional[CoveragePattern]:
    """Look up a default pattern by id. None or unknown ids give None."""
    if pattern_id is None:
        return None
    return DEFAULT_COVERAGES.get(pattern_id)
