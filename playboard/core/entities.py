"""Core entities - Player, Route and annotations.

Entities are plain data. Each variant knows how to hit-test itself
against a selection rectangle and how to produce a translated copy;
everything else lives in the modules that operate on them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from ..geometry import (
    Rect,
    circle_in_rect,
    clip_for_arrow,
    icon_in_rect,
    point_in_rect,
    polyline_in_rect,
    segment_path,
    smooth_path,
)
from .point import Point

logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================

class Team(str, Enum):
    """Which side a player is on."""
    OFFENSE = "offense"
    DEFENSE = "defense"


class RouteStyle(str, Enum):
    """Stroke style of a route."""
    SOLID = "solid"
    DASHED = "dashed"


class LineBreakType(str, Enum):
    """How a route is captured, drawn and animated.

    NONE and SMOOTH_NONE are unarrowed motion markers. They are never
    used for playback.
    """
    RIGID = "rigid"              # Pause-to-pivot, straight segments
    SMOOTH = "smooth"            # Distance-sampled freehand, smoothed
    NONE = "none"                # Two-point straight marker
    SMOOTH_NONE = "smooth-none"  # Freehand marker

    @property
    def is_smooth(self) -> bool:
        return self in (LineBreakType.SMOOTH, LineBreakType.SMOOTH_NONE)

    @property
    def is_marker(self) -> bool:
        return self in (LineBreakType.NONE, LineBreakType.SMOOTH_NONE)

    @classmethod
    def parse(cls, value: Optional[str]) -> LineBreakType:
        """Parse a persisted value, falling back to RIGID."""
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown line break type {value!r}, using rigid")
            return cls.RIGID


class EntityKind(str, Enum):
    """Tag for each entity variant on the board."""
    PLAYER = "player"
    ROUTE = "route"
    TEXT_BOX = "textbox"
    CIRCLE = "circle"
    FOOTBALL = "football"


# =============================================================================
# Players
# =============================================================================

@dataclass
class Player:
    """A placed player.

    (x, y) is the rest position. Playback computes animated positions
    and never writes them back here.

    Attributes:
        id: Unique identifier
        x, y: Rest position (icon center)
        color: Role color ("blue", "qb", "grey", ...)
        team: Offense or defense
        assigned_to: Offense player this defender is covering, if any
    """
    id: str
    x: float
    y: float
    color: str = "blue"
    team: Team = Team.OFFENSE
    assigned_to: Optional[str] = None

    kind = EntityKind.PLAYER

    @property
    def pos(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_offense(self) -> bool:
        return self.team == Team.OFFENSE

    def hits(self, rect: Rect) -> bool:
        return point_in_rect(self.pos, rect)

    def translated(self, dx: float, dy: float) -> Player:
        return replace(self, x=self.x + dx, y=self.y + dy)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "type": self.team.value,
        }
        if self.assigned_to is not None:
            data["assignedTo"] = self.assigned_to
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Player:
        return cls(
            id=str(data["id"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            color=data.get("color", "blue"),
            team=Team(data.get("type", "offense")),
            assigned_to=data.get("assignedTo"),
        )


# =============================================================================
# Routes
# =============================================================================

@dataclass
class Route:
    """An authored path.

    Invariant: a usable route has at least two points. Routes loaded
    from damaged data with fewer points are skipped by every consumer.
    """
    id: str
    points: list[Point]
    style: RouteStyle = RouteStyle.SOLID
    line_break_type: LineBreakType = LineBreakType.RIGID
    color: str = "black"
    show_arrow: bool = True

    kind = EntityKind.ROUTE

    @property
    def is_valid(self) -> bool:
        return len(self.points) >= 2

    @property
    def is_playable(self) -> bool:
        """Can this route drive a player during playback?"""
        return self.is_valid and not self.line_break_type.is_marker

    @property
    def start(self) -> Point:
        return self.points[0]

    def hits(self, rect: Rect) -> bool:
        return polyline_in_rect(self.points, rect)

    def translated(self, dx: float, dy: float) -> Route:
        return replace(self, points=[p.translated(dx, dy) for p in self.points])

    def render_path(self, arrow_gap: float = 15.0) -> str:
        """SVG path for this route, clipped to leave room for its arrow."""
        points = self.points
        if self.show_arrow:
            points = clip_for_arrow(points, arrow_gap)
        if self.line_break_type.is_smooth:
            return smooth_path(points)
        return segment_path(points)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "points": [p.to_dict() for p in self.points],
            "style": self.style.value,
            "lineBreakType": self.line_break_type.value,
            "color": self.color,
            "showArrow": self.show_arrow,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Route:
        line_break_type = LineBreakType.parse(data.get("lineBreakType"))
        show_arrow = data.get("showArrow")
        if show_arrow is None:
            show_arrow = not line_break_type.is_marker
        return cls(
            id=str(data["id"]),
            points=[Point.from_dict(p) for p in data.get("points") or []],
            style=RouteStyle(data.get("style", "solid")),
            line_break_type=line_break_type,
            color=data.get("color", "black"),
            show_arrow=bool(show_arrow),
        )


# =============================================================================
# Annotations
# =============================================================================

@dataclass
class TextBox:
    """A text label anchored at (x, y)."""
    id: str
    x: float
    y: float
    text: str = "Click to edit"
    font_size: int = 16
    color: str = "black"

    kind = EntityKind.TEXT_BOX

    def hits(self, rect: Rect) -> bool:
        return point_in_rect(Point(self.x, self.y), rect)

    def translated(self, dx: float, dy: float) -> TextBox:
        return replace(self, x=self.x + dx, y=self.y + dy)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "text": self.text,
            "fontSize": self.font_size,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TextBox:
        return cls(
            id=str(data["id"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            text=data.get("text", ""),
            font_size=int(data.get("fontSize", 16)),
            color=data.get("color", "black"),
        )


@dataclass
class Circle:
    """A circle marker centered at (x, y)."""
    id: str
    x: float
    y: float
    radius: float = 8.0
    color: str = "black"

    kind = EntityKind.CIRCLE

    def hits(self, rect: Rect) -> bool:
        return circle_in_rect(Point(self.x, self.y), self.radius, rect)

    def translated(self, dx: float, dy: float) -> Circle:
        return replace(self, x=self.x + dx, y=self.y + dy)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Circle:
        return cls(
            id=str(data["id"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            radius=float(data.get("radius", 8.0)),
            color=data.get("color", "black"),
        )


@dataclass
class Football:
    """A football icon centered at (x, y), `size` pixels square."""
    id: str
    x: float
    y: float
    size: float = 32.0

    kind = EntityKind.FOOTBALL

    def hits(self, rect: Rect) -> bool:
        return icon_in_rect(Point(self.x, self.y), self.size, rect)

    def translated(self, dx: float, dy: float) -> Football:
        return replace(self, x=self.x + dx, y=self.y + dy)

    def to_dict(self) -> dict:
        return {"id": self.id, "x": self.x, "y": self.y, "size": self.size}

    @classmethod
    def from_dict(cls, data: dict) -> Football:
        return cls(
            id=str(data["id"]),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            size=float(data.get("size", 32.0)),
        )


Entity = Union[Player, Route, TextBox, Circle, Football]
