"""Formations and route templates.

Default placements for offense players by role color, the five-man
defense template, and the quick-add route templates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .core.entities import LineBreakType, Player, Route, RouteStyle
from .core.point import Point

OFFENSE_COLORS = ["blue", "red", "green", "yellow", "qb"]

LINE_FRACTION = 0.8       # offense line, share of field height
QB_FRACTION = 0.85        # quarterback sits behind the line
EXTRA_PLAYER_SPACING = 80.0
SAME_LINE_TOLERANCE = 0.05

DEFENSE_PADDING = 24.0    # half a player icon

# (x, y) as fractions of the field
OFFENSE_X: dict[str, float] = {
    "blue": 0.15,
    "yellow": 0.35,
    "green": 0.65,
    "red": 0.85,
    "qb": 0.5,
}

DEFENSE_TEMPLATE: list[tuple[float, float]] = [
    (0.2, 0.3),
    (0.4, 0.2),
    (0.6, 0.2),
    (0.8, 0.3),
    (0.5, 0.4),
]

DEFENSE_GROUP_TEMPLATE: list[tuple[float, float]] = [
    (0.2, 0.3),
    (0.4, 0.2),
    (0.5, 0.4),
    (0.6, 0.2),
    (0.8, 0.3),
]


# =============================================================================
# Offense
# =============================================================================

def offense_position(
    color: str,
    existing: Sequence[Player],
    width: float,
    height: float,
) -> Point:
    """Where a newly added offense player of `color` goes.

    The four receiver colors and the quarterback have fixed spots. Any
    other color is spread along the line after the players already on it.
    """
    y = height * (QB_FRACTION if color == "qb" else LINE_FRACTION)
    if color in OFFENSE_X:
        return Point(width * OFFENSE_X[color], y)

    on_line = [p for p in existing if abs(p.y - y) < height * SAME_LINE_TOLERANCE]
    count = len(on_line)
    start_x = width / 2 - (count * EXTRA_PLAYER_SPACING) / 2
    return Point(start_x + count * EXTRA_PLAYER_SPACING, y)


def full_offense(width: float, height: float) -> list[tuple[str, Point]]:
    """One player of every offense color at its default spot."""
    return [(color, offense_position(color, [], width, height)) for color in OFFENSE_COLORS]


def template_position(color: str, width: float, height: float) -> Point:
    """Player spot used when placing a route template."""
    middle_y = height / 2
    if color == "qb":
        return Point(width * 0.5, middle_y + height * 0.1)
    x = {"blue": 0.2, "yellow": 0.5, "green": 0.65, "red": 0.85}.get(color, 0.5)
    return Point(width * x, middle_y)


# =============================================================================
# Defense
# =============================================================================

def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def defense_positions(
    width: float,
    height: float,
    template: Sequence[tuple[float, float]] = DEFENSE_TEMPLATE,
    padding: float = DEFENSE_PADDING,
) -> list[Point]:
    """Template positions scaled to the field and kept `padding` from its edges."""
    return [
        Point(
            _clamp(width * fx, padding, width - padding),
            _clamp(height * fy, padding, height - padding),
        )
        for fx, fy in template
    ]


# =============================================================================
# Route templates
# =============================================================================

@dataclass(frozen=True)
class RouteTemplate:
    """A reusable route shape and the role that runs it.

    Only the shape matters: placement moves the first point onto the
    player and keeps every other point's offset from it.
    """
    name: str
    points: tuple[Point, ...]
    player_color: str = "red"
    style: RouteStyle = RouteStyle.SOLID
    line_break_type: LineBreakType = LineBreakType.RIGID
    color: str = "black"

    def place(self, route_id: str, start: Point) -> Route:
        """Build a route whose first point sits on `start`."""
        first = self.points[0]
        return Route(
            id=route_id,
            points=[start + (p - first) for p in self.points],
            style=self.style,
            line_break_type=self.line_break_type,
            color=self.color,
            show_arrow=not self.line_break_type.is_marker,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "points": [p.to_dict() for p in self.points],
            "style": self.style.value,
            "lineBreakType": self.line_break_type.value,
            "color": self.color,
            "playerColor": self.player_color,
        }


def _template(name: str, player_color: str, points: Sequence[tuple[float, float]]) -> RouteTemplate:
    return RouteTemplate(
        name=name,
        points=tuple(Point(x, y) for x, y in points),
        player_color=player_color,
    )


STANDARD_TEMPLATES: dict[str, RouteTemplate] = {
    "slant": _template("slant", "red", [(1, 214), (0, 93), (1, 92), (135, 0)]),
    "post": _template("post", "red", [(1, 56), (0, 2), (0, 1), (129, 0)]),
    "hitch": _template(
        "hitch", "yellow",
        [(330.5, 332), (329.5, 256), (329.5, 256), (305.5, 285)],
    ),
    "corner": _template(
        "corner", "green",
        [
            (427.0937255859375, 328.59694903829825),
            (427.0937255859375, 298.59694903829825),
            (427.0937255859375, 298.59694903829825),
            (286.0937255859375, 267.59694903829825),
        ],
    ),
}


def get_template(name: str) -> Optional[RouteTemplate]:
    return STANDARD_TEMPLATES.get(name)


def template_from_route(name: str, route: Route, owner: Player) -> RouteTemplate:
    """Capture a custom template from an owned route, relative to its owner."""
    return RouteTemplate(
        name=name,
        points=tuple(p - owner.pos for p in route.points),
        player_color=owner.color,
        style=route.style,
        line_break_type=route.line_break_type,
        color=route.color,
    )
