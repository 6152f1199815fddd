"""Tests for default placements and route templates."""

import pytest

from playboard.core.entities import LineBreakType, Player, Route
from playboard.core.point import Point
from playboard.formations import (
    DEFENSE_TEMPLATE,
    STANDARD_TEMPLATES,
    RouteTemplate,
    defense_positions,
    full_offense,
    get_template,
    offense_position,
    template_from_route,
    template_position,
)


class TestOffensePlacement:
    """Tests for offense_position() and full_offense()."""

    @pytest.mark.parametrize("color,x", [("blue", 120), ("red", 680), ("qb", 400)])
    def test_role_spots(self, color, x):
        assert offense_position(color, [], 800, 870).x == pytest.approx(x)

    def test_qb_behind_line(self):
        assert offense_position("qb", [], 800, 870).y > offense_position("blue", [], 800, 870).y

    def test_extra_colors_fill_the_line(self):
        existing = [Player(id=str(i), x=0, y=696) for i in range(3)]
        # Three on the line: start at 400 - 120, place at +240
        assert offense_position("white", existing, 800, 870) == Point(520, 696)

    def test_players_off_the_line_ignored(self):
        existing = [Player(id="qb", x=400, y=739.5)]
        assert offense_position("white", existing, 800, 870) == Point(400, 696)

    def test_full_offense(self):
        assert [color for color, _ in full_offense(800, 870)] == ["blue", "red", "green", "yellow", "qb"]


class TestDefensePlacement:
    """Tests for defense_positions()."""

    def test_scaled_to_field(self):
        positions = defense_positions(800, 870)
        assert len(positions) == len(DEFENSE_TEMPLATE)
        assert tuple(positions[4]) == pytest.approx((400, 348))

    def test_clamped_inside_padding(self):
        positions = defense_positions(100, 100, [(0.0, 0.0), (1.0, 1.0)], padding=24)
        assert positions == [Point(24, 24), Point(76, 76)]


class TestRouteTemplates:
    """Tests for RouteTemplate."""

    def test_standard_set(self):
        assert set(STANDARD_TEMPLATES) == {"slant", "post", "hitch", "corner"}
        assert get_template("hitch").player_color == "yellow"
        assert get_template("wheel") is None

    def test_place_keeps_shape(self):
        template = RouteTemplate(name="out", points=(Point(10, 10), Point(10, -40), Point(60, -40)))
        placed = template.place("r1", Point(100, 100))
        assert placed.points == [Point(100, 100), Point(100, 50), Point(150, 50)]
        assert placed.show_arrow

    def test_marker_template_has_no_arrow(self):
        template = RouteTemplate(
            name="motion", points=(Point(0, 0), Point(50, 0)), line_break_type=LineBreakType.NONE,
        )
        assert not template.place("r1", Point(0, 0)).show_arrow

    def test_from_route_is_relative_to_owner(self):
        owner = Player(id="p1", x=100, y=500, color="green")
        route = Route(id="r1", points=[Point(100, 495), Point(100, 400)])
        template = template_from_route("go", route, owner)
        assert template.points == (Point(0, -5), Point(0, -100))
        assert template.player_color == "green"
        assert template.to_dict()["playerColor"] == "green"

    def test_template_position(self):
        assert template_position("qb", 800, 870) == Point(400, 522)
        assert template_position("purple", 800, 870) == Point(400, 435)
