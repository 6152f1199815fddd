"""Tests for loading and saving play documents."""

import json
import logging

from playboard.core.entities import LineBreakType, Team
from playboard.core.point import Point
from playboard.persistence import dump_play, dumps, load_play, loads


def player(pid, x, y, team="offense", color="blue"):
    return {"id": pid, "x": x, "y": y, "color": color, "type": team}


def route(rid, points, line_break_type="rigid"):
    return {
        "id": rid,
        "points": [{"x": x, "y": y} for x, y in points],
        "style": "solid",
        "lineBreakType": line_break_type,
        "color": "black",
    }


SAMPLE = {
    "id": "play-1",
    "name": "Slant flat",
    "playNotes": "Read the flat defender",
    "players": [player("p1", 100, 600), player("p2", 300, 600, color="red")],
    "defensivePlayers": [player("d1", 100, 200, color="grey")],
    "routes": [route("r1", [(100, 600), (150, 500)]), route("r2", [(300, 600), (300, 400)])],
    "textBoxes": [{"id": "t1", "x": 10, "y": 10, "text": "Trips", "fontSize": 18, "color": "red"}],
    "circles": [{"id": "c1", "x": 50, "y": 50, "radius": 8, "color": "black"}],
    "footballs": [{"id": "f1", "x": 400, "y": 435, "size": 32}],
    "playerRouteAssociations": {"p1": ["r1"], "p2": ["r2"]},
}


class TestLoadPlay:
    """Tests for load_play()."""

    def test_object_associations(self):
        document = load_play(SAMPLE)
        assert [p.id for p in document.players] == ["p1", "p2"]
        assert [p.id for p in document.defense] == ["d1"]
        assert document.defense[0].team == Team.DEFENSE
        assert document.associations.routes_of("p2") == ["r2"]
        assert document.text_boxes[0].font_size == 18
        assert (document.id, document.name, document.notes) == (
            "play-1", "Slant flat", "Read the flat defender",
        )

    def test_legacy_pair_associations(self):
        data = {**SAMPLE, "playerRouteAssociations": [["p1", ["r1"]], ["p2", ["r2"]]]}
        assert load_play(data).associations.to_dict() == {"p1": ["r1"], "p2": ["r2"]}

    def test_missing_associations_rebuilt(self):
        data = {key: value for key, value in SAMPLE.items() if key != "playerRouteAssociations"}
        table = load_play(data).associations
        assert table.owner_of("r1") == "p1"
        assert table.owner_of("r2") == "p2"

    def test_unreadable_associations_rebuilt(self, caplog):
        data = {**SAMPLE, "playerRouteAssociations": "p1:r1"}
        with caplog.at_level(logging.WARNING):
            table = load_play(data).associations
        assert table.owner_of("r1") == "p1"
        assert "Unreadable association table" in caplog.text

    def test_short_routes_skipped(self, caplog):
        data = {
            **SAMPLE,
            "routes": [route("r1", [(100, 600), (150, 500)]), route("r2", [(300, 600)])],
        }
        with caplog.at_level(logging.WARNING):
            document = load_play(data)
        assert [r.id for r in document.routes] == ["r1"]
        assert document.associations.routes_of("p2") == []
        assert "Skipping route r2" in caplog.text

    def test_unknown_line_break_type_is_rigid(self):
        data = {**SAMPLE, "routes": [route("r1", [(0, 0), (0, 10)], "zigzag")]}
        assert load_play(data).routes[0].line_break_type == LineBreakType.RIGID

    def test_marker_without_arrow_flag(self):
        data = {**SAMPLE, "routes": [route("r1", [(0, 0), (0, 10)], "none")]}
        assert load_play(data).routes[0].show_arrow is False

    def test_empty_document(self):
        document = load_play({})
        assert document.players == []
        assert len(document.associations) == 0

    def test_apply_to_board(self, board):
        load_play(SAMPLE).apply_to(board)
        assert len(board.offense) == 2
        assert len(board.defense) == 1
        assert board.get_route("r1").points[-1] == Point(150, 500)
        assert not board.history.can_undo


class TestDumpPlay:
    """Tests for dump_play()."""

    def test_object_form_and_fields(self, board):
        load_play(SAMPLE).apply_to(board)
        data = dump_play(board, name="Slant flat", notes="  Read the flat defender ", play_id="play-1")

        assert data["playerRouteAssociations"] == {"p1": ["r1"], "p2": ["r2"]}
        assert data["playNotes"] == "Read the flat defender"
        assert data["id"] == "play-1"
        assert [p["id"] for p in data["defensivePlayers"]] == ["d1"]
        assert data["routes"][0]["showArrow"] is True

    def test_blank_notes_omitted(self, board):
        data = dump_play(board)
        assert "playNotes" not in data
        assert "id" not in data

    def test_text_round_trip(self, board):
        load_play(SAMPLE).apply_to(board)
        document = loads(dumps(board, name="Slant flat"))
        assert document.name == "Slant flat"
        assert document.associations.to_dict() == SAMPLE["playerRouteAssociations"]
        assert json.loads(dumps(board))["footballs"][0]["size"] == 32
