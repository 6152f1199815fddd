"""Tests for Board editing, history and playback."""

import time

import pytest

from playboard.associations import AssociationTable
from playboard.core.entities import EntityKind, LineBreakType, Team
from playboard.core.events import BoardEventType
from playboard.core.point import Point
from playboard.errors import (
    BoardBusy,
    NoOffense,
    NoRouteInProgress,
    NothingToAnimate,
    UnknownEntity,
)


def draw(board, points, line_break_type=LineBreakType.RIGID):
    """Draw a stroke through `points`, 0.1 s apart."""
    (x, y), rest = points[0], points[1:]
    board.begin_route(x, y, line_break_type, timestamp=0.0)
    for i, (x, y) in enumerate(rest, start=1):
        board.extend_route(x, y, timestamp=i * 0.1)
    return board.finish_route()


@pytest.fixture
def receiver(board):
    """A blue receiver at (120, 696) running a 150px route upfield."""
    player = board.add_player("blue")
    route = draw(board, [(120, 690), (120, 540)])
    return player, route


class TestPlayers:
    """Tests for adding players."""

    def test_role_colors_have_fixed_spots(self, board):
        assert board.add_player("blue").pos == Point(120, 696)
        assert board.add_player("qb").pos == Point(400, 739.5)

    def test_extra_players_spread_along_line(self, board):
        first = board.add_player("purple")
        second = board.add_player("purple")
        assert first.pos == Point(400, 696)
        assert second.pos == Point(440, 696)

    def test_add_all_players(self, board):
        players = board.add_all_players()
        assert [p.color for p in players] == ["blue", "red", "green", "yellow", "qb"]
        assert len(board.history) == 2

    def test_change_color(self, board):
        player = board.add_player()
        board.change_player_color(player.id, "red")
        assert board.get_player(player.id).color == "red"

    def test_unknown_player(self, board):
        with pytest.raises(UnknownEntity):
            board.get_player("ghost")


class TestDefense:
    """Tests for defense generation."""

    def test_requires_offense(self, board):
        with pytest.raises(NoOffense):
            board.create_defense()

    def test_five_grey_defenders(self, board):
        board.add_player()
        defense = board.create_defense()
        assert len(defense) == 5
        assert {d.color for d in defense} == {"grey"}
        assert all(d.team == Team.DEFENSE for d in defense)
        assert tuple(defense[0].pos) == pytest.approx((160, 261))

    def test_create_replaces(self, board):
        board.add_player()
        board.create_defense()
        board.create_defense()
        assert len(board.defense) == 5

    def test_group_adds(self, board):
        board.add_player()
        board.create_defense()
        group = board.add_defense_group()
        assert len(board.defense) == 10
        assert group[2].pos == Point(400, 348)

    def test_defense_not_in_history(self, board):
        board.add_player()
        board.create_defense()
        board.add_player("red")
        board.undo()
        assert len(board.offense) == 1
        assert len(board.defense) == 5


class TestRoutes:
    """Tests for drawing routes."""

    def test_bound_to_nearest_offense_player(self, board, receiver):
        player, route = receiver
        assert route.points == [Point(120, 690), Point(120, 540)]
        assert board.associations.routes_of(player.id) == [route.id]

    def test_click_only_discarded(self, board):
        board.begin_route(10, 10, timestamp=0.0)
        assert board.finish_route() is None
        assert board.routes == []
        assert not board.drawing

    def test_no_players_no_owner(self, board):
        route = draw(board, [(0, 0), (0, 100)])
        assert board.associations.owner_of(route.id) is None

    def test_finish_without_begin(self, board):
        with pytest.raises(NoRouteInProgress):
            board.finish_route()
        with pytest.raises(NoRouteInProgress):
            board.extend_route(1, 1)

    def test_preview_and_cancel(self, board):
        board.begin_route(0, 0, timestamp=0.0)
        board.extend_route(100, 0, timestamp=0.1)
        assert board.route_preview() == [Point(0, 0), Point(85, 0)]
        board.cancel_route()
        assert board.route_preview() == []

    def test_toggle_arrow(self, board, receiver):
        _, route = receiver
        assert board.toggle_route_arrow(route.id) is False
        assert board.toggle_route_arrow(route.id) is True

    def test_events(self, board, bus, receiver):
        player, route = receiver
        bound = bus.get_events_by_type(BoardEventType.ROUTE_BOUND)
        assert bound[-1].entity_id == route.id
        assert bound[-1].data["owner"] == player.id
        assert bus.get_events_by_type(BoardEventType.ROUTE_CAPTURED)


class TestTemplates:
    """Tests for quick-add route templates."""

    def test_standard_template(self, board):
        player, route = board.add_route_from_template("slant")
        assert player.color == "red"
        assert player.pos == Point(680, 435)
        assert route.start == player.pos
        assert route.points[-1] == Point(680 + 134, 435 - 214)
        assert board.associations.routes_of(player.id) == [route.id]

    def test_unknown_template(self, board):
        with pytest.raises(UnknownEntity):
            board.add_route_from_template("wheel")

    def test_save_and_reuse(self, board, receiver):
        player, _ = receiver
        template = board.save_template("go", player.id)
        assert template.player_color == "blue"

        placed_player, placed = board.add_route_from_template("go")
        assert placed_player.pos == Point(160, 435)
        assert placed.points == [Point(160, 435), Point(160, 285)]

    def test_save_without_route(self, board):
        player = board.add_player()
        with pytest.raises(UnknownEntity):
            board.save_template("none", player.id)


class TestDrag:
    """Tests for dragging entities."""

    def test_player_carries_owned_routes(self, board, receiver):
        player, route = receiver
        board.begin_drag(EntityKind.PLAYER, player.id)
        board.drag_to(150, 700)
        board.drag_to(220, 696)
        board.end_drag()

        assert board.get_player(player.id).pos == Point(220, 696)
        assert board.get_route(route.id).points == [Point(220, 690), Point(220, 540)]

    def test_drag_is_one_history_entry(self, board, receiver):
        player, route = receiver
        board.begin_drag("player", player.id)
        board.drag_to(220, 696)
        board.end_drag()

        assert board.undo()
        assert board.get_player(player.id).pos == Point(120, 696)
        assert board.get_route(route.id).points == [Point(120, 690), Point(120, 540)]

    def test_drag_annotation(self, board):
        circle = board.add_circle(10, 10)
        board.begin_drag("circle", circle.id)
        board.drag_to(50, 60)
        board.end_drag()
        assert board.get(EntityKind.CIRCLE, circle.id).x == 50

    def test_press_without_move_records_nothing(self, board):
        player = board.add_player()
        entries = len(board.history)
        board.begin_drag("player", player.id)
        board.end_drag()
        assert len(board.history) == entries

    def test_defender_drag_not_recorded(self, board, bus):
        board.add_player()
        defender = board.add_defender(100, 100)
        entries = len(board.history)
        board.begin_drag("player", defender.id)
        board.drag_to(200, 200)
        board.end_drag()
        assert len(board.history) == entries
        assert bus.get_events_by_type(BoardEventType.PLAYER_MOVED)


class TestAnnotations:
    """Tests for text boxes, circles and footballs."""

    def test_text_box(self, board):
        text_box = board.add_text_box(10, 20)
        assert text_box.text == "Click to edit"
        board.edit_text_box(text_box.id, text="Trips right", font_size=20)
        edited = board.get(EntityKind.TEXT_BOX, text_box.id)
        assert (edited.text, edited.font_size) == ("Trips right", 20)

    def test_football_defaults_to_center(self, board):
        football = board.add_football()
        assert (football.x, football.y) == (400, 435)


class TestSelectionAndDeletion:
    """Tests for selecting and deleting."""

    def test_delete_player_deletes_routes(self, board, receiver):
        player, route = receiver
        assert board.delete_item("player", player.id) == 2
        assert board.routes == []
        assert player.id not in board.associations

    def test_delete_route_unbinds(self, board, receiver):
        player, route = receiver
        board.delete_item(EntityKind.ROUTE, route.id)
        assert board.associations.routes_of(player.id) == []
        assert board.get_player(player.id)

    def test_delete_unknown(self, board):
        with pytest.raises(UnknownEntity):
            board.delete_item("circle", "ghost")

    def test_select_then_delete(self, board, receiver):
        player, _ = receiver
        circle = board.add_circle(700, 100)
        selection = board.select_rect(100, 500, 140, 710)
        assert selection.players == {player.id}

        assert board.delete_selected() == 2
        assert board.circles == [circle]
        assert board.selection.is_empty

    def test_click_clears_selection(self, board, receiver):
        board.select_rect(100, 500, 140, 710)
        board.select_rect(300, 300, 302, 301)
        assert board.selection.is_empty

    def test_delete_selected_with_nothing_selected(self, board):
        board.add_player()
        entries = len(board.history)
        assert board.delete_selected() == 0
        assert len(board.history) == entries


class TestHistory:
    """Tests for board undo / redo."""

    def test_undo_redo_is_atomic(self, board, receiver):
        player, route = receiver

        assert board.undo()
        assert board.routes == []
        assert board.associations.routes_of(player.id) == []
        assert [p.id for p in board.offense] == [player.id]

        assert board.undo()
        assert board.offense == []
        assert not board.undo()

        assert board.redo()
        assert board.redo()
        assert board.get_route(route.id)
        assert board.associations.routes_of(player.id) == [route.id]
        assert not board.redo()

    def test_restored_state_is_a_copy(self, board):
        player = board.add_player()
        board.add_player("red")
        board.undo()
        board.offense[0].x = 0
        board.redo()
        assert board.get_player(player.id).x == 120

    def test_undo_clears_selection(self, board, receiver):
        board.select_rect(100, 500, 140, 710)
        board.undo()
        assert board.selection.is_empty

    def test_clear(self, board, bus, receiver):
        board.add_player()
        board.create_defense()
        board.clear()
        assert board.players == []
        assert board.routes == []
        assert not board.history.can_undo
        assert bus.get_events_by_type(BoardEventType.BOARD_CLEARED)

    def test_load_restarts_history(self, board, make_player):
        board.add_player()
        board.load(offense=[make_player("p1", 5, 5)])
        assert not board.history.can_undo
        assert [p.id for p in board.offense] == ["p1"]

    def test_load_prunes_dangling_associations(self, board, make_player):
        board.load(
            offense=[make_player("p1", 5, 5)],
            associations=AssociationTable({"p1": ["missing"]}),
        )
        assert board.associations.routes_of("p1") == []

    def test_history_events(self, board, bus):
        board.add_player()
        board.undo()
        board.redo()
        assert bus.get_events_by_type(BoardEventType.HISTORY_COMMITTED)
        assert bus.get_events_by_type(BoardEventType.UNDO)
        assert bus.get_events_by_type(BoardEventType.REDO)


class TestDebouncedBoard:
    """Tests for a board whose snapshots are debounced."""

    def test_burst_is_one_entry(self, debounced_board, scheduler):
        for color in ("blue", "red", "green"):
            debounced_board.add_player(color)
        scheduler.run_pending()
        assert len(debounced_board.history) == 2
        debounced_board.undo()
        assert debounced_board.offense == []

    def test_undo_records_pending_edit_first(self, debounced_board, scheduler):
        debounced_board.add_player()
        assert debounced_board.undo()
        assert debounced_board.offense == []
        assert debounced_board.redo()
        assert len(debounced_board.offense) == 1
        assert scheduler.pending == []


class TestPlayback:
    """Tests for starting, stopping and reading playback."""

    def test_nothing_to_animate(self, board):
        board.add_player()
        with pytest.raises(NothingToAnimate):
            board.start_animation(now=0.0)
        assert not board.is_animating

    def test_positions_during_playback(self, board, receiver):
        player, _ = receiver
        board.start_animation(now=10.0)
        assert board.duration == pytest.approx(1.0)
        assert board.animated_position(player.id, now=10.5) == Point(120, 615)
        assert board.animated_position(player, now=12.0) == Point(120, 540)
        # The rest position is never written back
        assert board.get_player(player.id).pos == Point(120, 696)

    def test_edits_refused_while_playing(self, board, receiver):
        player, _ = receiver
        board.start_animation(now=0.0)
        with pytest.raises(BoardBusy):
            board.add_player()
        with pytest.raises(BoardBusy):
            board.begin_route(0, 0)
        with pytest.raises(BoardBusy):
            board.begin_drag("player", player.id)
        with pytest.raises(BoardBusy):
            board.delete_item("player", player.id)

    def test_undo_refused_while_playing(self, board, receiver):
        board.start_animation(now=0.0)
        with pytest.raises(BoardBusy):
            board.undo()
        with pytest.raises(BoardBusy):
            board.redo()
        board.stop_animation()
        assert board.undo()

    def test_stop_returns_to_rest(self, board, receiver):
        player, _ = receiver
        board.start_animation(now=0.0)
        board.stop_animation()
        board.stop_animation()
        assert board.animated_position(player.id, now=0.5) == player.pos
        assert board.duration == 0.0

    def test_complete_reported_once(self, board, bus, receiver):
        board.start_animation(now=0.0)
        assert not board.frame(now=0.5).complete
        assert board.frame(now=1.0).complete
        board.frame(now=2.0)
        assert len(bus.get_events_by_type(BoardEventType.PLAYBACK_COMPLETE)) == 1

    def test_idle_frame_is_rest(self, board, receiver):
        player, _ = receiver
        frame = board.frame(now=5.0)
        assert frame.positions == {player.id: player.pos}
        assert frame.progress == 0.0

    def test_preview_frame(self, board, receiver):
        player, _ = receiver
        frame = board.preview_frame(0.5)
        assert frame.positions[player.id] == Point(120, 615)
        assert not board.is_animating

    def test_preview_past_end_is_final_frame(self, board, receiver):
        board.create_defense()
        started = time.monotonic()
        late = board.preview_frame(1_000_000.0)
        assert time.monotonic() - started < 1.0
        assert late == board.preview_frame(1.0)
        assert late.complete
        assert late.elapsed == 1.0

    def test_coverage(self, board, receiver):
        board.create_defense()
        assert board.set_coverage("cover-3").name == "Cover 3"
        frame = board.preview_frame(10.0)
        assert tuple(frame.positions[board.defense[1].id]) == pytest.approx((400, 130.5))
        assert board.set_coverage(None) is None
        with pytest.raises(UnknownEntity):
            board.set_coverage("cover-9")
