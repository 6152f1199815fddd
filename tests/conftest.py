"""Shared pytest fixtures for Playboard tests."""

import itertools

import pytest

from playboard.associations import AssociationTable
from playboard.board import Board
from playboard.config import BoardConfig, set_config
from playboard.core.entities import LineBreakType, Player, Route, Team
from playboard.core.events import EventBus
from playboard.core.point import Point
from playboard.history import ImmediateScheduler


# =============================================================================
# Scheduling
# =============================================================================


class FakeHandle:
    """Cancellable handle returned by FakeScheduler."""

    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects delayed callbacks until the test runs them."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def run_pending(self):
        """Fire every callback that has not been cancelled."""
        handles, self.handles = self.pending, []
        for handle in handles:
            handle.callback()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture
def config() -> BoardConfig:
    """Default tuning, independent of the environment."""
    return BoardConfig(
        animation_speed=150.0,
        pursuit_fraction=0.1,
        pursuit_max_step=20.0,
        tick_rate=60.0,
        pause_threshold=0.5,
        min_sample_distance=5.0,
        arrow_gap=15.0,
        selection_threshold=10.0,
        history_cap=50,
        history_debounce=0.05,
        field_width=800.0,
        field_height=870.0,
        log_level="INFO",
    )


@pytest.fixture(autouse=True)
def reset_globals(config):
    """Pin the global config and drop API sessions between tests."""
    from playboard.api.sessions import reset_session_manager

    set_config(config)
    reset_session_manager()
    yield
    set_config(None)
    reset_session_manager()


# =============================================================================
# Boards
# =============================================================================


@pytest.fixture
def ids():
    """Deterministic id factory: e1, e2, ..."""
    counter = itertools.count(1)
    return lambda: f"e{next(counter)}"


@pytest.fixture
def bus() -> EventBus:
    return EventBus(record=True)


@pytest.fixture
def board(config, bus, ids) -> Board:
    """Board whose history commits immediately."""
    return Board(config=config, bus=bus, scheduler=ImmediateScheduler(), id_factory=ids)


@pytest.fixture
def debounced_board(config, bus, ids, scheduler) -> Board:
    """Board whose history snapshots wait for the fake scheduler."""
    return Board(config=config, bus=bus, scheduler=scheduler, id_factory=ids)


# =============================================================================
# Entities
# =============================================================================


def make_player(player_id, x, y, team=Team.OFFENSE, color="blue") -> Player:
    return Player(id=player_id, x=x, y=y, color=color, team=team)


def make_route(route_id, points, line_break_type=LineBreakType.RIGID) -> Route:
    return Route(
        id=route_id,
        points=[Point(x, y) for x, y in points],
        line_break_type=line_break_type,
    )


@pytest.fixture
def two_receivers():
    """Two offense players with 100px and 300px routes."""
    short = make_player("short", 0, 0)
    long = make_player("long", 0, 100)
    routes = [
        make_route("r-short", [(0, 0), (100, 0)]),
        make_route("r-long", [(0, 100), (300, 100)]),
    ]
    table = AssociationTable({"short": ["r-short"], "long": ["r-long"]})
    return [short, long], routes, table


@pytest.fixture(name="make_player")
def make_player_fixture():
    return make_player


@pytest.fixture(name="make_route")
def make_route_fixture():
    return make_route
