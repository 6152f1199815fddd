"""Tests for the asyncio playback loop."""

import asyncio
import logging

import pytest

from playboard.associations import AssociationTable
from playboard.animation.playback import PlaybackSession
from playboard.core.events import BoardEventType
from playboard.errors import NothingToAnimate


class SteppingClock:
    """Time source that moves forward a fixed step per reading."""

    def __init__(self, step):
        self.now = 0.0
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def playable_board(board, make_player, make_route):
    """One receiver on a 150px route: one second of playback."""
    board.load(
        offense=[make_player("p1", 0, 0)],
        routes=[make_route("r1", [(0, 0), (150, 0)])],
        associations=AssociationTable({"p1": ["r1"]}),
    )
    return board


class TestPlaybackSession:
    """Tests for PlaybackSession."""

    def test_runs_to_completion(self, playable_board, bus):
        frames = []
        completed = []

        async def scenario():
            session = PlaybackSession(playable_board, frame_interval=0, time_source=SteppingClock(0.5))
            assert session.start(frames.append, completed.append)
            return await session.wait()

        last = asyncio.run(scenario())

        assert [f.elapsed for f in frames] == [0.5, 1.0]
        assert last.complete
        assert last.positions["p1"].x == 150
        assert completed == [last]
        assert not playable_board.is_animating
        assert len(bus.get_events_by_type(BoardEventType.PLAYBACK_COMPLETE)) == 1

    def test_async_frame_callback_awaited(self, playable_board):
        seen = []

        async def on_frame(frame):
            await asyncio.sleep(0)
            seen.append(frame.progress)

        async def scenario():
            session = PlaybackSession(playable_board, frame_interval=0, time_source=SteppingClock(0.25))
            session.start(on_frame)
            await session.wait()

        asyncio.run(scenario())
        assert seen == [0.25, 0.5, 0.75, 1.0]

    def test_start_twice_refused(self, playable_board):
        async def scenario():
            session = PlaybackSession(playable_board, frame_interval=0.01)
            assert session.start()
            second = session.start()
            await session.stop()
            return second

        assert asyncio.run(scenario()) is False

    def test_stop_is_idempotent(self, playable_board, bus):
        async def scenario():
            session = PlaybackSession(playable_board, frame_interval=0.01)
            session.start()
            await asyncio.sleep(0.02)
            await session.stop()
            await session.stop()
            return session

        session = asyncio.run(scenario())
        assert not session.is_running
        assert not playable_board.is_animating
        assert len(bus.get_events_by_type(BoardEventType.PLAYBACK_STOPPED)) == 1

    def test_stop_before_start(self, playable_board):
        async def scenario():
            await PlaybackSession(playable_board).stop()

        asyncio.run(scenario())
        assert not playable_board.is_animating

    def test_callback_errors_logged(self, playable_board, caplog):
        def broken(frame):
            raise RuntimeError("render failed")

        async def scenario():
            session = PlaybackSession(playable_board, frame_interval=0, time_source=SteppingClock(0.5))
            session.start(broken)
            return await session.wait()

        with caplog.at_level(logging.ERROR, logger="playboard.animation.playback"):
            last = asyncio.run(scenario())

        assert last.complete
        assert "Frame callback failed" in caplog.text

    def test_nothing_to_animate(self, board):
        async def scenario():
            PlaybackSession(board).start()

        with pytest.raises(NothingToAnimate):
            asyncio.run(scenario())
        assert not board.is_animating
