"""Playback loop.

Drives a board's animation on the asyncio event loop: one tick in
flight at a time, each tick reading the frame for the current
monotonic time and handing it to a callback. The loop ends on its own
when the board reports the animation complete, or when stop() is
called. Stopping is idempotent.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol, Union

from .engine import Frame

logger = logging.getLogger(__name__)

FrameCallback = Callable[[Frame], Union[None, Awaitable[None]]]
CompleteCallback = Callable[[Optional[Frame]], Union[None, Awaitable[None]]]


class Playable(Protocol):
    """What the loop needs from a board."""

    @property
    def is_animating(self) -> bool: ...

    def start_animation(self, now: float) -> None: ...

    def stop_animation(self) -> None: ...

    def frame(self, now: float) -> Frame: ...


async def _call(callback, *args) -> None:
    result = callback(*args)
    if asyncio.iscoroutine(result):
        await result


class PlaybackSession:
    """Runs one board's animation as an asyncio task.

    Args:
        board: The board to animate
        frame_interval: Seconds between ticks (default 60 per second)
        time_source: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        board: Playable,
        frame_interval: float = 1 / 60,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self.board = board
        self.frame_interval = frame_interval
        self.time_source = time_source
        self.on_frame: Optional[FrameCallback] = None
        self.on_complete: Optional[CompleteCallback] = None
        self.last_frame: Optional[Frame] = None

        self._task: Optional[asyncio.Task] = None
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(
        self,
        on_frame: Optional[FrameCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> bool:
        """Start playback. Returns False if it is already running.

        Must be called from inside a running event loop. Raises
        NothingToAnimate when the board has no routes.
        """
        if self.is_running:
            return False

        self.board.start_animation(self.time_source())
        self.on_frame = on_frame
        self.on_complete = on_complete
        self._stop_requested = False
        self.last_frame = None
        self._task = asyncio.get_running_loop().create_task(self._run_tick_loop())
        return True

    async def stop(self) -> None:
        """Stop playback and reset the board to rest positions.

        Safe to call when already stopped or after natural completion.
        """
        if self.is_running:
            self._stop_requested = True
            try:
                await asyncio.wait_for(self._task, timeout=1.0)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    logger.debug("Playback task cancelled")
        self._task = None
        self.board.stop_animation()

    async def wait(self) -> Optional[Frame]:
        """Wait for playback to finish. Returns the last frame."""
        if self._task is not None:
            await self._task
        return self.last_frame

    async def _run_tick_loop(self) -> None:
        logger.info("Playback started")
        try:
            while not self._stop_requested and self.board.is_animating:
                frame = self.board.frame(self.time_source())
                self.last_frame = frame

                if self.on_frame:
                    try:
                        await _call(self.on_frame, frame)
                    except Exception:
                        logger.exception("Frame callback failed")

                if frame.complete:
                    break

                await asyncio.sleep(self.frame_interval)
        finally:
            self.board.stop_animation()
            logger.info("Playback finished" if not self._stop_requested else "Playback stopped")

        if self.on_complete:
            try:
                await _call(self.on_complete, self.last_frame)
            except Exception:
                logger.exception("Completion callback failed")
