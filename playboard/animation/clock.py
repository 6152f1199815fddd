"""Playback clock.

Playback is a function of elapsed wall-clock time since one shared
start instant. Positions are recomputed from (now - start) every frame
rather than integrated from per-frame deltas, so a stalled host cannot
desynchronize players.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class AnimationClock:
    """Start instant and running flag for one playback.

    Attributes:
        start_time: Monotonic time (seconds) when playback started
        running: Whether playback is active
    """
    start_time: float = 0.0
    running: bool = False

    @classmethod
    def started(cls, now: float) -> AnimationClock:
        """A running clock that starts at `now`."""
        return cls(start_time=now, running=True)

    @classmethod
    def stopped(cls) -> AnimationClock:
        return cls()

    def stop(self) -> AnimationClock:
        """Stopped copy of this clock. Stopping twice is harmless."""
        return replace(self, running=False)

    def elapsed(self, now: float) -> float:
        """Seconds since start, never negative. Zero when not running."""
        if not self.running:
            return 0.0
        return max(0.0, now - self.start_time)

    def ticks_elapsed(self, now: float, tick_rate: float) -> int:
        """Whole ticks at `tick_rate` per second since start."""
        return int(self.elapsed(now) * tick_rate)

    def __repr__(self) -> str:
        state = "running" if self.running else "stopped"
        return f"AnimationClock(start={self.start_time:.3f}s, {state})"
