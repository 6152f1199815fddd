"""Playback: clock, coverage patterns, engine and loop."""

from playboard.animation.clock import AnimationClock
from playboard.animation.coverage import DEFAULT_COVERAGES, CoveragePattern, get_coverage
from playboard.animation.engine import AnimationEngine, Frame, pursuit_step
from playboard.animation.playback import PlaybackSession

__all__ = [
    "AnimationClock",
    "AnimationEngine",
    "CoveragePattern",
    "DEFAULT_COVERAGES",
    "Frame",
    "PlaybackSession",
    "get_coverage",
    "pursuit_step",
]
