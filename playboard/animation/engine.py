"""Animation engine.

Computes where every player is at a moment of playback.

Offense players run the first playable route they own at one shared
speed, so a short route finishes before a long one. Defenders either
slide to their coverage-pattern target at that same speed and hold,
or pursue the nearest offense player's live position.

Pursuit is an approach rate per playback tick: each tick closes a
fixed fraction of the remaining gap, capped at a maximum step. Ticks
sit at fixed instants on the clock's timeline (tick k at k / tick_rate
seconds), and advance() replays every tick up to the current time. The
result depends only on elapsed time, not on how often the host polls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..associations import AssociationTable
from ..core.entities import Player, Route
from ..core.point import Point
from ..geometry import path_length, position_at_distance
from .clock import AnimationClock
from .coverage import CoveragePattern

logger = logging.getLogger(__name__)

ANIMATION_SPEED = 150.0   # pixels per second
PURSUIT_FRACTION = 0.1    # share of the remaining gap closed per tick
PURSUIT_MAX_STEP = 20.0   # pixels per tick
TICK_RATE = 60.0          # pursuit ticks per second


def pursuit_step(
    current: Point,
    target: Point,
    fraction: float = PURSUIT_FRACTION,
    max_step: float = PURSUIT_MAX_STEP,
) -> Point:
    """One pursuit tick: close `fraction` of the gap, at most `max_step`.

    Decelerates near the target and never overshoots it. A zero gap
    means no movement.
    """
    gap = current.distance_to(target)
    if gap == 0:
        return current
    return current.step_toward(target, min(gap * fraction, max_step, gap))


@dataclass
class Frame:
    """Positions of every player at one instant of playback.

    Attributes:
        elapsed: Seconds since playback started
        progress: elapsed / duration, capped at 1
        positions: Player id -> animated position
        complete: Whether playback has reached its end
    """
    elapsed: float
    progress: float
    positions: dict[str, Point] = field(default_factory=dict)
    complete: bool = False

    def to_dict(self) -> dict:
        return {
            "elapsed": round(self.elapsed, 4),
            "progress": round(self.progress, 4),
            "complete": self.complete,
            "positions": {pid: p.to_dict() for pid, p in self.positions.items()},
        }


class AnimationEngine:
    """Playback state for one run of the animation.

    Takes a snapshot of the board at construction. Route lengths, zone
    slot assignments and the stop time are fixed then.
    """

    def __init__(
        self,
        offense: Iterable[Player],
        defense: Iterable[Player],
        routes: Iterable[Route],
        associations: AssociationTable,
        coverage: Optional[CoveragePattern] = None,
        field_width: float = 800.0,
        field_height: float = 870.0,
        speed: float = ANIMATION_SPEED,
        pursuit_fraction: float = PURSUIT_FRACTION,
        pursuit_max_step: float = PURSUIT_MAX_STEP,
        tick_rate: float = TICK_RATE,
    ) -> None:
        self.offense = list(offense)
        self.defense = list(defense)
        self.routes = {r.id: r for r in routes}
        self.associations = associations.copy()
        self.coverage = coverage
        self.field_width = field_width
        self.field_height = field_height
        self.speed = speed
        self.pursuit_fraction = pursuit_fraction
        self.pursuit_max_step = pursuit_max_step
        self.tick_rate = tick_rate

        # Offense: player id -> (route points, route length)
        self._paths: dict[str, tuple[list[Point], float]] = {}
        for player in self.offense:
            route = self.associations.playable_route(player.id, self.routes)
            if route is not None:
                self._paths[player.id] = (list(route.points), path_length(route.points))

        # Defense: zone targets by slot, everyone else pursues
        self._targets: dict[str, Point] = {}
        if coverage is not None:
            for slot, defender in enumerate(self.defense):
                target = coverage.target_for(slot, field_width, field_height)
                if target is not None:
                    self._targets[defender.id] = target

        self._pursuit: dict[str, Point] = {
            d.id: d.pos for d in self.defense if d.id not in self._targets
        }
        self._ticks_done = 0

        longest = max(
            (path_length(r.points) for r in self.routes.values() if r.is_valid),
            default=0.0,
        )
        self.duration = longest / speed if speed > 0 else 0.0
        logger.debug(
            f"Engine ready: {len(self._paths)} running, {len(self._targets)} in zone, "
            f"{len(self._pursuit)} pursuing, duration {self.duration:.2f}s"
        )

    # =========================================================================
    # Offense
    # =========================================================================

    def offense_position(self, player: Player, elapsed: float) -> Point:
        path = self._paths.get(player.id)
        if path is None:
            return player.pos
        points, length = path
        return position_at_distance(points, min(elapsed * self.speed, length))

    def route_finished(self, player_id: str, elapsed: float) -> bool:
        path = self._paths.get(player_id)
        return path is None or elapsed * self.speed >= path[1]

    # =========================================================================
    # Defense
    # =========================================================================

    def zone_position(self, defender: Player, elapsed: float) -> Point:
        """Slide from rest toward the zone target at playback speed, then hold."""
        target = self._targets[defender.id]
        total = defender.pos.distance_to(target)
        if total == 0:
            return defender.pos
        covered = min(elapsed * self.speed, total)
        return defender.pos.lerp(target, covered / total)

    def _nearest_offense(self, origin: Point, elapsed: float) -> Optional[Point]:
        nearest = None
        nearest_distance = float("inf")
        for player in self.offense:
            position = self.offense_position(player, elapsed)
            distance = origin.distance_to(position)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest = position
        return nearest

    def step_pursuit(self, elapsed: float) -> None:
        """Run one pursuit tick against offense positions at `elapsed`."""
        for defender_id, current in self._pursuit.items():
            target = self._nearest_offense(current, elapsed)
            if target is None:
                continue
            self._pursuit[defender_id] = pursuit_step(
                current, target, self.pursuit_fraction, self.pursuit_max_step
            )

    def advance(self, elapsed: float) -> None:
        """Replay pursuit ticks up to `elapsed`. Earlier times are a no-op."""
        due = int(elapsed * self.tick_rate)
        while self._ticks_done < due:
            self._ticks_done += 1
            self.step_pursuit(self._ticks_done / self.tick_rate)

    def pursuit_position(self, defender: Player) -> Point:
        return self._pursuit.get(defender.id, defender.pos)

    # =========================================================================
    # Queries
    # =========================================================================

    def position_of(self, player: Player, clock: AnimationClock, now: float) -> Point:
        """Animated position of a player. Rest position when not running."""
        if not clock.running:
            return player.pos
        elapsed = clock.elapsed(now)
        if player.is_offense:
            return self.offense_position(player, elapsed)
        if player.id in self._targets:
            return self.zone_position(player, elapsed)
        self.advance(elapsed)
        return self.pursuit_position(player)

    def frame(self, clock: AnimationClock, now: float) -> Frame:
        """Positions of every player at `now`."""
        elapsed = clock.elapsed(now)
        positions = {}
        for player in self.offense + self.defense:
            positions[player.id] = self.position_of(player, clock, now)
        progress = 1.0 if self.duration <= 0 else min(elapsed / self.duration, 1.0)
        return Frame(
            elapsed=elapsed,
            progress=progress,
            positions=positions,
            complete=self.is_complete(clock, now),
        )

    def is_complete(self, clock: AnimationClock, now: float) -> bool:
        """Playback is over once the longest route's run time has passed."""
        return clock.elapsed(now) >= self.duration
