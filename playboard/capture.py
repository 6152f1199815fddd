"""Route capture.

Turns a stream of pointer samples into a finished Route. The line break
type chosen before the stroke starts picks the sampling policy:

    none                 two points; every move drags the end point
    rigid                pause-to-pivot; pausing longer than the
                         threshold freezes a corner and starts a new leg
    smooth, smooth-none  distance-gated sampling, smoothed once on finish

Timestamps are supplied by the caller, in seconds from any monotonic
source, so a capture replays identically from recorded input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .core.entities import LineBreakType, Player, Route, RouteStyle
from .core.point import Point
from .geometry import clip_for_arrow, smooth_positions

logger = logging.getLogger(__name__)

PAUSE_THRESHOLD = 0.5      # seconds
MIN_SAMPLE_DISTANCE = 5.0  # pixels


@dataclass
class CapturedRoute:
    """Result of finishing a stroke.

    Attributes:
        route: The new route
        owner_id: Nearest offense player to the route's start, if any
    """
    route: Route
    owner_id: Optional[str] = None


def nearest_player(point: Point, players: Iterable[Player]) -> Optional[Player]:
    """Closest player to a point. Ties go to the earliest player."""
    nearest = None
    nearest_distance = float("inf")
    for player in players:
        distance = point.distance_to(player.pos)
        if distance < nearest_distance:
            nearest_distance = distance
            nearest = player
    return nearest


@dataclass
class RouteCapture:
    """An in-progress stroke.

    Attributes:
        line_break_type: Sampling policy for this stroke
        style: Solid or dashed
        points: Captured points so far (starts with the press point)
        last_move_time: Time of the previous move (rigid pivots)
        last_sample: Last sampled point (smooth gating)
    """
    line_break_type: LineBreakType
    style: RouteStyle
    points: list[Point] = field(default_factory=list)
    last_move_time: float = 0.0
    last_sample: Optional[Point] = None
    color: str = "black"

    pause_threshold: float = PAUSE_THRESHOLD
    min_sample_distance: float = MIN_SAMPLE_DISTANCE

    @classmethod
    def begin(
        cls,
        start: Point,
        line_break_type: LineBreakType,
        style: RouteStyle = RouteStyle.SOLID,
        timestamp: float = 0.0,
        **settings,
    ) -> RouteCapture:
        """Start a stroke at the press point."""
        capture = cls(
            line_break_type=line_break_type,
            style=style,
            points=[start],
            last_move_time=timestamp,
            last_sample=start,
            **settings,
        )
        logger.debug(f"Route capture started at {start} ({line_break_type.value})")
        return capture

    # =========================================================================
    # Sampling
    # =========================================================================

    def move(self, point: Point, timestamp: float) -> None:
        """Feed one pointer sample."""
        if self.line_break_type == LineBreakType.NONE:
            self._move_straight(point)
        elif self.line_break_type.is_smooth:
            self._move_sampled(point)
        else:
            self._move_rigid(point, timestamp)
            self.last_move_time = timestamp

    def _move_straight(self, point: Point) -> None:
        if len(self.points) == 1:
            self.points.append(point)
        else:
            self.points[1] = point

    def _move_sampled(self, point: Point) -> None:
        if len(self.points) == 1:
            self.points.append(point)
            self.last_sample = point
            return
        if self.last_sample is None or point.distance_to(self.last_sample) >= self.min_sample_distance:
            self.points.append(point)
            self.last_sample = point

    def _move_rigid(self, point: Point, timestamp: float) -> None:
        if len(self.points) == 1:
            self.points.append(point)
        elif timestamp - self.last_move_time > self.pause_threshold:
            # Pivot: freeze the current leg and seed the next one
            self.points.append(point)
            self.points.append(point)
            logger.debug(f"Pivot committed at {point}")
        else:
            self.points[-1] = point

    # =========================================================================
    # Finish
    # =========================================================================

    @property
    def show_arrow(self) -> bool:
        return not self.line_break_type.is_marker

    def preview_points(self, arrow_gap: float = 15.0) -> list[Point]:
        """Points to draw while the stroke is still in progress."""
        if self.show_arrow and len(self.points) >= 2:
            return clip_for_arrow(self.points, arrow_gap)
        return list(self.points)

    def finish(
        self,
        route_id: str,
        offense: Iterable[Player] = (),
    ) -> Optional[CapturedRoute]:
        """Finalize the stroke.

        Returns None when fewer than two points were captured (a click
        with no drag). Smooth types get one smoothing pass here.
        """
        if len(self.points) < 2:
            logger.debug("Route capture discarded: fewer than two points")
            return None

        points = list(self.points)
        if self.line_break_type.is_smooth:
            points = smooth_positions(points)

        route = Route(
            id=route_id,
            points=points,
            style=self.style,
            line_break_type=self.line_break_type,
            color=self.color,
            show_arrow=self.show_arrow,
        )
        owner = nearest_player(route.start, offense)
        logger.debug(
            f"Route {route_id} captured with {len(points)} points"
            + (f", owner {owner.id}" if owner else ", no owner")
        )
        return CapturedRoute(route=route, owner_id=owner.id if owner else None)
