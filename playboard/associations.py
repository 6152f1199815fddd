"""Player-to-route association table.

Tracks which routes each player owns. A player may own several routes;
playback only follows the first one that is not a motion marker.

The table is patched on every edit that creates, moves or deletes a
route or player. Boards saved before associations were persisted are
rebuilt by nearest-start-point matching.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from .capture import nearest_player
from .core.entities import Player, Route
from .core.point import Point

logger = logging.getLogger(__name__)


class AssociationTable:
    """Index of player id -> ordered route ids.

    Contract: bind / unbind / unbind_route / routes_of / owner_of.
    The storage layout is private.
    """

    def __init__(self, entries: Optional[Mapping[str, Sequence[str]]] = None) -> None:
        self._routes: dict[str, list[str]] = {}
        for player_id, route_ids in (entries or {}).items():
            for route_id in route_ids:
                self.bind(player_id, route_id)

    # =========================================================================
    # Mutation
    # =========================================================================

    def bind(self, player_id: str, route_id: str) -> None:
        """Give a route to a player, appended after any routes it owns.

        A route has at most one owner; binding it again moves it.
        """
        previous = self.owner_of(route_id)
        if previous == player_id:
            return
        if previous is not None:
            self.unbind_route(route_id)
        self._routes.setdefault(player_id, []).append(route_id)

    def unbind(self, player_id: str) -> list[str]:
        """Remove a player's entry. Returns the route ids it owned."""
        return self._routes.pop(player_id, [])

    def unbind_route(self, route_id: str) -> Optional[str]:
        """Remove a route from whichever player owns it. Returns the owner."""
        for player_id, route_ids in self._routes.items():
            if route_id in route_ids:
                route_ids.remove(route_id)
                return player_id
        return None

    def prune(self, route_ids: Iterable[str]) -> None:
        """Drop references to routes that are not in `route_ids`."""
        existing = set(route_ids)
        for player_id in list(self._routes):
            kept = [r for r in self._routes[player_id] if r in existing]
            dropped = len(self._routes[player_id]) - len(kept)
            if dropped:
                logger.warning(f"Dropped {dropped} dangling route reference(s) for {player_id}")
            self._routes[player_id] = kept

    # =========================================================================
    # Queries
    # =========================================================================

    def routes_of(self, player_id: str) -> list[str]:
        """Route ids owned by a player, in binding order."""
        return list(self._routes.get(player_id, []))

    def owner_of(self, route_id: str) -> Optional[str]:
        """Player that owns a route, if any."""
        for player_id, route_ids in self._routes.items():
            if route_id in route_ids:
                return player_id
        return None

    def playable_route(self, player_id: str, routes: Mapping[str, Route]) -> Optional[Route]:
        """First owned route that can drive playback (not a marker, >= 2 points)."""
        for route_id in self._routes.get(player_id, []):
            route = routes.get(route_id)
            if route is not None and route.is_playable:
                return route
        return None

    def players(self) -> list[str]:
        return list(self._routes)

    def __contains__(self, player_id: str) -> bool:
        return player_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssociationTable):
            return NotImplemented
        mine = {k: v for k, v in self._routes.items() if v}
        theirs = {k: v for k, v in other._routes.items() if v}
        return mine == theirs

    def __repr__(self) -> str:
        return f"AssociationTable({self._routes!r})"

    # =========================================================================
    # Copy / Serialization
    # =========================================================================

    def copy(self) -> AssociationTable:
        table = AssociationTable()
        table._routes = {k: list(v) for k, v in self._routes.items()}
        return table

    def to_dict(self) -> dict[str, list[str]]:
        """Object form: {player_id: [route_id, ...]}."""
        return {k: list(v) for k, v in self._routes.items()}

    def to_pairs(self) -> list[list]:
        """Legacy form: [[player_id, [route_id, ...]], ...]."""
        return [[k, list(v)] for k, v in self._routes.items()]

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence]) -> AssociationTable:
        table = cls()
        for pair in pairs:
            if len(pair) != 2:
                logger.warning(f"Skipping malformed association pair {pair!r}")
                continue
            player_id, route_ids = pair
            for route_id in route_ids or []:
                table.bind(str(player_id), str(route_id))
        return table

    @classmethod
    def rebuild(cls, players: Iterable[Player], routes: Iterable[Route]) -> AssociationTable:
        """Assign each route to the player nearest its first point.

        Used for boards saved without an association table. Ties go to
        the player that comes first in `players`.
        """
        players = list(players)
        table = cls()
        for route in routes:
            if not route.points:
                continue
            owner = nearest_player(route.start, players)
            if owner is not None:
                table.bind(owner.id, route.id)
        logger.info(f"Rebuilt associations for {len(table)} player(s)")
        return table


# =============================================================================
# Drag Translation
# =============================================================================

@dataclass
class DragSession:
    """One drag gesture of a player and the routes it owns.

    Positions are captured once at drag start. Every move computes its
    delta from those originals, so rounding never compounds across
    pointer events.
    """
    player_id: str
    origin: Point
    route_origins: dict[str, list[Point]] = field(default_factory=dict)

    @classmethod
    def begin(
        cls,
        player: Player,
        associations: AssociationTable,
        routes: Mapping[str, Route],
    ) -> DragSession:
        route_origins = {}
        for route_id in associations.routes_of(player.id):
            route = routes.get(route_id)
            if route is not None:
                route_origins[route_id] = list(route.points)
        return cls(player_id=player.id, origin=player.pos, route_origins=route_origins)

    def delta(self, x: float, y: float) -> Point:
        return Point(x - self.origin.x, y - self.origin.y)

    def moved_routes(self, x: float, y: float) -> dict[str, list[Point]]:
        """Owned route points for the player dropped at (x, y)."""
        d = self.delta(x, y)
        return {
            route_id: [p.translated(d.x, d.y) for p in points]
            for route_id, points in self.route_origins.items()
        }
