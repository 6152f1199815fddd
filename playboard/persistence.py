"""Persisted play documents.

Reads and writes the JSON play format:

    {
        "id": "...", "name": "...", "playNotes": "...",
        "players": [...], "defensivePlayers": [...],
        "routes": [...], "textBoxes": [...], "circles": [...], "footballs": [...],
        "playerRouteAssociations": {"<player id>": ["<route id>", ...]}
    }

Older documents may carry the association table as an array of
[player id, [route ids]] pairs, or not at all. Both still load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .associations import AssociationTable
from .core.entities import Circle, Football, Player, Route, TextBox

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)


@dataclass
class PlayDocument:
    """A play as stored."""
    players: list[Player] = field(default_factory=list)
    defense: list[Player] = field(default_factory=list)
    routes: list[Route] = field(default_factory=list)
    text_boxes: list[TextBox] = field(default_factory=list)
    circles: list[Circle] = field(default_factory=list)
    footballs: list[Football] = field(default_factory=list)
    associations: AssociationTable = field(default_factory=AssociationTable)
    id: Optional[str] = None
    name: str = ""
    notes: str = ""

    def apply_to(self, board: Board) -> None:
        """Load this document into a board."""
        board.load(
            offense=self.players,
            defense=self.defense,
            routes=self.routes,
            text_boxes=self.text_boxes,
            circles=self.circles,
            footballs=self.footballs,
            associations=self.associations,
        )


def _load_associations(raw, players: list[Player], routes: list[Route]) -> AssociationTable:
    if raw is None:
        return AssociationTable.rebuild(players, routes)
    if isinstance(raw, list):
        return AssociationTable.from_pairs(raw)
    if isinstance(raw, dict):
        return AssociationTable({str(k): [str(r) for r in v or []] for k, v in raw.items()})
    logger.warning(f"Unreadable association table of type {type(raw).__name__}, rebuilding")
    return AssociationTable.rebuild(players, routes)


def load_play(data: dict) -> PlayDocument:
    """Build a PlayDocument from parsed JSON.

    Routes with fewer than two points are skipped, and association
    entries pointing at them are dropped.
    """
    players: list[Player] = []
    defense: list[Player] = []
    for raw in data.get("players") or []:
        player = Player.from_dict(raw)
        (players if player.is_offense else defense).append(player)
    for raw in data.get("defensivePlayers") or []:
        defense.append(Player.from_dict({**raw, "type": "defense"}))

    routes = []
    for raw in data.get("routes") or []:
        route = Route.from_dict(raw)
        if not route.is_valid:
            logger.warning(f"Skipping route {route.id} with {len(route.points)} point(s)")
            continue
        routes.append(route)

    associations = _load_associations(data.get("playerRouteAssociations"), players, routes)
    associations.prune(r.id for r in routes)

    document = PlayDocument(
        players=players,
        defense=defense,
        routes=routes,
        text_boxes=[TextBox.from_dict(t) for t in data.get("textBoxes") or []],
        circles=[Circle.from_dict(c) for c in data.get("circles") or []],
        footballs=[Football.from_dict(f) for f in data.get("footballs") or []],
        associations=associations,
        id=data.get("id"),
        name=data.get("name", ""),
        notes=data.get("playNotes", ""),
    )
    logger.info(
        f"Loaded play {document.name!r}: {len(players)} offense, {len(defense)} defense, "
        f"{len(routes)} routes"
    )
    return document


def dump_play(board: Board, name: str = "", notes: str = "", play_id: Optional[str] = None) -> dict:
    """Serialize a board. Associations are written in object form."""
    data = {
        "name": name,
        "players": [p.to_dict() for p in board.offense],
        "defensivePlayers": [p.to_dict() for p in board.defense],
        "routes": [r.to_dict() for r in board.routes],
        "textBoxes": [t.to_dict() for t in board.text_boxes],
        "circles": [c.to_dict() for c in board.circles],
        "footballs": [f.to_dict() for f in board.footballs],
        "playerRouteAssociations": board.associations.to_dict(),
    }
    if play_id is not None:
        data["id"] = play_id
    if notes.strip():
        data["playNotes"] = notes.strip()
    return data


def loads(text: str) -> PlayDocument:
    return load_play(json.loads(text))


def dumps(board: Board, **kwargs) -> str:
    return json.dumps(dump_play(board, **kwargs), indent=2)
