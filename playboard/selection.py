"""Rubber-band selection.

Hit-tests a drag rectangle against every entity collection. Each
entity variant supplies its own `hits(rect)` rule:

    players, text boxes   anchor point inside the rectangle
    routes                any vertex inside
    circles, footballs    bounding box overlaps (conservative)

A drag smaller than the threshold in both axes is a click, not a
selection, and leaves the current selection alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .core.entities import Circle, EntityKind, Football, Player, Route, TextBox
from .core.point import Point
from .geometry import Rect

logger = logging.getLogger(__name__)

SELECTION_THRESHOLD = 10.0  # pixels


@dataclass
class Selection:
    """Selected entity ids, one set per collection."""
    players: set[str] = field(default_factory=set)
    routes: set[str] = field(default_factory=set)
    text_boxes: set[str] = field(default_factory=set)
    circles: set[str] = field(default_factory=set)
    footballs: set[str] = field(default_factory=set)

    def ids_for(self, kind: EntityKind) -> set[str]:
        return {
            EntityKind.PLAYER: self.players,
            EntityKind.ROUTE: self.routes,
            EntityKind.TEXT_BOX: self.text_boxes,
            EntityKind.CIRCLE: self.circles,
            EntityKind.FOOTBALL: self.footballs,
        }[kind]

    def discard(self, entity_id: str) -> None:
        """Forget an id in every collection."""
        for kind in EntityKind:
            self.ids_for(kind).discard(entity_id)

    @property
    def is_empty(self) -> bool:
        return not (self.players or self.routes or self.text_boxes
                    or self.circles or self.footballs)

    def __len__(self) -> int:
        return (len(self.players) + len(self.routes) + len(self.text_boxes)
                + len(self.circles) + len(self.footballs))

    def to_dict(self) -> dict:
        return {
            "players": sorted(self.players),
            "routes": sorted(self.routes),
            "textBoxes": sorted(self.text_boxes),
            "circles": sorted(self.circles),
            "footballs": sorted(self.footballs),
        }


def select(
    rect: Rect,
    players: Iterable[Player] = (),
    routes: Iterable[Route] = (),
    text_boxes: Iterable[TextBox] = (),
    circles: Iterable[Circle] = (),
    footballs: Iterable[Football] = (),
) -> Selection:
    """Ids of every entity the rectangle touches."""
    return Selection(
        players={p.id for p in players if p.hits(rect)},
        routes={r.id for r in routes if r.hits(rect)},
        text_boxes={t.id for t in text_boxes if t.hits(rect)},
        circles={c.id for c in circles if c.hits(rect)},
        footballs={f.id for f in footballs if f.hits(rect)},
    )


def is_drag(start: Point, end: Point, threshold: float = SELECTION_THRESHOLD) -> bool:
    """True once the pointer has moved past the threshold on either axis."""
    return abs(end.x - start.x) > threshold or abs(end.y - start.y) > threshold


@dataclass
class SelectionGesture:
    """One press-drag-release of the selection rectangle."""
    start: Point
    end: Point
    threshold: float = SELECTION_THRESHOLD

    @classmethod
    def begin(cls, start: Point, threshold: float = SELECTION_THRESHOLD) -> SelectionGesture:
        return cls(start=start, end=start, threshold=threshold)

    def update(self, end: Point) -> None:
        self.end = end

    @property
    def rect(self) -> Rect:
        return Rect.from_corners(self.start, self.end)

    def finish(
        self,
        players: Iterable[Player] = (),
        routes: Iterable[Route] = (),
        text_boxes: Iterable[TextBox] = (),
        circles: Iterable[Circle] = (),
        footballs: Iterable[Football] = (),
    ) -> Optional[Selection]:
        """Selection for the gesture, or None if it was only a click."""
        if not is_drag(self.start, self.end, self.threshold):
            logger.debug("Selection gesture below threshold, treated as click")
            return None
        selection = select(self.rect, players, routes, text_boxes, circles, footballs)
        logger.debug(f"Selected {len(selection)} entities in {self.rect}")
        return selection
