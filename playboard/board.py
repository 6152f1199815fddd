"""The board: one editable play diagram.

Board owns every entity collection, the association table and the edit
history, and routes each edit through the module that implements it:

    capture        route strokes
    associations   route ownership and player drags
    selection      rubber-band selection
    history        undo / redo
    animation      playback

Every edit that changes persisted state requests a debounced history
snapshot and emits a BoardEvent.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union
from uuid import uuid4

from .animation.clock import AnimationClock
from .animation.coverage import CoveragePattern, get_coverage
from .animation.engine import AnimationEngine, Frame
from .associations import AssociationTable, DragSession
from .capture import RouteCapture
from .config import BoardConfig, get_config
from .core.entities import (
    Circle,
    Entity,
    EntityKind,
    Football,
    LineBreakType,
    Player,
    Route,
    RouteStyle,
    Team,
    TextBox,
)
from .core.events import BoardEventType, EventBus
from .core.point import Point
from .errors import BoardBusy, NoOffense, NoRouteInProgress, NothingToAnimate, UnknownEntity
from .formations import (
    DEFENSE_GROUP_TEMPLATE,
    RouteTemplate,
    defense_positions,
    full_offense,
    get_template,
    offense_position,
    template_from_route,
    template_position,
)
from .history import BoardSnapshot, History, Scheduler
from .selection import Selection, SelectionGesture

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid4())


@dataclass
class _Drag:
    """An in-progress drag of one entity."""
    kind: EntityKind
    entity_id: str
    origin: Entity
    anchor: Point
    session: Optional[DragSession] = None
    moved: bool = False


def _anchor(entity: Entity) -> Point:
    if isinstance(entity, Route):
        return entity.start
    return Point(entity.x, entity.y)


class Board:
    """A play diagram and its editing state.

    Args:
        config: Tuning constants (defaults to the global config)
        bus: Event bus to emit on (a private one is created if omitted)
        scheduler: History debounce backend
        id_factory: Id generator for new entities
    """

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        bus: Optional[EventBus] = None,
        scheduler: Optional[Scheduler] = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.config = config or get_config()
        self.bus = bus or EventBus()
        self._new_id = id_factory

        self.offense: list[Player] = []
        self.defense: list[Player] = []
        self.routes: list[Route] = []
        self.text_boxes: list[TextBox] = []
        self.circles: list[Circle] = []
        self.footballs: list[Football] = []
        self.associations = AssociationTable()
        self.templates: dict[str, RouteTemplate] = {}
        self.coverage: Optional[CoveragePattern] = None

        self._selection = Selection()
        self._gesture: Optional[SelectionGesture] = None
        self._capture: Optional[RouteCapture] = None
        self._drag: Optional[_Drag] = None

        self.clock = AnimationClock.stopped()
        self._engine: Optional[AnimationEngine] = None
        self._completion_reported = False

        self.history: History[BoardSnapshot] = History(
            self._take_snapshot,
            cap=self.config.history_cap,
            debounce=self.config.history_debounce,
            scheduler=scheduler,
        )
        self.history.reset(BoardSnapshot.empty())

    @property
    def width(self) -> float:
        return self.config.field_width

    @property
    def height(self) -> float:
        return self.config.field_height

    @property
    def players(self) -> list[Player]:
        """Offense then defense."""
        return self.offense + self.defense

    # =========================================================================
    # Lookup
    # =========================================================================

    def _collection(self, kind: EntityKind) -> list:
        return {
            EntityKind.ROUTE: self.routes,
            EntityKind.TEXT_BOX: self.text_boxes,
            EntityKind.CIRCLE: self.circles,
            EntityKind.FOOTBALL: self.footballs,
        }[kind]

    def get(self, kind: EntityKind, entity_id: str) -> Entity:
        """Find an entity by kind and id. Raises UnknownEntity."""
        if kind == EntityKind.PLAYER:
            items: Iterable = self.players
        else:
            items = self._collection(kind)
        for entity in items:
            if entity.id == entity_id:
                return entity
        raise UnknownEntity(f"No {kind.value} with id {entity_id}")

    def get_player(self, player_id: str) -> Player:
        return self.get(EntityKind.PLAYER, player_id)

    def get_route(self, route_id: str) -> Route:
        return self.get(EntityKind.ROUTE, route_id)

    def _replace(self, entity: Entity) -> None:
        if isinstance(entity, Player):
            collection = self.offense if entity.is_offense else self.defense
        else:
            collection = self._collection(entity.kind)
        for i, existing in enumerate(collection):
            if existing.id == entity.id:
                collection[i] = entity
                return
        raise UnknownEntity(f"No {entity.kind.value} with id {entity.id}")

    def _routes_by_id(self) -> dict[str, Route]:
        return {r.id: r for r in self.routes}

    def _ensure_idle(self, action: str) -> None:
        if self.is_animating:
            raise BoardBusy(f"Cannot {action} while playback is running")

    # =========================================================================
    # History
    # =========================================================================

    def _take_snapshot(self) -> BoardSnapshot:
        snapshot = BoardSnapshot.capture(
            self.offense, self.routes, self.text_boxes,
            self.circles, self.footballs, self.associations,
        )
        self.bus.emit_simple(
            BoardEventType.HISTORY_COMMITTED,
            description=f"{len(snapshot.players)} players, {len(snapshot.routes)} routes",
        )
        return snapshot

    def _edited(self) -> None:
        self.history.snapshot()

    def _apply(self, snapshot: BoardSnapshot) -> None:
        state = snapshot.restore()
        self.offense = state["players"]
        self.routes = state["routes"]
        self.text_boxes = state["text_boxes"]
        self.circles = state["circles"]
        self.footballs = state["footballs"]
        self.associations = state["associations"]
        self._selection = Selection()

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False at the start of history."""
        self._ensure_idle("undo")
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._apply(snapshot)
        self.bus.emit_simple(BoardEventType.UNDO, description=f"at {self.history.position}")
        return True

    def redo(self) -> bool:
        """Re-apply the next snapshot. Returns False at the end of history."""
        self._ensure_idle("redo")
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._apply(snapshot)
        self.bus.emit_simple(BoardEventType.REDO, description=f"at {self.history.position}")
        return True

    def clear(self) -> None:
        """Remove everything and start a fresh history."""
        self.stop_animation()
        self._capture = None
        self._drag = None
        self._gesture = None
        self.offense = []
        self.defense = []
        self.routes = []
        self.text_boxes = []
        self.circles = []
        self.footballs = []
        self.associations = AssociationTable()
        self._selection = Selection()
        self.history.reset(BoardSnapshot.empty())
        self.bus.emit_simple(BoardEventType.BOARD_CLEARED)
        logger.info("Board cleared")

    def load(
        self,
        offense: Iterable[Player] = (),
        defense: Iterable[Player] = (),
        routes: Iterable[Route] = (),
        text_boxes: Iterable[TextBox] = (),
        circles: Iterable[Circle] = (),
        footballs: Iterable[Football] = (),
        associations: Optional[AssociationTable] = None,
    ) -> None:
        """Replace the board contents. History restarts from the loaded state."""
        self.stop_animation()
        self.offense = list(offense)
        self.defense = list(defense)
        self.routes = list(routes)
        self.text_boxes = list(text_boxes)
        self.circles = list(circles)
        self.footballs = list(footballs)
        self.associations = associations.copy() if associations else AssociationTable()
        self.associations.prune(r.id for r in self.routes)
        self._selection = Selection()
        self.history.reset(BoardSnapshot.capture(
            self.offense, self.routes, self.text_boxes,
            self.circles, self.footballs, self.associations,
        ))
        self.bus.emit_simple(
            BoardEventType.BOARD_LOADED,
            description=f"{len(self.players)} players, {len(self.routes)} routes",
        )

    # =========================================================================
    # Players
    # =========================================================================

    def _add_offense(self, color: str, position: Point) -> Player:
        player = Player(id=self._new_id(), x=position.x, y=position.y, color=color)
        self.offense.append(player)
        self.bus.emit_simple(BoardEventType.PLAYER_ADDED, player.id, color=color)
        return player

    def add_player(self, color: str = "blue") -> Player:
        """Add an offense player at the default spot for its color."""
        self._ensure_idle("add players")
        player = self._add_offense(color, offense_position(color, self.offense, self.width, self.height))
        self._edited()
        return player

    def add_all_players(self) -> list[Player]:
        """Add one player of every offense color."""
        self._ensure_idle("add players")
        added = [self._add_offense(color, pos) for color, pos in full_offense(self.width, self.height)]
        self._edited()
        return added

    def change_player_color(self, player_id: str, color: str) -> Player:
        player = self.get_player(player_id)
        player.color = color
        if player.is_offense:
            self._edited()
        return player

    def _defenders(self, color: str, positions: Iterable[Point]) -> list[Player]:
        return [
            Player(id=self._new_id(), x=p.x, y=p.y, color=color, team=Team.DEFENSE)
            for p in positions
        ]

    def create_defense(self) -> list[Player]:
        """Replace the defense with the five-man template.

        Raises NoOffense when there is nothing to line up against.
        """
        self._ensure_idle("create defense")
        if not self.offense:
            raise NoOffense("Add offense players before creating a defense")
        self.defense = self._defenders("grey", defense_positions(self.width, self.height))
        self.bus.emit_simple(BoardEventType.ENTITY_ADDED, count=len(self.defense), kind="defense")
        return list(self.defense)

    def add_defense_group(self, color: str = "purple") -> list[Player]:
        """Add five more defenders of one color, keeping the existing ones."""
        self._ensure_idle("add defenders")
        group = self._defenders(
            color, defense_positions(self.width, self.height, DEFENSE_GROUP_TEMPLATE)
        )
        self.defense.extend(group)
        self.bus.emit_simple(BoardEventType.ENTITY_ADDED, count=len(group), kind="defense")
        return group

    def add_defender(self, x: float, y: float, color: str = "grey") -> Player:
        self._ensure_idle("add defenders")
        defender = Player(id=self._new_id(), x=x, y=y, color=color, team=Team.DEFENSE)
        self.defense.append(defender)
        self.bus.emit_simple(BoardEventType.PLAYER_ADDED, defender.id, color=color, team="defense")
        return defender

    # =========================================================================
    # Annotations
    # =========================================================================

    def _add_annotation(self, entity: Entity) -> Entity:
        self._collection(entity.kind).append(entity)
        self.bus.emit_simple(BoardEventType.ENTITY_ADDED, entity.id, kind=entity.kind.value)
        self._edited()
        return entity

    def add_text_box(self, x: float, y: float, text: str = "Click to edit",
                     font_size: int = 16, color: str = "black") -> TextBox:
        return self._add_annotation(
            TextBox(id=self._new_id(), x=x, y=y, text=text, font_size=font_size, color=color)
        )

    def edit_text_box(self, text_box_id: str, text: Optional[str] = None,
                      font_size: Optional[int] = None, color: Optional[str] = None) -> TextBox:
        text_box = self.get(EntityKind.TEXT_BOX, text_box_id)
        if text is not None:
            text_box.text = text
        if font_size is not None:
            text_box.font_size = font_size
        if color is not None:
            text_box.color = color
        self._edited()
        return text_box

    def add_circle(self, x: float, y: float, radius: float = 8.0, color: str = "black") -> Circle:
        return self._add_annotation(Circle(id=self._new_id(), x=x, y=y, radius=radius, color=color))

    def add_football(self, x: Optional[float] = None, y: Optional[float] = None) -> Football:
        """Add a football icon. Defaults to the middle of the field."""
        if x is None:
            x = self.width / 2
        if y is None:
            y = self.height / 2
        return self._add_annotation(Football(id=self._new_id(), x=x, y=y))

    # =========================================================================
    # Routes
    # =========================================================================

    def begin_route(
        self,
        x: float,
        y: float,
        line_break_type: Union[LineBreakType, str] = LineBreakType.RIGID,
        style: Union[RouteStyle, str] = RouteStyle.SOLID,
        timestamp: Optional[float] = None,
        color: str = "black",
    ) -> RouteCapture:
        """Start drawing a route at the press point."""
        self._ensure_idle("draw routes")
        self._capture = RouteCapture.begin(
            Point(x, y),
            LineBreakType(line_break_type),
            RouteStyle(style),
            time.monotonic() if timestamp is None else timestamp,
            color=color,
            pause_threshold=self.config.pause_threshold,
            min_sample_distance=self.config.min_sample_distance,
        )
        return self._capture

    def extend_route(self, x: float, y: float, timestamp: Optional[float] = None) -> None:
        if self._capture is None:
            raise NoRouteInProgress("No route is being drawn")
        self._capture.move(Point(x, y), time.monotonic() if timestamp is None else timestamp)

    @property
    def drawing(self) -> bool:
        return self._capture is not None

    def route_preview(self) -> list[Point]:
        """Points of the stroke in progress, clipped for its arrow."""
        if self._capture is None:
            return []
        return self._capture.preview_points(self.config.arrow_gap)

    def finish_route(self) -> Optional[Route]:
        """Finish the stroke in progress.

        The new route is bound to the nearest offense player. Returns
        None if the stroke was only a click.
        """
        if self._capture is None:
            raise NoRouteInProgress("No route is being drawn")
        capture, self._capture = self._capture, None
        captured = capture.finish(self._new_id(), self.offense)
        if captured is None:
            return None

        route = captured.route
        self.routes.append(route)
        self.bus.emit_simple(
            BoardEventType.ROUTE_CAPTURED, route.id,
            line_break_type=route.line_break_type.value, points=len(route.points),
        )
        if captured.owner_id is not None:
            self.associations.bind(captured.owner_id, route.id)
            self.bus.emit_simple(BoardEventType.ROUTE_BOUND, route.id, owner=captured.owner_id)
        self._edited()
        return route

    def cancel_route(self) -> None:
        self._capture = None

    def toggle_route_arrow(self, route_id: str) -> bool:
        """Flip a route's arrow. Returns the new value."""
        route = self.get_route(route_id)
        route.show_arrow = not route.show_arrow
        self._edited()
        return route.show_arrow

    def save_template(self, name: str, player_id: str) -> RouteTemplate:
        """Store a player's first route as a reusable template."""
        player = self.get_player(player_id)
        route = self.associations.playable_route(player.id, self._routes_by_id())
        if route is None:
            raise UnknownEntity(f"Player {player_id} has no route to save")
        template = template_from_route(name, route, player)
        self.templates[name] = template
        logger.info(f"Saved route template {name!r}")
        return template

    def add_route_from_template(self, name: str) -> tuple[Player, Route]:
        """Place a player at its default spot running a template route."""
        self._ensure_idle("add routes")
        template = self.templates.get(name) or get_template(name)
        if template is None:
            raise UnknownEntity(f"No route template named {name!r}")

        start = template_position(template.player_color, self.width, self.height)
        player = self._add_offense(template.player_color, start)
        route = template.place(self._new_id(), start)
        self.routes.append(route)
        self.associations.bind(player.id, route.id)
        self.bus.emit_simple(BoardEventType.ROUTE_BOUND, route.id, owner=player.id, template=name)
        self._edited()
        return player, route

    # =========================================================================
    # Drag
    # =========================================================================

    def begin_drag(self, kind: Union[EntityKind, str], entity_id: str) -> None:
        self._ensure_idle("drag")
        kind = EntityKind(kind)
        entity = self.get(kind, entity_id)
        session = None
        if isinstance(entity, Player):
            session = DragSession.begin(entity, self.associations, self._routes_by_id())
        self._drag = _Drag(
            kind=kind,
            entity_id=entity_id,
            origin=entity.translated(0, 0),
            anchor=_anchor(entity),
            session=session,
        )

    def drag_to(self, x: float, y: float) -> Entity:
        """Move the dragged entity so its anchor sits at (x, y).

        A dragged player carries its owned routes. Offsets are always
        taken from the drag-start positions.
        """
        self._ensure_idle("drag")
        if self._drag is None:
            raise UnknownEntity("No drag in progress")
        drag = self._drag
        dx, dy = x - drag.anchor.x, y - drag.anchor.y
        moved = drag.origin.translated(dx, dy)
        self._replace(moved)

        if drag.session is not None:
            routes = self._routes_by_id()
            for route_id, points in drag.session.moved_routes(x, y).items():
                route = routes.get(route_id)
                if route is not None:
                    route.points = points
        drag.moved = True
        return moved

    def end_drag(self) -> None:
        drag, self._drag = self._drag, None
        if drag is None or not drag.moved:
            return
        entity = self.get(drag.kind, drag.entity_id)
        if isinstance(entity, Player):
            self.bus.emit_simple(BoardEventType.PLAYER_MOVED, entity.id, x=entity.x, y=entity.y)
            if not entity.is_offense:
                return
        self._edited()

    # =========================================================================
    # Selection / Deletion
    # =========================================================================

    @property
    def selection(self) -> Selection:
        return self._selection

    def begin_selection(self, x: float, y: float) -> None:
        """Press on empty canvas: clears the selection and starts a rectangle."""
        self._selection = Selection()
        self._gesture = SelectionGesture.begin(Point(x, y), self.config.selection_threshold)

    def update_selection(self, x: float, y: float) -> None:
        if self._gesture is not None:
            self._gesture.update(Point(x, y))

    def finish_selection(self) -> Selection:
        gesture, self._gesture = self._gesture, None
        if gesture is None:
            return self._selection
        selection = gesture.finish(
            self.players, self.routes, self.text_boxes, self.circles, self.footballs
        )
        if selection is not None:
            self._selection = selection
            self.bus.emit_simple(BoardEventType.SELECTION_CHANGED, count=len(selection))
        return self._selection

    def select_rect(self, x1: float, y1: float, x2: float, y2: float) -> Selection:
        """Run a whole selection gesture in one call."""
        self.begin_selection(x1, y1)
        self.update_selection(x2, y2)
        return self.finish_selection()

    def _delete(self, kind: EntityKind, entity_id: str) -> int:
        if kind == EntityKind.PLAYER:
            before = len(self.players)
            self.offense = [p for p in self.offense if p.id != entity_id]
            self.defense = [p for p in self.defense if p.id != entity_id]
            if len(self.players) == before:
                return 0
            owned = set(self.associations.unbind(entity_id))
            self.routes = [r for r in self.routes if r.id not in owned]
            return 1 + len(owned)

        collection = self._collection(kind)
        kept = [e for e in collection if e.id != entity_id]
        if len(kept) == len(collection):
            return 0
        collection[:] = kept
        if kind == EntityKind.ROUTE:
            self.associations.unbind_route(entity_id)
        return 1

    def delete_item(self, kind: Union[EntityKind, str], entity_id: str) -> int:
        """Delete one entity. Returns how many entities were removed."""
        self._ensure_idle("delete")
        kind = EntityKind(kind)
        removed = self._delete(kind, entity_id)
        if not removed:
            raise UnknownEntity(f"No {kind.value} with id {entity_id}")
        self._selection.discard(entity_id)
        self.bus.emit_simple(BoardEventType.ENTITIES_DELETED, entity_id, count=removed)
        self._edited()
        return removed

    def delete_selected(self) -> int:
        """Delete everything selected. Returns how many entities were removed."""
        self._ensure_idle("delete")
        removed = 0
        for kind in EntityKind:
            for entity_id in sorted(self._selection.ids_for(kind)):
                removed += self._delete(kind, entity_id)
        self._selection = Selection()
        if removed:
            self.bus.emit_simple(BoardEventType.ENTITIES_DELETED, count=removed)
            self._edited()
        return removed

    # =========================================================================
    # Playback
    # =========================================================================

    def set_coverage(self, pattern_id: Optional[str]) -> Optional[CoveragePattern]:
        """Pick the defensive coverage pattern. None means pursuit for everyone."""
        if pattern_id is None:
            self.coverage = None
            return None
        pattern = get_coverage(pattern_id)
        if pattern is None:
            raise UnknownEntity(f"No coverage pattern {pattern_id!r}")
        self.coverage = pattern
        return pattern

    @property
    def is_animating(self) -> bool:
        return self.clock.running

    def _build_engine(self) -> AnimationEngine:
        if not any(r.is_valid for r in self.routes):
            raise NothingToAnimate("Draw at least one route before playing")
        return AnimationEngine(
            self.offense,
            self.defense,
            self.routes,
            self.associations,
            coverage=self.coverage,
            field_width=self.width,
            field_height=self.height,
            speed=self.config.animation_speed,
            pursuit_fraction=self.config.pursuit_fraction,
            pursuit_max_step=self.config.pursuit_max_step,
            tick_rate=self.config.tick_rate,
        )

    def start_animation(self, now: Optional[float] = None) -> None:
        """Start playback at `now` (monotonic seconds).

        Raises NothingToAnimate when the board has no usable route.
        """
        self._engine = self._build_engine()
        self._capture = None
        self._drag = None
        self.clock = AnimationClock.started(time.monotonic() if now is None else now)
        self._completion_reported = False
        self.bus.emit_simple(
            BoardEventType.PLAYBACK_STARTED, duration=self._engine.duration
        )
        logger.info(f"Playback started, duration {self._engine.duration:.2f}s")

    def stop_animation(self) -> None:
        """Stop playback. Players return to rest. Safe to call repeatedly."""
        if not self.clock.running:
            return
        self.clock = self.clock.stop()
        self._engine = None
        self.bus.emit_simple(BoardEventType.PLAYBACK_STOPPED)

    @property
    def duration(self) -> float:
        return self._engine.duration if self._engine else 0.0

    def animated_position(self, player: Union[Player, str], now: Optional[float] = None) -> Point:
        """Where a player is drawn at `now`. Rest position when not playing."""
        if isinstance(player, str):
            player = self.get_player(player)
        if self._engine is None:
            return player.pos
        return self._engine.position_of(player, self.clock, time.monotonic() if now is None else now)

    def frame(self, now: Optional[float] = None) -> Frame:
        """Every player's position at `now`."""
        if self._engine is None:
            return Frame(
                elapsed=0.0,
                progress=0.0,
                positions={p.id: p.pos for p in self.players},
            )
        frame = self._engine.frame(self.clock, time.monotonic() if now is None else now)
        if frame.complete and not self._completion_reported:
            self._completion_reported = True
            self.bus.emit_simple(BoardEventType.PLAYBACK_COMPLETE, elapsed=frame.elapsed)
        return frame

    def preview_frame(self, elapsed: float) -> Frame:
        """Positions `elapsed` seconds into a fresh run, without starting playback.

        Times past the end of playback give the final frame.
        """
        engine = self._build_engine()
        elapsed = min(max(elapsed, 0.0), engine.duration)
        return engine.frame(AnimationClock.started(0.0), elapsed)
