"""Event system for board state changes.

Events are emitted by the board as it is edited and played back. The
API layer and loggers subscribe to them.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class BoardEventType(str, Enum):
    """Types of events a board emits."""

    # =========================================================================
    # Editing
    # =========================================================================
    PLAYER_ADDED = "player_added"
    PLAYER_MOVED = "player_moved"
    ROUTE_CAPTURED = "route_captured"
    ROUTE_BOUND = "route_bound"
    ENTITY_ADDED = "entity_added"
    ENTITIES_DELETED = "entities_deleted"
    SELECTION_CHANGED = "selection_changed"
    BOARD_CLEARED = "board_cleared"
    BOARD_LOADED = "board_loaded"

    # =========================================================================
    # History
    # =========================================================================
    HISTORY_COMMITTED = "history_committed"
    UNDO = "undo"
    REDO = "redo"

    # =========================================================================
    # Playback
    # =========================================================================
    PLAYBACK_STARTED = "playback_started"
    PLAYBACK_STOPPED = "playback_stopped"
    PLAYBACK_COMPLETE = "playback_complete"


@dataclass
class BoardEvent:
    """Something that happened on a board.

    Attributes:
        type: The type of event
        entity_id: Primary entity involved (if any)
        data: Additional event-specific data
        description: Human-readable description
    """
    type: BoardEventType
    entity_id: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    def __str__(self) -> str:
        parts = [self.type.value]
        if self.entity_id:
            parts.append(f"[{self.entity_id}]")
        if self.description:
            parts.append(f"- {self.description}")
        return " ".join(parts)


EventHandler = Callable[[BoardEvent], None]


class EventBus:
    """Pub/sub event bus for board events.

    Usage:
        bus = EventBus()
        bus.subscribe(BoardEventType.UNDO, on_undo)
        bus.subscribe_all(log_event)
        bus.emit_simple(BoardEventType.UNDO, description="restored 3")
    """

    def __init__(self, record: bool = False) -> None:
        self._handlers: dict[BoardEventType, list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []
        self._history: list[BoardEvent] = []
        self._recording = record

    def subscribe(self, event_type: BoardEventType, handler: EventHandler) -> None:
        """Subscribe to a specific event type."""
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)

    def unsubscribe(self, event_type: BoardEventType, handler: EventHandler) -> None:
        """Unsubscribe from a specific event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def emit(self, event: BoardEvent) -> None:
        """Emit an event to all subscribers."""
        if self._recording:
            self._history.append(event)

        for handler in self._handlers[event.type]:
            handler(event)

        for handler in self._global_handlers:
            handler(event)

    def emit_simple(
        self,
        event_type: BoardEventType,
        entity_id: Optional[str] = None,
        description: str = "",
        **data: Any,
    ) -> BoardEvent:
        """Convenience method to emit an event with less boilerplate."""
        event = BoardEvent(
            type=event_type,
            entity_id=entity_id,
            description=description,
            data=data,
        )
        self.emit(event)
        return event

    @property
    def history(self) -> list[BoardEvent]:
        """Recorded events (empty unless recording is enabled)."""
        return self._history

    def get_events_by_type(self, event_type: BoardEventType) -> list[BoardEvent]:
        """All recorded events of a specific type."""
        return [e for e in self._history if e.type == event_type]
