"""Undo / redo history.

A linear stack of board snapshots with a cursor. The History object is
the only owner of the cursor; callers commit, undo and redo through it.

Snapshots requested through snapshot() are debounced on a short
trailing window, so a burst of edits becomes a single entry. The
capture runs when the window closes, recording the state at that
moment. Pending captures are flushed before undo or redo so a late
capture can never overwrite a restored state.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Protocol, TypeVar

from .associations import AssociationTable
from .core.entities import Circle, Football, Player, Route, TextBox

logger = logging.getLogger(__name__)

HISTORY_CAP = 50
DEBOUNCE_SECONDS = 0.05


@dataclass(frozen=True)
class BoardSnapshot:
    """Deep copy of the editable board state at one point in edit time.

    Defense players are not part of edit history.
    """
    players: tuple[Player, ...] = ()
    routes: tuple[Route, ...] = ()
    text_boxes: tuple[TextBox, ...] = ()
    circles: tuple[Circle, ...] = ()
    footballs: tuple[Football, ...] = ()
    associations: AssociationTable = field(default_factory=AssociationTable)

    @classmethod
    def capture(
        cls,
        players=(),
        routes=(),
        text_boxes=(),
        circles=(),
        footballs=(),
        associations: Optional[AssociationTable] = None,
    ) -> BoardSnapshot:
        """Copy the given collections so later edits cannot reach the snapshot."""
        return cls(
            players=tuple(copy.deepcopy(list(players))),
            routes=tuple(copy.deepcopy(list(routes))),
            text_boxes=tuple(copy.deepcopy(list(text_boxes))),
            circles=tuple(copy.deepcopy(list(circles))),
            footballs=tuple(copy.deepcopy(list(footballs))),
            associations=(associations or AssociationTable()).copy(),
        )

    @classmethod
    def empty(cls) -> BoardSnapshot:
        return cls()

    def restore(self) -> dict:
        """Fresh mutable copies of every collection, for applying to a board."""
        return {
            "players": copy.deepcopy(list(self.players)),
            "routes": copy.deepcopy(list(self.routes)),
            "text_boxes": copy.deepcopy(list(self.text_boxes)),
            "circles": copy.deepcopy(list(self.circles)),
            "footballs": copy.deepcopy(list(self.footballs)),
            "associations": self.associations.copy(),
        }


# =============================================================================
# Schedulers
# =============================================================================

class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs a callback after a delay. The returned handle can cancel it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class _Done:
    def cancel(self) -> None:
        pass


class ImmediateScheduler:
    """Runs callbacks synchronously, for use outside an event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        callback()
        return _Done()


class AsyncioScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        return asyncio.get_running_loop().call_later(delay, callback)


def default_scheduler() -> Scheduler:
    """Asyncio scheduling inside a running loop, immediate otherwise."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return ImmediateScheduler()
    return AsyncioScheduler()


# =============================================================================
# History
# =============================================================================

S = TypeVar("S")


class History(Generic[S]):
    """Capped linear undo/redo stack.

    Args:
        capture: Returns the current state when a debounced snapshot fires
        cap: Maximum number of entries kept
        debounce: Trailing debounce window in seconds
        scheduler: Deferred-execution backend for the debounce

    Invariant: once reset, the cursor is within [0, len - 1].
    """

    def __init__(
        self,
        capture: Callable[[], S],
        cap: int = HISTORY_CAP,
        debounce: float = DEBOUNCE_SECONDS,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._capture = capture
        self.cap = cap
        self.debounce = debounce
        self._scheduler = scheduler
        self._entries: list[S] = []
        self._index = -1
        self._pending: Optional[Cancellable] = None

    # =========================================================================
    # Recording
    # =========================================================================

    def reset(self, initial: S) -> None:
        """Drop all history and start over from one state."""
        self.cancel_pending()
        self._entries = [initial]
        self._index = 0

    def commit(self, state: S) -> None:
        """Push a state now, discarding any redo entries."""
        del self._entries[self._index + 1:]
        self._entries.append(state)
        if len(self._entries) > self.cap:
            # Evict the oldest; the cursor stays on the same index
            self._entries.pop(0)
        else:
            self._index += 1
        logger.debug(f"History committed ({self._index + 1}/{len(self._entries)})")

    def snapshot(self) -> None:
        """Request a debounced capture of the current state.

        A request inside the window of an earlier one replaces it.
        """
        self.cancel_pending()
        scheduler = self._scheduler or default_scheduler()
        # A scheduler may run the callback before call_later returns
        self._pending = _Done()
        handle = scheduler.call_later(self.debounce, self._fire)
        if self._pending is not None:
            self._pending = handle

    def _fire(self) -> None:
        self._pending = None
        self.commit(self._capture())

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel_pending(self) -> None:
        """Drop a scheduled capture without running it."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def flush(self) -> None:
        """Run a scheduled capture now instead of waiting for its window."""
        if self._pending is not None:
            self._pending.cancel()
            self._fire()

    # =========================================================================
    # Navigation
    # =========================================================================

    def undo(self) -> Optional[S]:
        """Step back one entry. Returns the state to restore, or None."""
        self.flush()
        if self._index <= 0:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[S]:
        """Step forward one entry. Returns the state to restore, or None."""
        self.flush()
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0 or self.has_pending

    @property
    def can_redo(self) -> bool:
        return 0 <= self._index < len(self._entries) - 1

    @property
    def current(self) -> Optional[S]:
        if self._index < 0:
            return None
        return self._entries[self._index]

    @property
    def position(self) -> int:
        """Cursor position (read-only)."""
        return self._index

    def __len__(self) -> int:
        return len(self._entries)
