"""Exceptions raised by board operations.

Malformed persisted data never raises; those entities are skipped and
logged. These exceptions cover misuse of a live board.
"""


class PlayboardError(Exception):
    """Base class for board errors."""
    pass


class NothingToAnimate(PlayboardError):
    """Raised when playback is started on a board with no routes."""
    pass


class NoOffense(PlayboardError):
    """Raised when a defense is generated before any offense is placed."""
    pass


class BoardBusy(PlayboardError):
    """Raised when an edit is attempted while playback is running."""
    pass


class UnknownEntity(PlayboardError):
    """Raised when an operation names an entity that is not on the board."""
    pass


class NoRouteInProgress(PlayboardError):
    """Raised when a stroke is extended or finished without being begun."""
    pass
