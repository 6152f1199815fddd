"""In-memory board sessions for the API."""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional
from uuid import uuid4

from playboard.animation.playback import PlaybackSession
from playboard.board import Board
from playboard.config import get_config
from playboard.history import ImmediateScheduler

logger = logging.getLogger(__name__)


@dataclass
class BoardSession:
    """One board being edited through the API."""

    board_id: str
    board: Board
    name: str = ""
    playback: Optional[PlaybackSession] = field(default=None, repr=False)

    async def stop_playback(self) -> None:
        if self.playback is not None:
            await self.playback.stop()
            self.playback = None


class BoardSessionManager:
    """
    Holds the boards of every connected client.

    Boards created here commit history immediately: each request is
    already one discrete edit.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, BoardSession] = {}

    def create_session(
        self,
        name: str = "",
        field_width: Optional[float] = None,
        field_height: Optional[float] = None,
    ) -> BoardSession:
        config = get_config()
        if field_width is not None:
            config = replace(config, field_width=field_width)
        if field_height is not None:
            config = replace(config, field_height=field_height)

        board_id = str(uuid4())
        board = Board(config=config, scheduler=ImmediateScheduler())
        session = BoardSession(board_id=board_id, board=board, name=name)
        self._sessions[board_id] = session
        logger.info(f"Created board {board_id} ({config.field_width}x{config.field_height})")
        return session

    def get_session(self, board_id: str) -> Optional[BoardSession]:
        return self._sessions.get(board_id)

    async def delete_session(self, board_id: str) -> bool:
        """Delete a session, stopping its playback. Returns False if unknown."""
        session = self._sessions.pop(board_id, None)
        if session is None:
            return False
        await session.stop_playback()
        logger.info(f"Deleted board {board_id}")
        return True

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    @property
    def active_sessions(self) -> list[str]:
        return self.list_sessions()

    async def cleanup_all(self) -> None:
        for board_id in list(self._sessions):
            await self.delete_session(board_id)


_session_manager: Optional[BoardSessionManager] = None


def get_session_manager() -> BoardSessionManager:
    """Get the global session manager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = BoardSessionManager()
    return _session_manager


def reset_session_manager() -> None:
    """Drop every session. Useful for testing."""
    global _session_manager
    _session_manager = None
