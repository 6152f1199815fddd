"""Playboard - a 2D play diagram editor with route capture and animated playback."""

from playboard.board import Board
from playboard.config import BoardConfig, get_config
from playboard.errors import PlayboardError
from playboard.persistence import PlayDocument, dump_play, load_play

__version__ = "0.1.0"

__all__ = [
    "Board",
    "BoardConfig",
    "PlayDocument",
    "PlayboardError",
    "dump_play",
    "get_config",
    "load_play",
]
