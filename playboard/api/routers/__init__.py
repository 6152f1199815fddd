"""API routers."""

from playboard.api.routers.boards import router as boards_router
from playboard.api.routers.playback_websocket import router as playback_websocket_router

__all__ = [
    "boards_router",
    "playback_websocket_router",
]
