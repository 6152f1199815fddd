"""WebSocket router for live board playback."""

import json
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from playboard.animation.engine import Frame
from playboard.animation.playback import PlaybackSession
from playboard.api.sessions import BoardSession, get_session_manager
from playboard.errors import NothingToAnimate
from playboard.persistence import dump_play

logger = logging.getLogger(__name__)

router = APIRouter(tags=["playback-websocket"])


def _state_to_payload(session: BoardSession) -> dict:
    board = session.board
    return {
        "board_id": session.board_id,
        "play": dump_play(board, name=session.name),
        "is_animating": board.is_animating,
        "duration": board.duration,
        "coverage": board.coverage.id if board.coverage else None,
    }


@router.websocket("/ws/boards/{board_id}/playback")
async def playback_websocket(websocket: WebSocket, board_id: str) -> None:
    """
    WebSocket endpoint for board playback.

    Client messages:
    - start: Start playback
    - stop: Stop playback and return players to rest
    - request_sync: Request full state sync

    Server messages:
    - frame: Player positions, sent every tick
    - playback_complete: Sent when the longest route has been run
    - state_sync: Full state on connect or request
    - error: Error message
    """
    await websocket.accept()

    session = get_session_manager().get_session(board_id)
    if session is None:
        await websocket.send_json({
            "type": "error",
            "message": "Board not found",
            "code": "BOARD_NOT_FOUND",
        })
        await websocket.close()
        return

    await websocket.send_json({
        "type": "state_sync",
        "payload": _state_to_payload(session),
    })

    async def send_frame(frame: Frame) -> None:
        await websocket.send_json({
            "type": "frame",
            "payload": frame.to_dict(),
        })

    async def send_complete(frame: Optional[Frame]) -> None:
        await websocket.send_json({
            "type": "playback_complete",
            "payload": frame.to_dict() if frame else None,
        })

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({
                    "type": "error",
                    "message": "Invalid JSON",
                    "code": "INVALID_JSON",
                })
                continue

            msg_type = message.get("type")

            if msg_type == "start":
                if session.playback is not None and session.playback.is_running:
                    await websocket.send_json({
                        "type": "error",
                        "message": "Playback already running",
                        "code": "START_FAILED",
                    })
                    continue
                playback = PlaybackSession(
                    session.board,
                    frame_interval=1 / session.board.config.tick_rate,
                )
                try:
                    playback.start(on_frame=send_frame, on_complete=send_complete)
                except NothingToAnimate as e:
                    await websocket.send_json({
                        "type": "error",
                        "message": str(e),
                        "code": "NOTHING_TO_ANIMATE",
                    })
                    continue
                session.playback = playback

            elif msg_type == "stop":
                await session.stop_playback()
                await websocket.send_json({
                    "type": "state_sync",
                    "payload": _state_to_payload(session),
                })

            elif msg_type == "request_sync":
                await websocket.send_json({
                    "type": "state_sync",
                    "payload": _state_to_payload(session),
                })

            else:
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {msg_type}",
                    "code": "UNKNOWN_MESSAGE",
                })

    except WebSocketDisconnect:
        logger.info(f"Playback client for board {board_id} disconnected")
        await session.stop_playback()
