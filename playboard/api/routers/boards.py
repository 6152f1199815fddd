"""REST API router for board editing."""

import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query, status

from playboard.api.schemas import (
    AddPlayersRequest,
    BoardResponse,
    CreateBoardRequest,
    DefenseRequest,
    FrameResponse,
    RouteRequest,
    SelectRequest,
)
from playboard.api.sessions import BoardSession, get_session_manager
from playboard.errors import (
    BoardBusy,
    NoOffense,
    NoRouteInProgress,
    NothingToAnimate,
    PlayboardError,
    UnknownEntity,
)
from playboard.persistence import dump_play, load_play

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/boards", tags=["boards"])


def _raise_http(exc: PlayboardError) -> NoReturn:
    """Map a board error to an HTTP error."""
    if isinstance(exc, UnknownEntity):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (BoardBusy, NoRouteInProgress)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (NoOffense, NothingToAnimate)):
        code = status.HTTP_422_UNPROCESSABLE_CONTENT
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(exc)) from exc


def _get_session(board_id: str) -> BoardSession:
    session = get_session_manager().get_session(board_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found",
        )
    return session


def _board_response(session: BoardSession, created: Optional[list[str]] = None) -> BoardResponse:
    board = session.board
    return BoardResponse(
        board_id=session.board_id,
        name=session.name,
        play=dump_play(board, name=session.name),
        is_animating=board.is_animating,
        can_undo=board.history.can_undo,
        can_redo=board.history.can_redo,
        selection=board.selection.to_dict(),
        created=created or [],
    )


# =============================================================================
# Boards
# =============================================================================

@router.post("", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(request: Optional[CreateBoardRequest] = None) -> BoardResponse:
    """Create an empty board."""
    request = request or CreateBoardRequest()
    session = get_session_manager().create_session(
        name=request.name,
        field_width=request.field_width,
        field_height=request.field_height,
    )
    return _board_response(session)


@router.get("", response_model=list[str])
async def list_boards() -> list[str]:
    """List active board ids."""
    return get_session_manager().list_sessions()


@router.get("/{board_id}", response_model=BoardResponse)
async def get_board(board_id: str) -> BoardResponse:
    return _board_response(_get_session(board_id))


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(board_id: str) -> None:
    """Delete a board, stopping any playback."""
    if not await get_session_manager().delete_session(board_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Board not found",
        )


@router.post("/{board_id}/import", response_model=BoardResponse)
async def import_play(board_id: str, play: dict) -> BoardResponse:
    """Replace the board with a persisted play document."""
    session = _get_session(board_id)
    try:
        document = load_play(play)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=f"Invalid play document: {e}",
        ) from e
    await session.stop_playback()
    document.apply_to(session.board)
    if document.name:
        session.name = document.name
    return _board_response(session)


@router.get("/{board_id}/export")
async def export_play(board_id: str) -> dict:
    session = _get_session(board_id)
    return dump_play(session.board, name=session.name, play_id=session.board_id)


@router.post("/{board_id}/clear", response_model=BoardResponse)
async def clear_board(board_id: str) -> BoardResponse:
    session = _get_session(board_id)
    await session.stop_playback()
    session.board.clear()
    return _board_response(session)


# =============================================================================
# Editing
# =============================================================================

@router.post("/{board_id}/players", response_model=BoardResponse)
async def add_players(board_id: str, request: AddPlayersRequest) -> BoardResponse:
    """Add offense players at their default spots."""
    session = _get_session(board_id)
    try:
        if request.all_colors:
            players = session.board.add_all_players()
        else:
            players = [session.board.add_player(request.color)]
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session, [p.id for p in players])


@router.post("/{board_id}/defense", response_model=BoardResponse)
async def add_defense(board_id: str, request: DefenseRequest) -> BoardResponse:
    """Place the defense template, or add a group of defenders."""
    session = _get_session(board_id)
    board = session.board
    try:
        board.set_coverage(request.coverage)
        if request.mode == "group":
            defenders = board.add_defense_group(request.color or "purple")
        else:
            defenders = board.create_defense()
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session, [d.id for d in defenders])


@router.post("/{board_id}/routes", response_model=BoardResponse)
async def add_route(board_id: str, request: RouteRequest) -> BoardResponse:
    """Capture a route from stroke samples, or place a template."""
    session = _get_session(board_id)
    board = session.board
    try:
        if request.template is not None:
            player, route = board.add_route_from_template(request.template)
            return _board_response(session, [player.id, route.id])

        if not request.samples:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                detail="A route needs samples or a template",
            )
        first, rest = request.samples[0], request.samples[1:]
        board.begin_route(
            first.x, first.y,
            line_break_type=request.line_break_type,
            style=request.style,
            timestamp=first.t,
            color=request.color,
        )
        for sample in rest:
            board.extend_route(sample.x, sample.y, timestamp=sample.t)
        route = board.finish_route()
    except PlayboardError as e:
        board.cancel_route()
        _raise_http(e)

    if route is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="Stroke has fewer than two points",
        )
    return _board_response(session, [route.id])


@router.post("/{board_id}/routes/{route_id}/toggle-arrow", response_model=BoardResponse)
async def toggle_arrow(board_id: str, route_id: str) -> BoardResponse:
    session = _get_session(board_id)
    try:
        session.board.toggle_route_arrow(route_id)
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session)


@router.post("/{board_id}/select", response_model=BoardResponse)
async def select(board_id: str, request: SelectRequest) -> BoardResponse:
    """Rubber-band select. A rectangle under the threshold clears the selection."""
    session = _get_session(board_id)
    session.board.select_rect(request.x1, request.y1, request.x2, request.y2)
    return _board_response(session)


@router.post("/{board_id}/delete-selected", response_model=BoardResponse)
async def delete_selected(board_id: str) -> BoardResponse:
    session = _get_session(board_id)
    try:
        session.board.delete_selected()
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session)


@router.post("/{board_id}/undo", response_model=BoardResponse)
async def undo(board_id: str) -> BoardResponse:
    session = _get_session(board_id)
    try:
        session.board.undo()
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session)


@router.post("/{board_id}/redo", response_model=BoardResponse)
async def redo(board_id: str) -> BoardResponse:
    session = _get_session(board_id)
    try:
        session.board.redo()
    except PlayboardError as e:
        _raise_http(e)
    return _board_response(session)


# =============================================================================
# Playback
# =============================================================================

@router.get("/{board_id}/frame", response_model=FrameResponse)
async def get_frame(
    board_id: str,
    t: float = Query(default=0.0, ge=0, description="Seconds into playback"),
) -> FrameResponse:
    """Player positions `t` seconds into playback."""
    session = _get_session(board_id)
    try:
        frame = session.board.preview_frame(t)
    except PlayboardError as e:
        _raise_http(e)
    return FrameResponse(**frame.to_dict())
