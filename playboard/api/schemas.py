"""Pydantic schemas for the board API."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

LineBreakLiteral = Literal["rigid", "smooth", "none", "smooth-none"]


class PointSchema(BaseModel):
    """A canvas position in pixels."""

    x: float = 0.0
    y: float = 0.0


class CreateBoardRequest(BaseModel):
    """Request to create a new board."""

    name: str = ""
    field_width: Optional[float] = Field(default=None, gt=0)
    field_height: Optional[float] = Field(default=None, gt=0)


class BoardResponse(BaseModel):
    """A board's persisted contents plus its editing state."""

    board_id: str
    name: str
    play: dict
    is_animating: bool
    can_undo: bool
    can_redo: bool
    selection: dict
    created: list[str] = Field(default_factory=list)


class AddPlayersRequest(BaseModel):
    """Add one offense player, or one of every color."""

    color: str = "blue"
    all_colors: bool = False


class DefenseRequest(BaseModel):
    """Place defenders and pick their coverage."""

    mode: Literal["template", "group"] = "template"
    color: Optional[str] = None
    coverage: Optional[str] = None


class SampleSchema(BaseModel):
    """One pointer sample of a stroke."""

    x: float
    y: float
    t: float = Field(ge=0, description="Seconds since the stroke began")


class RouteRequest(BaseModel):
    """A captured stroke, or the name of a route template."""

    samples: list[SampleSchema] = Field(default_factory=list)
    line_break_type: LineBreakLiteral = "rigid"
    style: Literal["solid", "dashed"] = "solid"
    color: str = "black"
    template: Optional[str] = None


class SelectRequest(BaseModel):
    """Selection rectangle corners."""

    x1: float
    y1: float
    x2: float
    y2: float


class FrameResponse(BaseModel):
    """Positions of every player at one instant of playback."""

    elapsed: float
    progress: float
    complete: bool
    positions: dict[str, PointSchema]
