from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictInt, field_validator


class DuelMode(str, Enum):
    SCALAR = "scalar"
    CANVAS = "canvas"


class DuelStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ResolutionState(str, Enum):
    AWAITING_MOVES = "awaiting_moves"
    COMPLETED = "completed"


def _require_number(value: Any) -> Any:
    # bool считается int, а строки pydantic молча приводит к float
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("must be a number")
    return value


class Point(BaseModel):
    x: float
    y: float

    @field_validator("x", "y", mode="before")
    @classmethod
    def check_number(cls, value: Any) -> Any:
        return _require_number(value)

    class Config:
        frozen = True


class GuessedArea(BaseModel):
    center: Point
    radius: float

    @field_validator("radius", mode="before")
    @classmethod
    def check_number(cls, value: Any) -> Any:
        return _require_number(value)

    class Config:
        frozen = True


class ScalarMove(BaseModel):
    """Старый режим: число в [0, 1000], побеждает большее."""
    kind: Literal["scalar"] = "scalar"
    value: StrictInt

    class Config:
        frozen = True


class CanvasMove(BaseModel):
    """Ход на поле: где стоит свой король и где, по мнению игрока, стоит чужой."""
    kind: Literal["canvas"] = "canvas"
    king_position: Point
    guessed_area: GuessedArea

    class Config:
        frozen = True


Move = Annotated[Union[ScalarMove, CanvasMove], Field(discriminator="kind")]


class DuelRequestCreate(BaseModel):
    content_id: int = Field(..., description="Пост, из-за которого вызов")
    defender_id: int = Field(..., description="Кого вызываем")
    mode: Optional[DuelMode] = Field(None, description="Режим дуэли, по умолчанию из настроек")


class DuelRespond(BaseModel):
    decision: Literal["accepted", "declined"]


class MoveSubmit(BaseModel):
    # Форму хода проверяет движок, чтобы любая ошибка была InvalidMove
    move: Any


class DuelRequestRead(BaseModel):
    id: int
    challenger_id: int
    challenger_name: str
    challenger_rating: int
    defender_id: int
    defender_name: str
    defender_rating: int
    content_id: int
    mode: DuelMode
    status: DuelStatus
    resolution_state: ResolutionState
    scoring_target: Optional[Point] = None
    challenger_moved: bool = Field(False, description="Ход претендента получен (сам ход скрыт)")
    defender_moved: bool = Field(False, description="Ход защитника получен (сам ход скрыт)")
    created_at: datetime


class DuelOutcomeRead(BaseModel):
    winner_side: Literal["challenger", "defender", "tie"]
    challenger_score: float
    defender_score: float
    challenger_captured: Optional[bool] = None
    defender_captured: Optional[bool] = None
    scoring_target: Optional[Point] = None


class DuelHistoryRead(BaseModel):
    id: int
    request_id: int
    challenger_id: int
    challenger_name: str
    defender_id: int
    defender_name: str
    content_id: int
    original_content: Optional[str] = None
    winner_id: Union[int, Literal["tie"]]
    winner_name: str
    mode: DuelMode
    challenger_move: dict
    defender_move: dict
    outcome: DuelOutcomeRead
    challenger_rating_delta: int
    defender_rating_delta: int
    post_destroyed: bool
    hijack_used: bool
    resolved_at: datetime


class MoveResult(BaseModel):
    completed: bool
    request: Optional[DuelRequestRead] = None
    history: Optional[DuelHistoryRead] = None


class AvailableActions(BaseModel):
    can_destroy: bool
    can_post_on_behalf: bool
    can_forward: bool = Field(False, description="Претендент победил, дуэлью можно поделиться")


class PostOnBehalfCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000, description="Текст поста от имени проигравшего")
