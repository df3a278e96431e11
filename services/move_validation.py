"""
Разбор и проверка ходов.

Ход приходит от клиента как JSON и превращается в ScalarMove или CanvasMove
по полю kind. Любая ошибка формы, границ, NaN/Infinity или радиуса
превращается в InvalidMove. Допусков на границе нет: 800.0000000001 уже
за пределами поля.
"""
import math
from typing import Any

from pydantic import TypeAdapter, ValidationError

from core.config import settings
from core.errors import InvalidMove
from schemas.duel import CanvasMove, DuelMode, Move, ScalarMove
from utils.geometry import is_point_in_bounds

_move_adapter = TypeAdapter(Move)


def parse_move(payload: Any) -> ScalarMove | CanvasMove:
    if isinstance(payload, (ScalarMove, CanvasMove)):
        return payload
    try:
        return _move_adapter.validate_python(payload)
    except ValidationError as exc:
        raise InvalidMove(f"Invalid move data: {exc.error_count()} error(s)") from exc


def validate_scalar_move(move: ScalarMove) -> None:
    if not settings.SCALAR_MOVE_MIN <= move.value <= settings.SCALAR_MOVE_MAX:
        raise InvalidMove(
            f"Move must be between {settings.SCALAR_MOVE_MIN} and {settings.SCALAR_MOVE_MAX}"
        )


def validate_canvas_move(move: CanvasMove) -> None:
    width, height = settings.CANVAS_WIDTH, settings.CANVAS_HEIGHT

    if not is_point_in_bounds(move.king_position, width, height):
        raise InvalidMove("King position is outside the canvas")

    if not is_point_in_bounds(move.guessed_area.center, width, height):
        raise InvalidMove("Guessed area center is outside the canvas")

    radius = move.guessed_area.radius
    if not math.isfinite(radius) or radius != settings.GUESS_AREA_RADIUS:
        raise InvalidMove("Guessed area radius is fixed")


def validate_move(payload: Any, mode: DuelMode) -> ScalarMove | CanvasMove:
    """Разбирает ход и проверяет его для режима дуэли. Возвращает готовый ход."""
    move = parse_move(payload)

    if move.kind != mode.value:
        raise InvalidMove(f"Expected a {mode.value} move")

    if isinstance(move, ScalarMove):
        validate_scalar_move(move)
    else:
        validate_canvas_move(move)
    return move
