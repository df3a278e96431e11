"""
Подсчёт исхода дуэли по двум ходам.

Функции чистые и детерминированные: одинаковые ходы и цель всегда дают
одинаковый результат, поэтому дуэль можно переиграть для аудита.
Сторона A это претендент, сторона B это защитник.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.errors import InvalidMove
from schemas.duel import CanvasMove, Point, ScalarMove
from utils.geometry import distance, is_point_in_circle


class Winner(str, Enum):
    A = "a"
    B = "b"
    TIE = "tie"


@dataclass(frozen=True)
class DuelScore:
    winner: Winner
    score_a: float
    score_b: float
    captured_a: Optional[bool] = None
    captured_b: Optional[bool] = None


def _compare(score_a: float, score_b: float) -> Winner:
    if score_a > score_b:
        return Winner.A
    if score_b > score_a:
        return Winner.B
    return Winner.TIE


def score_scalar(move_a: ScalarMove, move_b: ScalarMove) -> DuelScore:
    """Старый режим: большее число побеждает, при равенстве ничья."""
    return DuelScore(
        winner=_compare(move_a.value, move_b.value),
        score_a=float(move_a.value),
        score_b=float(move_b.value),
    )


def calculate_score(king_position: Point, target: Point, captured: bool) -> float:
    """
    0, если короля накрыли; иначе 1 / (расстояние до цели + 1).
    +1 убирает деление на ноль, максимум очков равен 1.
    """
    if captured:
        return 0.0
    return 1.0 / (distance(king_position, target) + 1.0)


def is_captured(move: CanvasMove, opponent: CanvasMove) -> bool:
    """Король игрока попал в круг, которым стрелял соперник."""
    area = opponent.guessed_area
    return is_point_in_circle(move.king_position, area.center, area.radius)


def score_canvas(move_a: CanvasMove, move_b: CanvasMove, target: Point) -> DuelScore:
    captured_a = is_captured(move_a, move_b)
    captured_b = is_captured(move_b, move_a)

    score_a = calculate_score(move_a.king_position, target, captured_a)
    score_b = calculate_score(move_b.king_position, target, captured_b)

    return DuelScore(
        winner=_compare(score_a, score_b),
        score_a=score_a,
        score_b=score_b,
        captured_a=captured_a,
        captured_b=captured_b,
    )


def score_duel(move_a, move_b, target: Point | None) -> DuelScore:
    """Выбирает способ подсчёта по типу ходов. Ходы разных типов не сравниваются."""
    if isinstance(move_a, ScalarMove) and isinstance(move_b, ScalarMove):
        return score_scalar(move_a, move_b)
    if isinstance(move_a, CanvasMove) and isinstance(move_b, CanvasMove):
        if target is None:
            raise ValueError("Canvas duel requires a scoring target")
        return score_canvas(move_a, move_b, target)
    raise InvalidMove("Both moves must be of the same kind")
