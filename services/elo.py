"""
ELO-рейтинг.

expected = 1 / (1 + 10 ** ((Ro - Rp) / 400)), delta = round(K * (S - expected)).
Обе дельты считаются от рейтингов до дуэли, порядок сторон не влияет.
"""
import math
from dataclasses import dataclass

from core.config import settings

WIN = 1.0
DRAW = 0.5
LOSS = 0.0


@dataclass(frozen=True)
class RatingChange:
    player_delta: int
    opponent_delta: int
    player_rating: int
    opponent_rating: int


def expected_score(player_rating: float, opponent_rating: float) -> float:
    """Ожидаемый результат игрока (вероятность победы) против соперника."""
    return 1.0 / (1.0 + 10 ** ((opponent_rating - player_rating) / 400.0))


def _round_half_up(value: float) -> int:
    # round() в Python банковский: round(0.5) == 0, а нам нужно 1
    return math.floor(value + 0.5)


def rating_delta(
    player_rating: float,
    opponent_rating: float,
    outcome: float,
    k_factor: int | None = None,
) -> int:
    if outcome not in (WIN, DRAW, LOSS):
        raise ValueError(f"Outcome must be 0, 0.5 or 1, got {outcome}")
    k = settings.ELO_K_FACTOR if k_factor is None else k_factor
    return _round_half_up(k * (outcome - expected_score(player_rating, opponent_rating)))


def calculate_rating_change(
    player_rating: int,
    opponent_rating: int,
    player_outcome: float,
    k_factor: int | None = None,
) -> RatingChange:
    """Считает обе дельты от исходных рейтингов и возвращает новые рейтинги."""
    opponent_outcome = 1.0 - player_outcome
    player_delta = rating_delta(player_rating, opponent_rating, player_outcome, k_factor)
    opponent_delta = rating_delta(opponent_rating, player_rating, opponent_outcome, k_factor)
    return RatingChange(
        player_delta=player_delta,
        opponent_delta=opponent_delta,
        player_rating=player_rating + player_delta,
        opponent_rating=opponent_rating + opponent_delta,
    )
