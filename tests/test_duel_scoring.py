import pytest

from core.errors import InvalidMove
from schemas.duel import CanvasMove, GuessedArea, Point, ScalarMove
from services.duel_scoring import (
    Winner,
    calculate_score,
    is_captured,
    score_canvas,
    score_duel,
    score_scalar,
)

TARGET = Point(x=400, y=300)


def canvas_move(king, guess, radius=50):
    return CanvasMove(
        king_position=Point(x=king[0], y=king[1]),
        guessed_area=GuessedArea(center=Point(x=guess[0], y=guess[1]), radius=radius),
    )


def test_scalar_higher_value_wins():
    result = score_scalar(ScalarMove(value=750), ScalarMove(value=500))

    assert result.winner is Winner.A
    assert result.score_a == 750
    assert result.score_b == 500
    assert score_scalar(ScalarMove(value=1), ScalarMove(value=2)).winner is Winner.B


def test_scalar_equal_values_tie():
    assert score_scalar(ScalarMove(value=500), ScalarMove(value=500)).winner is Winner.TIE


def test_captured_king_scores_zero_anywhere():
    assert calculate_score(Point(x=400, y=300), TARGET, captured=True) == 0
    assert calculate_score(Point(x=0, y=0), TARGET, captured=True) == 0


def test_score_is_inverse_distance_plus_one():
    assert calculate_score(Point(x=403, y=304), TARGET, captured=False) == 1 / 6
    assert calculate_score(TARGET, TARGET, captured=False) == 1


def test_capture_uses_opponent_guess():
    hider = canvas_move(king=(100, 100), guess=(700, 500))
    seeker = canvas_move(king=(700, 100), guess=(120, 110))

    assert is_captured(hider, seeker)
    assert not is_captured(seeker, hider)


def test_king_inside_opponent_circle_loses():
    move_a = canvas_move(king=(410, 310), guess=(450, 350))
    move_b = canvas_move(king=(450, 350), guess=(100, 100))

    result = score_canvas(move_a, move_b, TARGET)

    assert result.winner is Winner.A
    assert result.captured_b is True
    assert result.captured_a is False
    assert result.score_b == 0
    assert result.score_a > 0


def test_closest_to_target_wins_when_nobody_captured():
    move_a = canvas_move(king=(420, 300), guess=(50, 50))
    move_b = canvas_move(king=(400, 330), guess=(750, 550))

    result = score_canvas(move_a, move_b, TARGET)

    assert result.winner is Winner.A
    assert not result.captured_a and not result.captured_b


def test_both_captured_is_a_tie():
    move_a = canvas_move(king=(100, 100), guess=(600, 400))
    move_b = canvas_move(king=(600, 400), guess=(100, 100))

    result = score_canvas(move_a, move_b, TARGET)

    assert result.captured_a and result.captured_b
    assert result.score_a == result.score_b == 0
    assert result.winner is Winner.TIE


def test_equidistant_kings_tie():
    move_a = canvas_move(king=(430, 340), guess=(0, 0))
    move_b = canvas_move(king=(370, 260), guess=(800, 600))

    result = score_canvas(move_a, move_b, TARGET)

    assert result.score_a == result.score_b
    assert result.winner is Winner.TIE


@pytest.mark.parametrize(
    "king_a, king_b",
    [((400, 300), (401, 300)), ((10, 10), (790, 590)), ((0, 0), (800, 600)), ((400, 0), (400, 600))],
)
def test_tie_iff_scores_equal(king_a, king_b):
    move_a = canvas_move(king=king_a, guess=(800, 0))
    move_b = canvas_move(king=king_b, guess=(0, 600))

    result = score_canvas(move_a, move_b, TARGET)

    assert (result.winner is Winner.TIE) == (result.score_a == result.score_b)


def test_scoring_is_deterministic():
    move_a = canvas_move(king=(123.4, 321.9), guess=(500, 500))
    move_b = canvas_move(king=(654.3, 210.1), guess=(130, 330))

    assert score_canvas(move_a, move_b, TARGET) == score_canvas(move_a, move_b, TARGET)


def test_score_duel_dispatches_by_move_kind():
    assert score_duel(ScalarMove(value=2), ScalarMove(value=1), None).winner is Winner.A

    move = canvas_move(king=(400, 300), guess=(0, 0))
    assert score_duel(move, move, TARGET).winner is Winner.TIE


def test_score_duel_rejects_mixed_kinds():
    with pytest.raises(InvalidMove):
        score_duel(ScalarMove(value=2), canvas_move(king=(1, 1), guess=(2, 2)), TARGET)
