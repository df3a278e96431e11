"""Преобразование записей истории дуэлей в схемы ответа."""
from collections.abc import Iterable
from typing import List

from models.duel_history import DuelHistory
from schemas.duel import DuelHistoryRead, DuelOutcomeRead, Point


def winner_side(entry: DuelHistory) -> str:
    if entry.is_tie:
        return "tie"
    return "challenger" if entry.winner_id == entry.challenger_id else "defender"


def to_outcome_read(entry: DuelHistory) -> DuelOutcomeRead:
    target = None
    if entry.target_x is not None and entry.target_y is not None:
        target = Point(x=entry.target_x, y=entry.target_y)
    return DuelOutcomeRead(
        winner_side=winner_side(entry),
        challenger_score=entry.challenger_score,
        defender_score=entry.defender_score,
        challenger_captured=entry.challenger_captured,
        defender_captured=entry.defender_captured,
        scoring_target=target,
    )


def to_history_read(entry: DuelHistory) -> DuelHistoryRead:
    return DuelHistoryRead(
        id=entry.id,
        request_id=entry.request_id,
        challenger_id=entry.challenger_id,
        challenger_name=entry.challenger_name,
        defender_id=entry.defender_id,
        defender_name=entry.defender_name,
        content_id=entry.content_id,
        original_content=entry.original_content,
        winner_id="tie" if entry.winner_id is None else entry.winner_id,
        winner_name=entry.winner_name,
        mode=entry.mode,
        challenger_move=entry.challenger_move,
        defender_move=entry.defender_move,
        outcome=to_outcome_read(entry),
        challenger_rating_delta=entry.challenger_rating_delta,
        defender_rating_delta=entry.defender_rating_delta,
        post_destroyed=entry.post_destroyed,
        hijack_used=entry.hijack_used,
        resolved_at=entry.resolved_at,
    )


def to_history_reads(entries: Iterable[DuelHistory]) -> List[DuelHistoryRead]:
    return [to_history_read(entry) for entry in entries]
