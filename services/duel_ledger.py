"""
Журнал завершённых дуэлей.

Запись добавляется один раз при разрешении дуэли, вместе с изменением
рейтингов и счётчиков побед/поражений, в одной транзакции.
"""
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.duel_history import DuelHistory
from models.post import Post
from models.user import User
from services.duel_registry import DuelRequest, MoveValue
from services.duel_scoring import DuelScore, Winner
from services.elo import RatingChange


async def apply_result(
    db: AsyncSession,
    request: DuelRequest,
    winner: Winner,
    change: RatingChange,
) -> None:
    """
    Меняет рейтинги и счётчики на стороне БД (rating = rating + delta),
    чтобы параллельные дуэли одного игрока не затирали друг друга.
    Ничья засчитывается обоим как победа.
    """
    challenger_won = winner in (Winner.A, Winner.TIE)
    defender_won = winner in (Winner.B, Winner.TIE)

    for user_id, delta, won in (
        (request.challenger_id, change.player_delta, challenger_won),
        (request.defender_id, change.opponent_delta, defender_won),
    ):
        values = {"rating": User.rating + delta}
        if won:
            values["wins"] = User.wins + 1
        else:
            values["losses"] = User.losses + 1
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )


async def append_entry(
    db: AsyncSession,
    request: DuelRequest,
    challenger_move: MoveValue,
    defender_move: MoveValue,
    score: DuelScore,
    change: RatingChange,
) -> DuelHistory:
    if score.winner is Winner.A:
        winner_id, winner_name = request.challenger_id, request.challenger_name
    elif score.winner is Winner.B:
        winner_id, winner_name = request.defender_id, request.defender_name
    else:
        winner_id, winner_name = None, "tie"

    post = await db.get(Post, request.content_id)
    target = request.scoring_target

    entry = DuelHistory(
        request_id=request.id,
        challenger_id=request.challenger_id,
        challenger_name=request.challenger_name,
        defender_id=request.defender_id,
        defender_name=request.defender_name,
        content_id=request.content_id,
        original_content=post.content if post else None,
        winner_id=winner_id,
        winner_name=winner_name,
        mode=request.mode.value,
        challenger_move=challenger_move.model_dump(mode="json"),
        defender_move=defender_move.model_dump(mode="json"),
        challenger_score=score.score_a,
        defender_score=score.score_b,
        challenger_captured=score.captured_a,
        defender_captured=score.captured_b,
        target_x=target.x if target else None,
        target_y=target.y if target else None,
        challenger_rating_delta=change.player_delta,
        defender_rating_delta=change.opponent_delta,
        resolved_at=datetime.now(timezone.utc),
    )
    db.add(entry)
    return entry


async def history_for_user(db: AsyncSession, user_id: int) -> list[DuelHistory]:
    """История дуэлей пользователя, новые первыми."""
    stmt = (
        select(DuelHistory)
        .where((DuelHistory.challenger_id == user_id) | (DuelHistory.defender_id == user_id))
        .order_by(DuelHistory.resolved_at.desc(), DuelHistory.id.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
