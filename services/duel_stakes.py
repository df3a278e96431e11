"""
Ставки после дуэли.

- destroy_content: претендент победил, значит может удалить пост, из-за которого был вызов.
- post_on_behalf: претендент проиграл, значит победитель (защитник) может
  один раз опубликовать пост от имени проигравшего. Пост ничем не отличается
  от настоящего поста проигравшего.

Каждое право одноразовое: флаг ставится условным UPDATE ... WHERE flag = false,
поэтому из двух одновременных запросов проходит только один.
"""
import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AlreadyDestroyed, AlreadyUsed, Forbidden, NotFound
from models.duel_history import DuelHistory
from models.post import Post
from schemas.duel import AvailableActions

logger = logging.getLogger(__name__)


async def get_entry(db: AsyncSession, entry_id: int) -> DuelHistory:
    entry = await db.get(DuelHistory, entry_id)
    if entry is None:
        raise NotFound("Duel history not found")
    return entry


def challenger_won(entry: DuelHistory) -> bool:
    return entry.winner_id == entry.challenger_id


def can_destroy(entry: DuelHistory, user_id: int) -> bool:
    return user_id == entry.challenger_id and challenger_won(entry)


def can_post_on_behalf(entry: DuelHistory, user_id: int) -> bool:
    return (
        not entry.is_tie
        and user_id == entry.winner_id
        and entry.winner_id != entry.challenger_id
    )


def available_actions(entry: DuelHistory, user_id: int) -> AvailableActions:
    return AvailableActions(
        can_destroy=can_destroy(entry, user_id) and not entry.post_destroyed,
        can_post_on_behalf=can_post_on_behalf(entry, user_id) and not entry.hijack_used,
        can_forward=challenger_won(entry),
    )


async def destroy_content(db: AsyncSession, entry_id: int, user_id: int) -> DuelHistory:
    entry = await get_entry(db, entry_id)
    if not can_destroy(entry, user_id):
        raise Forbidden("Only the winning challenger can destroy the post")
    if entry.post_destroyed:
        raise AlreadyDestroyed()

    result = await db.execute(
        update(DuelHistory)
        .where(DuelHistory.id == entry_id, DuelHistory.post_destroyed.is_(False))
        .values(post_destroyed=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise AlreadyDestroyed()

    await db.execute(
        update(Post)
        .where(Post.id == entry.content_id)
        .values(is_deleted=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    await db.refresh(entry)

    logger.info("Post %s destroyed by user %s (duel %s)", entry.content_id, user_id, entry_id)
    return entry


async def post_on_behalf(
    db: AsyncSession, entry_id: int, user_id: int, content: str
) -> tuple[DuelHistory, Post]:
    entry = await get_entry(db, entry_id)
    if not can_post_on_behalf(entry, user_id):
        raise Forbidden("Only the winner can post on behalf when challenger loses")
    if entry.hijack_used:
        raise AlreadyUsed()

    result = await db.execute(
        update(DuelHistory)
        .where(DuelHistory.id == entry_id, DuelHistory.hijack_used.is_(False))
        .values(hijack_used=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise AlreadyUsed()

    # Автор поста проигравший, а не тот, кто его пишет
    post = Post(user_id=entry.loser_id, username=entry.loser_name, content=content)
    db.add(post)
    await db.commit()
    await db.refresh(post)
    await db.refresh(entry)

    logger.info("Post %s created on behalf of user %s (duel %s)", post.id, entry.loser_id, entry_id)
    return entry, post

