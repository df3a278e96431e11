# routers/post.py
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.post import Post
from models.user import User
from schemas.post import PostCreate, PostRead
from services.duel_engine import DuelEngine, get_duel_engine
from services.notifier import CONTENT_CREATED
from utils.user_helpers import to_post_read, to_post_reads

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post(
    "",
    response_model=PostRead,
    status_code=status.HTTP_201_CREATED,
    summary="Опубликовать пост",
)
async def create_post(
    data: PostCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    engine: DuelEngine = Depends(get_duel_engine),
) -> PostRead:
    post = Post(user_id=current_user.id, username=current_user.username, content=data.content)
    db.add(post)
    await db.commit()
    await db.refresh(post)

    post_read = to_post_read(post)
    engine.notifier.broadcast(CONTENT_CREATED, post_read.model_dump(mode="json"))
    return post_read


@router.get("", response_model=List[PostRead], summary="Лента постов, новые первыми")
async def list_posts(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[PostRead]:
    stmt = (
        select(Post)
        .where(Post.is_deleted.is_(False))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return to_post_reads(result.scalars().all())
