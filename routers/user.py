# routers/user.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import create_access_token, get_current_user
from models.user import User
from schemas.auth import TokenResponse
from schemas.user import UserRead, UserRegister
from utils.user_helpers import to_user_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация по имени → выдаёт JWT",
)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    exists = await db.execute(select(User.id).where(User.username == data.username))
    if exists.scalar_one_or_none() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

    user = User(username=data.username)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User registered: %s", user.username)

    token, expires = create_access_token(user.id)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        expires_in_ms=int(expires.timestamp() * 1000),
        user=to_user_read(user),
    )


@router.get("/me", response_model=UserRead, summary="Текущий пользователь")
async def read_me(current_user: User = Depends(get_current_user)) -> UserRead:
    return to_user_read(current_user)


@router.get("/{user_id}", response_model=UserRead, summary="Профиль: рейтинг и счёт побед")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserRead:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return to_user_read(user)
