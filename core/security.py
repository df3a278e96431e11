# core/security.py
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from core.config import settings
from core.database import get_db
from models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/users/register")

ALGORITHM = "HS256"


def create_access_token(user_id: int) -> tuple[str, datetime]:
    """Выпускает JWT для пользователя и возвращает его вместе со временем истечения."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = jwt.encode(
        {"user_id": user_id, "exp": expires},
        settings.JWT_SECRET,
        algorithm=ALGORITHM,
    )
    return token, expires


def decode_access_token(token: str) -> int:
    """
    Достаёт user_id из JWT.
    Бросает HTTPException(401), если подпись неверна, токен истёк
    или в нём нет user_id. Используется и HTTP-зависимостью, и socket.io.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("user_id")
    if not isinstance(user_id, int):
        raise credentials_exception
    return user_id


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    user_id = decode_access_token(token)
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user
