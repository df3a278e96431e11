# models/user.py
from sqlalchemy import Column, BigInteger, DateTime, Integer, String
from sqlalchemy.sql import func

from core.config import settings
from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False)

    rating = Column(Integer, nullable=False, default=settings.DEFAULT_RATING)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User id={self.id} username={self.username} rating={self.rating}>"
