# models/duel_history.py
from sqlalchemy import (
    Column,
    BigInteger,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.sql import func

from .base import Base


class DuelHistory(Base):
    """
    Запись о завершённой дуэли. После создания меняются только флаги
    post_destroyed и hijack_used, и каждый ровно один раз false -> true.
    winner_id = NULL означает ничью.
    """
    __tablename__ = "duel_history"

    id = Column(BigInteger, primary_key=True, index=True)
    request_id = Column(BigInteger, nullable=False)

    challenger_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    challenger_name = Column(String(64), nullable=False)
    defender_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    defender_name = Column(String(64), nullable=False)

    content_id = Column(BigInteger, nullable=False)
    original_content = Column(Text, nullable=True)

    winner_id = Column(BigInteger, nullable=True)
    winner_name = Column(String(64), nullable=False)

    mode = Column(String(16), nullable=False)
    challenger_move = Column(JSON, nullable=False)
    defender_move = Column(JSON, nullable=False)
    challenger_score = Column(Float, nullable=False)
    defender_score = Column(Float, nullable=False)
    challenger_captured = Column(Boolean, nullable=True)
    defender_captured = Column(Boolean, nullable=True)
    target_x = Column(Float, nullable=True)
    target_y = Column(Float, nullable=True)

    challenger_rating_delta = Column(Integer, nullable=False, default=0)
    defender_rating_delta = Column(Integer, nullable=False, default=0)

    post_destroyed = Column(Boolean, default=False, nullable=False)
    hijack_used = Column(Boolean, default=False, nullable=False)

    resolved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def is_tie(self) -> bool:
        return self.winner_id is None

    @property
    def loser_id(self) -> int | None:
        if self.winner_id is None:
            return None
        return self.defender_id if self.winner_id == self.challenger_id else self.challenger_id

    @property
    def loser_name(self) -> str | None:
        if self.winner_id is None:
            return None
        return self.defender_name if self.winner_id == self.challenger_id else self.challenger_name

    def __repr__(self) -> str:
        return (
            f"<DuelHistory {self.challenger_id} vs {self.defender_id} "
            f"winner={self.winner_id or 'tie'}>"
        )
