# models/post.py
from sqlalchemy import Column, BigInteger, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.sql import func

from .base import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(BigInteger, primary_key=True, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Снимок имени автора на момент публикации
    username = Column(String(64), nullable=False)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Post id={self.id} user={self.user_id} deleted={self.is_deleted}>"
