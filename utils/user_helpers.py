"""Утилиты для преобразования моделей пользователей и постов в схемы Pydantic."""
from collections.abc import Iterable
from typing import List

from models.post import Post
from models.user import User
from schemas.post import PostRead
from schemas.user import UserRead


def to_user_read(user: User) -> UserRead:
    return UserRead.model_validate(user)


def to_post_read(post: Post) -> PostRead:
    return PostRead.model_validate(post)


def to_post_reads(posts: Iterable[Post]) -> List[PostRead]:
    return [to_post_read(post) for post in posts]
