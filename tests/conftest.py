import random

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from models.base import Base
from models.post import Post
from models.user import User
from services.duel_engine import DuelEngine
from services.notifier import Notifier, user_room


class EventRecorder:
    """Подменяет socket.io: запоминает все отправленные события."""

    def __init__(self):
        self.events = []

    async def __call__(self, event, payload, room):
        self.events.append((room, event, payload))

    def for_user(self, user_id, event=None):
        room = user_room(user_id)
        return [
            (name, payload)
            for target, name, payload in self.events
            if target == room and (event is None or name == event)
        ]

    def broadcasts(self, event=None):
        return [
            (name, payload)
            for target, name, payload in self.events
            if target is None and (event is None or name == event)
        ]


class MidpointRandom(random.Random):
    """uniform() всегда отдаёт середину отрезка: цель на (400, 300)."""

    def uniform(self, a, b):
        return (a + b) / 2


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
async def notifier(recorder):
    notifier = Notifier(recorder)
    yield notifier
    await notifier.flush()


@pytest.fixture
def duel_engine(session_factory, notifier):
    return DuelEngine(session_factory, notifier, rng=MidpointRandom())


@pytest.fixture
def make_user(session_factory):
    async def _make(username: str, rating: int = 1000) -> User:
        async with session_factory() as db:
            user = User(username=username, rating=rating)
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user

    return _make


@pytest.fixture
def make_post(session_factory):
    async def _make(author: User, content: str = "hot take") -> Post:
        async with session_factory() as db:
            post = Post(user_id=author.id, username=author.username, content=content)
            db.add(post)
            await db.commit()
            await db.refresh(post)
            return post

    return _make


@pytest.fixture
def fetch(session_factory):
    """Читает строку свежей сессией, чтобы не получить устаревший объект."""

    async def _fetch(model, pk):
        async with session_factory() as db:
            return await db.get(model, pk)

    return _fetch


@pytest.fixture
async def players(make_user, make_post):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await make_post(bob, "pineapple belongs on pizza")
    return alice, bob, post


@pytest.fixture
def accepted_duel(duel_engine, players):
    """Фабрика принятой дуэли alice (претендент) против bob (защитник)."""
    alice, bob, post = players

    async def _make(mode: str = "scalar"):
        request = await duel_engine.create_challenge(alice.id, bob.id, post.id, mode)
        await duel_engine.respond(request.id, bob.id, "accepted")
        return request

    return _make


