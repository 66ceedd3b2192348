"""Shared test fixtures.

Database tests run against an in-memory SQLite database (aiosqlite) that
is created from the ORM metadata for every test. The connection is put in
autocommit mode and emits its own BEGIN so SAVEPOINTs behave as they do on
PostgreSQL.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mindos.ai.textgen import BaseTextGenerator
from mindos.clients import get_notification_sink, get_text_generator
from mindos.config import get_settings
from mindos.database import get_session
from mindos.db.base import Base
from mindos.db.models import Profile
from mindos.errors import ExternalServiceUnavailable
from mindos.main import create_app
from mindos.notifications.sink import BaseNotificationSink
from mindos.users.service import get_or_create_profile


class RecordingSink(BaseNotificationSink):
    """Keeps delivered messages in memory; can be told to fail."""

    def __init__(self, fail: bool = False) -> None:
        self.messages: list[str] = []
        self.fail = fail

    async def notify(self, message: str) -> None:
        if self.fail:
            raise ExternalServiceUnavailable("sink down")
        self.messages.append(message)


class StaticTextGenerator(BaseTextGenerator):
    """Returns a fixed reply, or raises when ``reply`` is None."""

    def __init__(self, reply: str | None = None) -> None:
        self.reply = reply
        self.prompts: list[str] = []

    async def generate(self, prompt: str, system: str | None = None) -> str:
        self.prompts.append(prompt)
        if self.reply is None:
            raise ExternalServiceUnavailable("generator down")
        return self.reply


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with every table created."""
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(eng.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A database session for direct service calls."""
    async with session_factory() as session:
        yield session


async def make_profile(db: AsyncSession, user_id: str = "user-a", **fields) -> Profile:
    """Create a committed identity row and profile, with optional field overrides."""
    profile, _ = await get_or_create_profile(db, user_id, email=f"{user_id}@example.com")
    for name, value in fields.items():
        setattr(profile, name, value)
    await db.commit()
    return profile


async def count_rows(db: AsyncSession, model, *filters) -> int:
    return (await db.execute(select(func.count()).select_from(model).where(*filters))).scalar_one()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def text_generator() -> StaticTextGenerator:
    return StaticTextGenerator()


def make_token(user_id: str, email: str | None = None, expires_in: int = 3600, **claims) -> str:
    """Mint an access token the way the identity provider does."""
    settings = get_settings()
    payload = {
        "sub": user_id,
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        "role": "authenticated",
        **claims,
    }
    if email is not None:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers(user_id: str = "user-a", email: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, email or f'{user_id}@example.com')}"}


@pytest_asyncio.fixture
async def client(session_factory, sink, text_generator) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the datastore and collaborators swapped out."""
    app = create_app()

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_notification_sink] = lambda: sink
    app.dependency_overrides[get_text_generator] = lambda: text_generator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
