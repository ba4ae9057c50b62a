"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidtube.core.config import Settings
from vidtube.infrastructure.auth import JWTService, hash_password
from vidtube.infrastructure.persistence import models  # noqa: F401
from vidtube.infrastructure.persistence.database import Base
from vidtube.infrastructure.persistence.models import (
    SubscriptionModel,
    UserModel,
    WatchHistoryModel,
)

API_USERS = "/api/v1/users"
DEFAULT_PASSWORD = "secret123"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated test run.

    Cookies are secure in the testing environment, so the httpx cookie jar
    does not replay them over http://test. Tests pass tokens explicitly.
    """
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        external_url="http://test",
        access_token_secret="test-access-token-secret-0123456789abcdef",
        refresh_token_secret="test-refresh-token-secret-0123456789abcdef",
        storage_path=str(tmp_path / "media"),
        upload_tmp_dir=str(tmp_path / "tmp"),
    )


@pytest.fixture
def jwt_service(settings: Settings) -> JWTService:
    return JWTService(settings)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def app(settings: Settings, db_session: AsyncSession) -> FastAPI:
    """Application wired to the test settings and database session."""
    from vidtube.infrastructure.api.app import create_app
    from vidtube.infrastructure.persistence.database import get_db_session

    application = create_app(settings)

    async def override_get_db_session():
        yield db_session

    application.dependency_overrides[get_db_session] = override_get_db_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def user_factory(db_session: AsyncSession):
    """Create users directly in the database."""
    counter = {"n": 0}

    async def _create(
        username: str | None = None,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        fullname: str = "Test User",
    ) -> UserModel:
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = UserModel(
            id=f"00000000-0000-4000-8000-{counter['n']:012d}",
            username=username.lower(),
            email=(email or f"{username}@example.com").lower(),
            fullname=fullname,
            avatar="http://test/media/avatar.png",
            cover_image="",
            password_hash=hash_password(password),
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


def image_upload(name: str = "avatar.png", content: bytes = PNG_BYTES, mime: str = "image/png"):
    """A multipart file tuple for httpx."""
    return (name, content, mime)


async def register(client: AsyncClient, with_avatar: bool = True, cover: bool = False, **fields):
    """POST /register with sensible defaults for every field."""
    data = {
        "fullname": "Ann Lee",
        "username": "ann",
        "email": "ann@x.com",
        "password": DEFAULT_PASSWORD,
    }
    data.update(fields)
    files = {}
    if with_avatar:
        files["avatar"] = image_upload()
    if cover:
        files["coverImage"] = image_upload("cover.png")
    return await client.post(f"{API_USERS}/register", data=data, files=files or None)


async def login(client: AsyncClient, password: str = DEFAULT_PASSWORD, **identity):
    """POST /login and return the response."""
    return await client.post(f"{API_USERS}/login", json={**identity, "password": password})


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def subscribe(session: AsyncSession, subscriber_id: str, channel_id: str) -> SubscriptionModel:
    subscription = SubscriptionModel(subscriber_id=subscriber_id, channel_id=channel_id)
    session.add(subscription)
    await session.flush()
    return subscription


async def record_view(session: AsyncSession, user_id: str, video_id: str) -> WatchHistoryModel:
    entry = WatchHistoryModel(user_id=user_id, video_id=video_id)
    session.add(entry)
    await session.flush()
    return entry
