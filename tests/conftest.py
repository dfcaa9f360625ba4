"""
Pytest configuration and fixtures for SocialAuth tests.
"""

import os

# Settings dibaca saat import, jadi environment harus di-set lebih dulu
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict, List, Any

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from socialauth.main import app
from socialauth.db.base import Base
from socialauth.core.config import settings
from socialauth.models.role import Role
from socialauth.core.security import HashingParameters, PasswordHasher
from socialauth.core.tokens import TokenGenerator
from socialauth.repositories.store import SQLAlchemyCredentialStore
from socialauth.api.dependencies.database import get_db, get_store
from socialauth.api.dependencies.auth import get_auth_service, get_token_service
from socialauth.schemas.auth import RegisterRequest
from socialauth.services.auth import AuthService
from socialauth.services.notification import NotificationDispatcher
from socialauth.services.token import TokenService
import socialauth.models  # noqa: F401


class FakeNotifier:
    """Notifier yang hanya mencatat panggilan."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    async def send_verification(self, email: str, name: str, token: str) -> None:
        self.sent.append({"type": "verification", "email": email, "name": name, "token": token})

    async def send_password_reset(self, email: str, name: str, token: str) -> None:
        self.sent.append({"type": "password_reset", "email": email, "name": name, "token": token})

    async def send_welcome(self, email: str, name: str) -> None:
        self.sent.append({"type": "welcome", "email": email, "name": name})

    def of_type(self, notification_type: str) -> List[Dict[str, Any]]:
        return [item for item in self.sent if item["type"] == notification_type]


class FakeClock:
    """Clock yang bisa dimajukan secara manual."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine, satu per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        # Role default di-seed seperti init_db
        await conn.execute(insert(Role).values(name=settings.DEFAULT_ROLE_NAME))

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    TestSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session: AsyncSession) -> SQLAlchemyCredentialStore:
    return SQLAlchemyCredentialStore(db_session)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Argon2id dengan parameter ringan supaya test cepat."""
    return PasswordHasher(HashingParameters(time_cost=1, memory_cost=1024))


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(clock=clock)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


@pytest_asyncio.fixture
async def dispatcher() -> AsyncGenerator[NotificationDispatcher, None]:
    dispatcher = NotificationDispatcher(timeout=5)
    yield dispatcher
    await dispatcher.drain()


@pytest.fixture
def auth_service(
    store,
    notifier,
    hasher,
    token_service,
    dispatcher,
    executor,
    clock
) -> AuthService:
    return AuthService(
        store=store,
        notifier=notifier,
        hasher=hasher,
        token_service=token_service,
        generator=TokenGenerator(),
        dispatcher=dispatcher,
        executor=executor,
        clock=clock
    )


@pytest.fixture
def alice_registration() -> RegisterRequest:
    return RegisterRequest(
        email="alice@example.com",
        password="alice123",
        confirm_password="alice123",
        username="alice",
        full_name="Alice Liddell"
    )


@pytest.fixture
def register_data() -> Dict[str, Any]:
    return {
        "email": "bob@example.com",
        "password": "bobsecret",
        "confirm_password": "bobsecret",
        "username": "bob",
        "full_name": "Bob Builder"
    }


@pytest.fixture
def override_dependencies(db_session, notifier, hasher, dispatcher, executor):
    """Override FastAPI dependencies untuk testing."""
    http_token_service = TokenService()

    async def override_get_db():
        yield db_session

    def override_get_auth_service(store=Depends(get_store)) -> AuthService:
        return AuthService(
            store=store,
            notifier=notifier,
            hasher=hasher,
            token_service=http_token_service,
            dispatcher=dispatcher,
            executor=executor
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_service] = override_get_auth_service
    app.dependency_overrides[get_token_service] = lambda: http_token_service

    yield

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(override_dependencies) -> AsyncGenerator[AsyncClient, None]:
    """Async test client di atas ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
