import os
from contextlib import contextmanager
from datetime import timedelta
from typing import AsyncGenerator, Optional

# Settings, the engine and the limiter are built at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "local"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.session import get_async_db
from services.marketplace_service import models as _marketplace_models  # noqa: F401
from services.marketplace_service.app.main import app

settings = get_settings()

API = "/api/v1"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def make_user(user_id: str = "buyer-1", role: str = "user", **extra) -> AuthUser:
    return AuthUser(user_id=user_id, email=f"{user_id}@test.com", role=role, **extra)


def make_seller(user_id: str = "seller-1") -> AuthUser:
    return make_user(user_id=user_id, role="seller")


def make_admin(user_id: str = "admin-1") -> AuthUser:
    return make_user(user_id=user_id, role="admin")


@contextmanager
def override_auth(target_app, user: AuthUser):
    """Temporarily authenticate every request as ``user``."""
    previous = target_app.dependency_overrides.get(get_current_user)
    target_app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            target_app.dependency_overrides.pop(get_current_user, None)
        else:
            target_app.dependency_overrides[get_current_user] = previous


def make_token(user_id: str, role: str = "user", expires_in: Optional[timedelta] = None) -> str:
    """Sign a bearer token the way the identity service does."""
    expires_in = expires_in if expires_in is not None else timedelta(hours=1)
    claims = {
        "sub": user_id,
        "email": f"{user_id}@test.com",
        "role": role,
        "exp": utc_now() + expires_in,
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.

    StaticPool keeps one connection so every session sees the same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient against the marketplace app, sharing ``db_session``.

    Requests are authenticated as a plain buyer unless a test wraps them in
    ``override_auth``.
    """

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _get_db
    app.dependency_overrides[get_current_user] = lambda: make_user()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Send uploaded files to a throwaway directory."""
    monkeypatch.setattr(settings, "FILE_UPLOAD_PATH", str(tmp_path))
    return tmp_path
