"""
Shared test fixtures for the auth service test suite.

Each test gets its own in-memory database (aiosqlite + StaticPool) and the
app's ``get_db`` dependency is pointed at it.
"""

import os
import sys
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET"] = "test-access-secret-0123456789abcdef0123456789abcdef"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-fedcba9876543210fedcba9876543210"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"

from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ozmevsim.api.v1.deps import get_db
from ozmevsim.core.security import get_password_hash
from ozmevsim.db.base import Base
from ozmevsim.main import app
from ozmevsim.models.user import User

DEFAULT_PASSWORD = "password123"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema per test; the app's DB dependency is overridden to use it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app.

    The client keeps no cookie jar; tests send cookies explicitly.
    """
    transport = ASGITransport(app=app)
    jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    async with AsyncClient(transport=transport, base_url="http://test", cookies=jar) as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def create_user(session_factory):
    """Factory fixture: persist a user through its own short-lived session."""

    async def _create(
        email: str,
        password: str = DEFAULT_PASSWORD,
        role: str = "USER",
        is_active: bool = True,
        name: str | None = None,
    ) -> User:
        async with session_factory() as session:
            user = User(
                email=email,
                hashed_password=get_password_hash(password),
                role=role,
                is_active=is_active,
                name=name,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _create


@pytest.fixture
def login(async_client):
    async def _login(email: str, password: str = DEFAULT_PASSWORD, **kwargs) -> Response:
        return await async_client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
            **kwargs,
        )

    return _login


@pytest.fixture
def set_cookies():
    """Parse Set-Cookie headers into ``{name: (value, raw_header)}``."""

    def _parse(response: Response) -> dict[str, tuple[str, str]]:
        parsed = {}
        for header in response.headers.get_list("set-cookie"):
            name, _, rest = header.partition("=")
            parsed[name.strip()] = (rest.split(";", 1)[0], header)
        return parsed

    return _parse


def cookie_header(access: str | None = None, refresh: str | None = None) -> dict[str, str]:
    parts = []
    if access is not None:
        parts.append(f"access-token={access}")
    if refresh is not None:
        parts.append(f"refresh-token={refresh}")
    return {"Cookie": "; ".join(parts)}


@pytest.fixture
def cookies_for():
    return cookie_header
