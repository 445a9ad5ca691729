"""
CatAPI Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before anything from `catapi` is
       imported, so the settings singleton, the engine and the storage
       root all point at throwaway locations.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:          SQLite (aiosqlite) engine on a temp file, schema created
    ├── db_session:         AsyncSession bound to db_engine
    ├── make_user:          inserts a user row and commits it
    ├── alice / bob / admin: Principals of freshly inserted users
    ├── make_cat:           inserts a cat row owned by a given principal
    ├── temp_storage:       temporary directory for file operations
    ├── sample_image_bytes: fake image content for upload tests
    └── test_client:        HTTPX AsyncClient with get_db_session overridden
"""

import os
import tempfile
from datetime import date
from typing import AsyncGenerator, Dict

# Must run before any catapi import: settings are read at import time
_TEST_DIR = tempfile.mkdtemp(prefix="catapi_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/app.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "uploads")
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret-that-is-long-enough-for-hs256"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from catapi.database import Base, get_db_session  # noqa: E402
from catapi.models.cat import Cat  # noqa: E402
from catapi.models.user import ROLE_ADMIN, ROLE_USER, User  # noqa: E402
from catapi.security.passwords import hash_password  # noqa: E402
from catapi.security.principal import Principal  # noqa: E402
from catapi.security.tokens import create_access_token  # noqa: E402


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database per test with the full schema."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """
    Factory inserting a committed user.

    Usage:
        principal = await make_user("alice", "a@x.com")
    """
    async def _make(
        user_name: str,
        email: str,
        password: str = "secret",
        role: str = ROLE_USER,
    ) -> Principal:
        user = User(
            user_name=user_name,
            email=email,
            password=hash_password(password),
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        return Principal.from_user(user)

    return _make


@pytest_asyncio.fixture
async def alice(make_user) -> Principal:
    return await make_user("alice", "a@x.com")


@pytest_asyncio.fixture
async def bob(make_user) -> Principal:
    return await make_user("bob", "b@x.com")


@pytest_asyncio.fixture
async def admin(make_user) -> Principal:
    return await make_user("root", "admin@x.com", role=ROLE_ADMIN)


@pytest.fixture
def make_cat(db_session):
    """Factory inserting a committed cat owned by `owner`."""
    async def _make(
        owner: Principal,
        cat_name: str = "Miso",
        lat: float = 60.17,
        lng: float = 24.94,
    ) -> Cat:
        cat = Cat(
            cat_name=cat_name,
            weight=4.2,
            birthdate=date(2020, 5, 1),
            filename="miso.jpg",
            latitude=lat,
            longitude=lng,
            owner_id=owner.id,
        )
        db_session.add(cat)
        await db_session.commit()
        return cat

    return _make


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers():
    """Builds an Authorization header carrying a valid token for a principal."""
    def _headers(principal: Principal) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(principal)}"}

    return _headers


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is overridden so requests use the per-test database.
    """
    from catapi.main import app

    async def _override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
