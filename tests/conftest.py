from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING, Any

# Tests default to in-memory SQLite; point DATABASE_URL at PostgreSQL to run
# the suite (including the row-lock race tests) against the real backend.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, pool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ums.config import get_settings
from ums.db import get_session
from ums.main import app
from ums.models import SQLModel
from ums.models.enums import Role
from ums.services.user import InMemoryUserDirectory, UserInfo, set_user_directory

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-00000000a001")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-00000000b001")
OTHER_MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-00000000b002")
USER_ID = uuid.UUID("00000000-0000-0000-0000-00000000c001")
OTHER_USER_ID = uuid.UUID("00000000-0000-0000-0000-00000000c002")


def headers_for(user_id: uuid.UUID, role: Role) -> dict[str, str]:
    """Gateway headers for an authenticated principal."""
    return {"X-User-Id": str(user_id), "X-Role": role.value}


ADMIN_HEADERS = headers_for(ADMIN_ID, Role.ADMIN)
MANAGER_HEADERS = headers_for(MANAGER_ID, Role.MANAGER)
OTHER_MANAGER_HEADERS = headers_for(OTHER_MANAGER_ID, Role.MANAGER)
USER_HEADERS = headers_for(USER_ID, Role.USER)


def is_sqlite() -> bool:
    return get_settings().database_url.startswith("sqlite")


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINTs work on pysqlite-style drivers."""

    @event.listens_for(engine.sync_engine, "connect")
    def _do_connect(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create a session-scoped async engine and ensure tables exist.

    In CI, Alembic migrations run before tests so create_all is a no-op.
    For local runs without prior migrations it serves as a fallback.
    """
    settings = get_settings()
    if is_sqlite():
        _engine = create_async_engine(settings.database_url, poolclass=pool.StaticPool)
        _enable_sqlite_savepoints(_engine)
    else:
        _engine = create_async_engine(settings.database_url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_connection(engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    """A connection inside an outer transaction that rolls back after each test."""
    async with engine.connect() as conn:
        txn = await conn.begin()
        yield conn
        await txn.rollback()


@pytest.fixture
def session_factory(db_connection: AsyncConnection) -> async_sessionmaker[AsyncSession]:
    """Session factory whose commits release savepoints inside the test transaction."""
    return async_sessionmaker(
        bind=db_connection,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield a database session wrapped in a transaction that rolls back after each test."""
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def user_directory() -> InMemoryUserDirectory:
    directory = InMemoryUserDirectory()
    for user_id, username, role in (
        (ADMIN_ID, "admin", Role.ADMIN),
        (MANAGER_ID, "maj.singh", Role.MANAGER),
        (OTHER_MANAGER_ID, "capt.rao", Role.MANAGER),
        (USER_ID, "sep.ravi", Role.USER),
        (OTHER_USER_ID, "sep.arjun", Role.USER),
    ):
        directory.seed(UserInfo(id=user_id, username=username, email=f"{username}@ums.test", role=role))
    return directory


@pytest.fixture(autouse=True)
def _seed_user_directory(user_directory: InMemoryUserDirectory) -> Iterator[None]:
    """Seed the in-memory user directory for every test."""
    set_user_directory(user_directory)
    yield
    set_user_directory(InMemoryUserDirectory())
