"""
Chirp Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── token_codec:     TokenCodec with a test secret
    ├── db_engine:       in-memory SQLite (aiosqlite) with all tables created
    ├── session_factory: sessions bound to db_engine
    ├── make_context:    GraphQLContext around a fake request
    ├── execute:         runs a GraphQL document like one HTTP request would
    └── test_client:     HTTPX AsyncClient over ASGITransport
"""

import os

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["APP_SECRET"] = "test-secret-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.config import settings
from app.database import Base, get_db_session
from app.graphql.context import GraphQLContext
from app.graphql.schema import create_schema
from app.services.token_service import TokenCodec


def make_request(token: Optional[str] = None, authorization: Optional[str] = None):
    """Stand-in for the Starlette request: only headers are read."""
    headers: Dict[str, str] = {}
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    elif authorization is not None:
        headers["Authorization"] = authorization
    return SimpleNamespace(headers=headers)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
        result = await user_service.get_user(mock_db_session, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()

    # `async with db.begin_nested()` must re-raise what the block raises
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    session.begin_nested = MagicMock(return_value=savepoint)
    return session


@pytest.fixture
def token_codec():
    return TokenCodec(secret=settings.app_secret)


@pytest_asyncio.fixture
async def db_engine():
    """A fresh in-memory database per test, schema created from the models."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite only honours SAVEPOINT inside a real transaction; take BEGIN
    # away from the driver so services' begin_nested() nests properly
    @event.listens_for(engine.sync_engine, "connect")
    def disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="module")
def schema():
    return create_schema(settings)


@pytest.fixture
def execute(schema, session_factory, token_codec):
    """
    Execute a GraphQL document in its own session, committing afterwards,
    the same way get_db_session scopes one HTTP request.

    Usage:
        result = await execute("{ me { id } }", token=token)
    """

    async def _execute(
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
        authorization: Optional[str] = None,
    ):
        async with session_factory() as session:
            context = GraphQLContext(db=session, tokens=token_codec)
            context.request = make_request(token=token, authorization=authorization)
            result = await schema.execute(
                query, variable_values=variables, context_value=context
            )
            await session.commit()
            return result

    return _execute


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to a fresh app whose sessions come from the
    in-memory test database.
    """
    from app.main import create_app

    app = create_app(settings)

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_context(token_codec):
    """
    Build a GraphQLContext around a fake request.

    Usage:
        context = make_context(token=token_codec.issue(7))
        context = make_context(authorization="Basic abc")
    """

    def _make(db=None, with_request: bool = True, **request_kwargs):
        context = GraphQLContext(db=db if db is not None else MagicMock(), tokens=token_codec)
        if with_request:
            context.request = make_request(**request_kwargs)
        return context

    return _make
