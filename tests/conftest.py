"""Shared pytest fixtures for the strategy knowledge base test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- kb: KnowledgeBase bound to db_session
"""

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from strategy_kb.db.session import Base, create_engine
import strategy_kb.db.tables  # noqa: F401  register ORM models on Base.metadata
from strategy_kb.knowledge_base import KnowledgeBase


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only (SQLAlchemy asyncio / aiosqlite)."""
    return "asyncio"


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    A session.commit() inside code under test releases the SAVEPOINT, which
    is then restarted so later operations stay in the same outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
def kb(db_session: AsyncSession) -> KnowledgeBase:
    return KnowledgeBase(db_session)


@pytest.fixture
def offline_session() -> AsyncSession:
    """Unbound session for connectors whose pure methods never touch the DB."""
    return AsyncSession()
