"""SQLAlchemy async session setup for the strategy knowledge base.

Provides:
- Base: DeclarativeBase for all ORM models
- create_engine: async engine factory (JSON stored without ASCII escaping)
- create_session_factory: session maker bound to an engine
- session_scope: Unit-of-Work context manager with commit/rollback

There is no module-level engine. Callers build one from settings and pass
sessions into connectors and services explicitly.
"""

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from strategy_kb.config.settings import Environment, Settings, get_settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


def json_dumps(value: Any) -> str:
    """Serialize JSON columns the same way array-membership patterns are built."""
    return json.dumps(value, ensure_ascii=False)


def create_engine(
    database_url: str | None = None,
    *,
    settings: Settings | None = None,
    **engine_kwargs: Any,
) -> AsyncEngine:
    """Build an async engine for *database_url* (defaults to settings)."""
    if database_url is None:
        settings = settings or get_settings()
        database_url = settings.DATABASE_URL
        engine_kwargs.setdefault("echo", settings.ENVIRONMENT == Environment.DEV)
    if not database_url.startswith("sqlite"):
        engine_kwargs.setdefault("pool_pre_ping", True)
    return create_async_engine(
        database_url,
        json_serializer=json_dumps,
        **engine_kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session maker with ``expire_on_commit=False`` so rows stay readable."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield an async database session with Unit-of-Work semantics.

    Repositories only call add()/flush()/refresh().
    Commit happens once at the end of a successful block.
    Rollback happens on any exception.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
