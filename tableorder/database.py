"""
Database Connection Module
Handles the relational store using the SQLAlchemy async engine.

The engine is built lazily from ``DATABASE_URL`` so that tests can point the
application at SQLite before the first connection is made.
"""

import logging
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tableorder.core.config import get_settings

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


@lru_cache()
def get_engine() -> AsyncEngine:
    """Create the process-wide async engine."""
    settings = get_settings()
    options = {"echo": settings.database_echo}

    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=5,  # Connection pool size
            max_overflow=10,  # Extra connections when pool is full
            pool_pre_ping=True,
        )

    return create_async_engine(settings.database_url, **options)


@lru_cache()
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False  # Objects remain accessible after commit
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with get_session_maker()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Make sure every model is registered on the metadata
    import tableorder.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()
