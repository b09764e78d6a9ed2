# src/pullup/db/session.py

"""Database session management."""
import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pullup import config

logger = logging.getLogger(__name__)


def create_engine_for(url: str) -> AsyncEngine:
    """Create an async engine with configuration suited to the backend.

    SQLite doesn't support connection pooling; it gets a busy timeout
    instead so that concurrent writers queue on the database lock rather
    than failing immediately. Other databases like PostgreSQL get full pool
    configuration.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=config.DB_ECHO,
            connect_args={"timeout": config.DB_SQLITE_TIMEOUT},
        )

    return create_async_engine(
        url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=config.DB_POOL_RECYCLE,
        echo=config.DB_ECHO,
    )


def create_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build the session factory used by the API and the tests.

    autoflush=False: Changes are not flushed until a service flushes or commits.
    expire_on_commit=False: Objects remain accessible after commit.
    """
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


# The engine is the core interface to the database.
engine = create_engine_for(config.DATABASE_URL)

AsyncSessionLocal = create_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides an async database session.

    Automatically handles rollback on exceptions and ensures
    the session is properly closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error("Database session error, rolling back: %s", e)
            await session.rollback()
            raise
