"""
Database Session Management

Builds the async SQLAlchemy engine and session factory. Construction is
explicit: the composition root calls these once at startup and disposes of
the engine on shutdown.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine.

    Connection pool sizing only applies to server databases; SQLite (used
    by the test suite) keeps SQLAlchemy's default pool.
    """
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    return create_async_engine(
        database_url,
        echo=echo,  # Set True for SQL debugging
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
