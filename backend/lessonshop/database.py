"""
LessonShop Backend - Store Handle & Session Management
========================================================

What:  The DocumentStore handle: async SQLAlchemy engine, session factory
       and lifecycle helpers (ping, schema creation, dispose).
How:   create_app() constructs exactly one DocumentStore and passes it to
       the services. Nothing looks the store up from module globals.
When:  Engine is created with the handle; sessions are opened per operation.

Connection Pooling:
    PostgreSQL (asyncpg) uses the default QueuePool with pre-ping.
    SQLite (aiosqlite) is a local file; pooling arguments do not apply.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models (shared metadata for Alembic)."""
    pass


class DocumentStore:
    """
    Collection-scoped access to the lesson and order tables.

    Attributes:
        url:      The connection URL the engine was created with
        engine:   AsyncEngine owning the connection pool
        sessions: async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        engine_kwargs = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(pool_pre_ping=True, pool_recycle=3600)
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False keeps attributes readable after commit
        self.sessions = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session that commits on success and rolls back on error.

        Usage:
            async with store.session() as db:
                db.add(order)
        """
        async with self.sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        """Run SELECT 1; raises the driver error when the store is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_schema(self) -> None:
        """Create missing tables (idempotent)."""
        # Models register themselves on Base.metadata when imported
        from lessonshop.models import lesson, order  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema ensured on %s", self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
