"""
DatabaseManager — Async connection management for the dashboard store.

Key design decisions:
- NullPool: each request opens/closes its own connection, so the engine
  never holds idle connections between widget fetches.
- Lazy engine: created on first use, not at import time (tests and the
  in-memory store never touch it).
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from dashboard_engine.core.config import settings


# ── Declarative base for every dashboard table ───────────────────
Base = declarative_base()


_ENGINE_KWARGS = {
    "poolclass": NullPool,
    "connect_args": {"charset": "utf8mb4"},
}


class DatabaseManager:
    """
    Centralised database connection manager.

    Responsibilities:
    - Async engine for the dashboard database.
    - Context-managed sessions with auto-commit/rollback.
    """

    def __init__(self, url: Optional[str] = None) -> None:
        self._url = url
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self._url or settings.db_url,
                echo=settings.DEBUG,
                **_ENGINE_KWARGS,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Async session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create missing tables (used by ``run.py --init-db``)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Dispose of the engine on shutdown."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


# ── Global singleton ─────────────────────────────────────────────
db_manager = DatabaseManager()
