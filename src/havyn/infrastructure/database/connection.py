"""
User-Account Database

Engine and session lifecycle for the users table. PostgreSQL (asyncpg)
in deployment, SQLite (aiosqlite) for local runs and tests.

SECURITY: The database URL carries credentials; log the dialect only.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from havyn.config import get_settings
from havyn.config.settings import Settings
from havyn.config.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the ORM models."""


def engine_options(url: str, settings: Settings) -> dict[str, Any]:
    """
    Engine keyword arguments for a database URL.

    SQLite gets one shared connection so that in-memory databases
    survive across sessions; pool sizing does not apply to it.
    """
    options: dict[str, Any] = {"echo": settings.debug}

    if make_url(url).get_backend_name() == "sqlite":
        options.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        options.update(
            pool_size=settings.database.pool_size,
            max_overflow=settings.database.max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
    return options


class DatabaseManager:
    """
    Owns the engine and hands out short-lived sessions.

    The crisis pipeline opens one session per store call, so a
    connection is never held while an alert waits on the location
    sensor or on a delivery retry.

    Usage:
        db = DatabaseManager()
        await db.initialize()
        async with db.session() as session:
            ...
        await db.close()
    """

    def __init__(self, url: Optional[str] = None) -> None:
        """
        Args:
            url: Async database URL; defaults to settings
        """
        self._url = url
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    async def initialize(self) -> None:
        """Create the engine. Call once at startup; repeat calls are ignored."""
        if self._engine is not None:
            logger.warning("Database already initialized")
            return

        settings = get_settings()
        url = self._url or settings.database.async_url

        self._engine = create_async_engine(url, **engine_options(url, settings))
        self._sessions = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        logger.info(
            "Database engine created",
            dialect=make_url(url).get_backend_name(),
        )

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._engine

    async def create_schema(self) -> None:
        """Create the users table if it does not exist yet."""
        engine = self._require_engine()

        # Registers UserModel on Base.metadata
        from havyn.infrastructure.database.models import UserModel  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        One unit of work: committed on exit, rolled back on error.

        Raises:
            RuntimeError: initialize() has not been called
        """
        self._require_engine()

        async with self._sessions() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def health_check(self) -> bool:
        """True when the database answers a trivial query."""
        if self._engine is None:
            return False

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed", error_type=type(e).__name__)
            return False
        return True

    async def close(self) -> None:
        """Dispose of the engine. Safe to call when never initialized."""
        if self._engine is None:
            return

        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Database engine disposed")


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Process-wide DatabaseManager, created on first use."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
