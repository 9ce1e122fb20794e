"""
Database Service - Core Infrastructure Layer

Purpose
-------
Async engine and session management for the SQLAlchemy repositories.

Responsibilities
----------------
- Wrap one AsyncEngine (created from DATABASE_URL or supplied by the caller)
- Provide async context managers for plain sessions and atomic transactions
- Enforce transaction discipline: commit on success, rollback on exception
- Create the schema for tests and local development
- Lightweight health check

Non-Responsibilities
--------------------
- Migrations
- Domain logic or locking of player state (handled by services)

Architecture Notes
------------------
**Transaction Model**:
- `get_transaction()` is the interface for all state mutations
- Automatic commit on success, rollback on any exception
- Never call `session.commit()` inside repository code

**In-memory SQLite**:
An ``sqlite+aiosqlite:///:memory:`` URL gets a StaticPool so every session
shares the one connection that holds the database.

Usage Example
-------------
>>> db = DatabaseService.from_url("sqlite+aiosqlite:///:memory:")
>>> await db.create_all()
>>> async with db.get_transaction() as session:
...     session.add(StakingAccountRow(player_id="p1"))
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from voidcore.core.config.config import Config
from voidcore.core.database.base import Base
from voidcore.core.logging.logger import get_logger

logger = get_logger(__name__)


class DatabaseInitializationError(RuntimeError):
    """Raised when database engine initialization fails."""


class DatabaseService:
    """
    Async engine and session management.

    Public API
    ----------
    - from_url() / from_config() -> Build the service and its engine
    - get_session() -> Session without automatic commit
    - get_transaction() -> Atomic write transaction (preferred)
    - create_all() / drop_all() -> Schema management for tests and dev
    - health_check() -> Fast database reachability check
    - shutdown() -> Dispose engine
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    # ========================================================================
    # Construction & Shutdown
    # ========================================================================

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> "DatabaseService":
        """
        Create the engine for ``url``.

        In-memory SQLite shares one connection (StaticPool) so every session
        sees the same database. Server databases get a pre-pinged pool of
        ``pool_size`` plus ``max_overflow`` connections.

        Raises
        ------
        DatabaseInitializationError
            If the URL is empty or the engine cannot be created.
        """
        if not url or not isinstance(url, str):
            raise DatabaseInitializationError("DATABASE_URL must be a non-empty string")

        engine_kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite") and ":memory:" in url:
            engine_kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        elif not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_pre_ping=True,
                pool_size=pool_size,
                max_overflow=max_overflow,
            )

        try:
            engine = create_async_engine(url, **engine_kwargs)
        except Exception as exc:
            logger.error(
                "DatabaseService initialization failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise DatabaseInitializationError(f"Database initialization failed: {exc}") from exc

        logger.info(
            "DatabaseService initialized",
            extra={"url_scheme": url.split(":", 1)[0]},
        )
        return cls(engine)

    @classmethod
    def from_config(cls) -> "DatabaseService":
        return cls.from_url(
            Config.DATABASE_URL,
            echo=Config.DATABASE_ECHO,
            pool_size=Config.DATABASE_POOL_SIZE,
            max_overflow=Config.DATABASE_MAX_OVERFLOW,
        )

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def shutdown(self) -> None:
        await self._engine.dispose()
        logger.info("DatabaseService shutdown complete")

    # ========================================================================
    # Schema
    # ========================================================================

    async def create_all(self) -> None:
        # Row models register themselves on Base.metadata when imported.
        import voidcore.database.models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    # ========================================================================
    # Health Check
    # ========================================================================

    async def health_check(self) -> bool:
        """``SELECT 1``; returns False instead of raising on failure."""
        start = time.perf_counter()
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning(
                "Database health check failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            return False

        logger.debug(
            "Database health check passed",
            extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
        )
        return True

    # ========================================================================
    # Sessions
    # ========================================================================

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that is closed on exit, with no automatic commit."""
        async with self._session_factory() as session:
            yield session

    @asynccontextmanager
    async def get_transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in an atomic transaction.

        Commits on success; rolls back and re-raises on any exception.
        """
        start = time.perf_counter()
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as exc:
                await session.rollback()
                logger.error(
                    "Error in transaction; rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise

            logger.debug(
                "Database transaction committed",
                extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
            )
