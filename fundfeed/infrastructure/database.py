"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to StoreUnavailableError (core/errors.py)
    - No module-level client: the manager is constructed once in the app
      lifespan, stored on app.state, and disposed on shutdown

Design Decisions:
    - expire_on_commit=False: prevents lazy-load issues in async context
    - map_store_errors() is shared by the session wrapper and the repositories,
      so a failure surfaces as StoreUnavailableError wherever it happens
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from fundfeed.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def map_store_errors(
    operation: str, session: AsyncSession | None = None,
) -> AsyncGenerator[None, None]:
    """Translate SQLAlchemy failures into StoreUnavailableError, rolling back if given a session."""
    try:
        yield
    except IntegrityError as e:
        if session is not None:
            await session.rollback()
        logger.error(f"DB integrity error during {operation}: {e}")
        raise StoreUnavailableError("Integrity constraint violated", operation)
    except OperationalError as e:
        if session is not None:
            await session.rollback()
        logger.error(f"DB operational error during {operation}: {e}")
        raise StoreUnavailableError("Connection or operational error", operation)
    except DBAPIError as e:
        if session is not None:
            await session.rollback()
        logger.error(f"DB driver error during {operation}: {e}")
        raise StoreUnavailableError("Database driver error", operation)
    except SQLAlchemyError as e:
        if session is not None:
            await session.rollback()
        logger.error(f"SQLAlchemy error during {operation}: {e}")
        raise StoreUnavailableError("Database operation failed", operation)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            async with map_store_errors("session", session):
                yield session
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_db_manager(request: Request) -> DatabaseSessionManager:
    """FastAPI dependency — the manager constructed by the app lifespan."""
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None:
        raise RuntimeError("Database not initialized")
    return manager


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with get_db_manager(request).session() as session:
        yield session
