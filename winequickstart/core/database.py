"""Async SQLAlchemy database setup."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import InterfaceError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from winequickstart.config import Settings

logger = logging.getLogger(__name__)


def _has_pending_state(session: AsyncSession) -> bool:
    return bool(session.new or session.dirty or session.deleted)


class Database:
    """Engine and session factory bound to one `Settings` instance."""

    def __init__(self, settings: Settings, *, engine: AsyncEngine | None = None) -> None:
        self.settings = settings
        self.engine = engine or create_async_engine(
            settings.database_url,
            **self._engine_options(settings),
        )
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @staticmethod
    def _engine_options(settings: Settings) -> dict[str, Any]:
        options: dict[str, Any] = {"echo": settings.database_echo}
        if settings.uses_sqlite:
            return options
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            pool_recycle=300,  # Supabase pooler drops idle connections
        )
        return options

    @asynccontextmanager
    async def session(self, *, commit_on_exit: bool = True) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; commit on clean exit, roll back and re-raise on error."""
        async with self.session_maker() as session:
            try:
                yield session
                if commit_on_exit:
                    await session.commit()
                elif _has_pending_state(session):
                    raise RuntimeError(
                        "Session has pending ORM changes but commit_on_exit=False. "
                        "Commit explicitly or use commit_on_exit=True."
                    )
            except InterfaceError as e:
                if not session.in_transaction() and not _has_pending_state(session):
                    logger.debug("Session connection already closed during cleanup, ignoring")
                    return
                logger.warning(f"Database interface error with active transaction: {repr(e)}, rolling back")
                await self._safe_rollback(session)
                raise
            except Exception as e:
                logger.warning(f"Database session error: {repr(e)}, rolling back")
                await self._safe_rollback(session)
                raise

    @staticmethod
    async def _safe_rollback(session: AsyncSession) -> None:
        try:
            await session.rollback()
        except Exception:
            logger.warning("Rollback also failed (connection likely closed)")

    async def init_db(self) -> None:
        """Create tables if needed."""
        logger.info("Initializing database tables")
        from winequickstart.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        """Close database connections."""
        logger.info("Closing database connections")
        await self.engine.dispose()
