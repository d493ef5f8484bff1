"""Async session factory, database initialization, and unit of work."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from resume_match_core.exceptions import PersistenceError
from resume_match_infra.db.models import Base

logger = structlog.get_logger()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the given engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables (for SQLite mode). Use migrations for Postgres."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session inside one transaction.

    Commits when the block exits cleanly. On any exception the transaction
    is rolled back before the session is closed; database errors are
    re-raised as PersistenceError, everything else unchanged.
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("transaction_rolled_back", error_type=type(e).__name__, error=str(e))
            raise PersistenceError(f"Transaction failed: {e}") from e
        except BaseException:
            await session.rollback()
            raise


@asynccontextmanager
async def read_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session for reads only; nothing is committed."""
    async with session_factory() as session:
        yield session
