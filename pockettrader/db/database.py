"""
Database engine and session management.

One async engine per process; each request gets its own session that
commits when the handler returns and rolls back on any database error.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from pockettrader.config import settings
from pockettrader.models.db import Base
from pockettrader.models.errors import BackendUnavailable

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits whatever is still pending when the request finishes. That
    final commit can run after the response has started, so handlers that
    write call commit_session() before building their response. Driver
    errors raised while the handler runs surface as BackendUnavailable.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database error, rolled back: %s", e)
            raise BackendUnavailable(detail=str(e)) from e


async def commit_session(session: AsyncSession) -> None:
    """
    Commit the request's writes.

    Raises:
        BackendUnavailable: If the store does not confirm the commit; the
            transaction is rolled back
    """
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error("Commit failed, rolled back: %s", e)
        raise BackendUnavailable(detail=str(e)) from e


async def init_db() -> None:
    """
    Create all tables defined in the ORM models.

    Called once at application startup; existing tables are left alone.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    """Close pooled connections at shutdown."""
    await engine.dispose()
