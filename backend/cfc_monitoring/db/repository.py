import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cfc_monitoring.errors import PersistenceError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Repository base holding a session factory.

    Each operation opens its own session so long-lived components (the
    prober, the lifecycle manager) can share one repository instance.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session, converting storage faults into PersistenceError."""
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Persistence failure during %s: %s", operation, e)
                raise PersistenceError(f"Storage error during {operation}", operation=operation) from e
