"""MySQL adapter: async SQLAlchemy engine over the aiomysql driver."""

import logging
from collections.abc import AsyncIterator
from types import TracebackType

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.adapters.driven.config.mycnf import ConnectionTarget
from src.adapters.driven.database.retry import retry
from src.core.errors import QueryError
from src.ports.database import DatabasePort, Row, sanitize_query

__all__ = ["MySQLDatabase"]

logger = logging.getLogger(__name__)

# Configurable connection settings
PING_RETRIES = 3
CONNECT_TIMEOUT = 10
POOL_SIZE = 3


class MySQLDatabase(DatabasePort):
    """Query-executing handle backed by a small connection pool.

    Features:
    - Streams rows with a server-side cursor, so scrapers see rows as the
      driver delivers them.
    - Wraps driver errors in QueryError.
    - Context manager for proper resource cleanup.
    - Startup ping with retry.

    Each stream() checks out its own pooled connection, so several scrapers
    may query concurrently.
    """

    def __init__(self, target: ConnectionTarget, *, pool_size: int = POOL_SIZE) -> None:
        """Initialize database handle.

        Args:
            target: Resolved connection target.
            pool_size: Maximum number of pooled connections.
        """
        self.target = target
        self.pool_size = pool_size
        self.engine: AsyncEngine | None = None

    async def __aenter__(self) -> "MySQLDatabase":
        """Enter async context manager (create engine).

        Returns:
            Self for use in async with statement.
        """
        self.engine = create_async_engine(
            self.target.sqlalchemy_url(),
            pool_size=self.pool_size,
            pool_pre_ping=True,
            connect_args={"connect_timeout": CONNECT_TIMEOUT},
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (dispose engine).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.engine:
            await self.engine.dispose()

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Engine not initialized; use 'async with' context manager")
        return self.engine

    async def stream(self, query: str) -> AsyncIterator[Row]:
        """Execute a statement and yield its rows as tuples.

        The connection goes back to the pool when the rows are exhausted or
        the generator is closed; callers stopping early should close it.

        Raises:
            RuntimeError: If engine not initialized.
            QueryError: If connecting or executing fails.
        """
        engine = self._require_engine()
        try:
            async with engine.connect() as conn:
                result = await conn.stream(text(query))
                try:
                    async for row in result:
                        yield tuple(row)
                finally:
                    await result.close()
        except sa_exc.SQLAlchemyError as e:
            raise QueryError(sanitize_query(query), e) from e

    @retry(times=PING_RETRIES)
    async def _ping_once(self) -> None:
        """Single connectivity check (with retry).

        Raises:
            RuntimeError: If engine not initialized.
            sqlalchemy errors: Connection errors (retried by decorator).
        """
        engine = self._require_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def ping(self) -> bool:
        """Check if the server accepts connections.

        Attempts up to PING_RETRIES times with exponential backoff.

        Returns:
            True if reachable, False otherwise.
        """
        logger.info(f"Pinging MySQL at {self.target.location}...")
        try:
            await self._ping_once()
        except Exception as e:
            logger.warning(f"Ping failed for {self.target.location}: {e}")
            return False
        logger.info(f"MySQL at {self.target.location} is reachable")
        return True
