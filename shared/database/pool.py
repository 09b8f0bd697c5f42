"""Database connection pool management."""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from config.settings import Settings
from shared.observability.logger import get_logger
from .errors import (
    ConnectivityError,
    NotInitializedError,
    PoolClosedError,
    PoolExhaustedError,
    StoreError,
)

logger = get_logger("pawpal.database.pool")

# Raised by asyncpg/OS when a connection cannot be opened or used
CONNECTION_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)


class DatabasePool:
    """Bounded asyncpg pool with an explicit lifecycle.

    One instance is created by the application at startup and handed to every
    repository. Capacity is max_size checked-out connections plus queue_limit
    waiting acquirers; anything beyond that is rejected at once with
    PoolExhaustedError instead of waiting.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.max_size = settings.pawpal_db_pool_max
        self.min_size = min(settings.pawpal_db_pool_min, self.max_size)
        self.queue_limit = settings.pawpal_db_queue_limit
        self.acquire_timeout = settings.pawpal_db_acquire_timeout
        self.statement_timeout = settings.pawpal_db_statement_timeout

        self._pool: Optional[asyncpg.Pool] = None
        self._closed = False
        # Connections checked out plus acquisitions in flight
        self._outstanding = 0

    async def initialize(self) -> "DatabasePool":
        """Create the pool and run a liveness probe.

        Raises:
            StoreError: If the pool is already initialized
            ConnectivityError: If the pool cannot be created or the probe fails.
                The manager stays uninitialized.
        """
        if self._pool is not None:
            raise StoreError(
                "Database pool already initialized; call shutdown() first",
                operation="initialize"
            )

        settings = self.settings
        pool = None
        try:
            pool = await asyncpg.create_pool(
                host=settings.pawpal_db_host,
                port=settings.pawpal_db_port,
                user=settings.pawpal_db_user,
                password=settings.pawpal_db_password,
                database=settings.pawpal_db_name,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.acquire_timeout,
                command_timeout=self.statement_timeout,
                server_settings={"client_encoding": settings.pawpal_db_charset},
            )
            async with pool.acquire(timeout=self.acquire_timeout) as conn:
                await conn.fetchval("SELECT 1")
        except CONNECTION_ERRORS as e:
            if pool is not None:
                pool.terminate()
            logger.critical("Database connection failed", data={
                "host": settings.pawpal_db_host,
                "port": settings.pawpal_db_port,
                "database": settings.pawpal_db_name,
                "error": str(e),
            })
            raise ConnectivityError(
                f"Could not connect to database: {e}",
                operation="initialize"
            ) from e

        self._pool = pool
        self._closed = False
        self._outstanding = 0
        logger.info("Database pool created", data={
            "host": settings.pawpal_db_host,
            "port": settings.pawpal_db_port,
            "database": settings.pawpal_db_name,
            "max_size": self.max_size,
            "queue_limit": self.queue_limit,
        })
        return self

    @property
    def is_initialized(self) -> bool:
        return self._pool is not None and not self._closed

    @property
    def pool(self) -> asyncpg.Pool:
        """The live asyncpg pool.

        Raises:
            NotInitializedError: Before initialize() succeeded
            PoolClosedError: After shutdown()
        """
        if self._closed:
            raise PoolClosedError("Database pool is closed", operation="get_pool")
        if self._pool is None:
            raise NotInitializedError(
                "Database pool not initialized. Call initialize() first.",
                operation="get_pool"
            )
        return self._pool

    async def acquire(self) -> asyncpg.Connection:
        """Check out a connection.

        Raises:
            PoolExhaustedError: Pool and wait queue are full, or the wait timed out
            StoreError: A new connection could not be opened
        """
        pool = self.pool
        if self._outstanding >= self.max_size + self.queue_limit:
            logger.warning("Connection pool exhausted", data={
                "max_size": self.max_size,
                "queue_limit": self.queue_limit,
            })
            raise PoolExhaustedError(
                "No database connection available",
                operation="acquire",
                details={"max_size": self.max_size, "queue_limit": self.queue_limit}
            )

        self._outstanding += 1
        acquired = False
        try:
            conn = await pool.acquire(timeout=self.acquire_timeout)
            acquired = True
            return conn
        except asyncio.TimeoutError as e:
            raise PoolExhaustedError(
                f"Timed out after {self.acquire_timeout}s waiting for a database connection",
                operation="acquire"
            ) from e
        except CONNECTION_ERRORS as e:
            raise StoreError(f"Could not open database connection: {e}", operation="acquire") from e
        finally:
            # Cancelled waiters give their slot back too
            if not acquired:
                self._outstanding -= 1

    async def release(self, conn: asyncpg.Connection) -> None:
        """Return a connection to the pool.

        Works while shutdown() is draining so close() can finish.
        """
        try:
            if self._pool is not None:
                await self._pool.release(conn)
        finally:
            self._outstanding = max(self._outstanding - 1, 0)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Scoped acquire/release."""
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)

    def stats(self) -> dict:
        """Pool occupancy for health checks."""
        pool = self.pool
        return {
            "size": pool.get_size(),
            "idle": pool.get_idle_size(),
            "max_size": self.max_size,
            "outstanding": self._outstanding,
        }

    async def shutdown(self) -> None:
        """Drain and close all connections. Safe to call more than once."""
        if self._pool is None:
            return
        self._closed = True
        try:
            await self._pool.close()
        finally:
            self._pool = None
            self._outstanding = 0
        logger.info("Database pool closed")


async def create_pool(settings: Settings) -> DatabasePool:
    """Create and probe the database pool.

    Args:
        settings: Application settings with database configuration

    Returns:
        Initialized DatabasePool
    """
    return await DatabasePool(settings).initialize()


async def close_pool(pool: DatabasePool):
    """Close database connection pool.

    Args:
        pool: Pool to close
    """
    await pool.shutdown()
