"""
Database connection module for Task Organizer.

Provides an async PostgreSQL connection pool using asyncpg. The pool is owned
by whoever constructs the Database (the application startup hook), not by
this module.
"""

import logging
import pathlib
from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA_PATH = pathlib.Path(__file__).parent / "schema.sql"


class Database:
    def __init__(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 60.0,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> asyncpg.Pool:
        """
        Initialize the connection pool.

        Should be called once at application startup.
        """
        if self._pool is not None:
            logger.warning("Database pool already initialized")
            return self._pool

        logger.info(f"Initializing database pool (min={self.min_size}, max={self.max_size})")

        try:
            self._pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )
            logger.info("Database pool initialized successfully")
            return self._pool
        except Exception as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    async def close(self) -> None:
        """
        Close the connection pool.

        Should be called at application shutdown.
        """
        if self._pool is None:
            logger.warning("Database pool not initialized, nothing to close")
            return

        logger.info("Closing database pool")
        await self._pool.close()
        self._pool = None
        logger.info("Database pool closed")

    @property
    def pool(self) -> asyncpg.Pool:
        """
        Raises RuntimeError if the pool is not initialized.
        """
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def connection(self):
        """
        Acquire a connection from the pool.

        Usage:
            async with db.connection() as conn:
                rows = await conn.fetch("SELECT * FROM tasks")
        """
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self):
        """Acquire a connection and run the block in one transaction."""
        async with self.connection() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, *args) -> str:
        """Execute a query and return the status."""
        async with self.connection() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> list:
        """Execute a query and return all results."""
        async with self.connection() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args):
        """Execute a query and return the first row."""
        async with self.connection() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args):
        """Execute a query and return the first column of the first row."""
        async with self.connection() as conn:
            return await conn.fetchval(query, *args)

    async def init_schema(self) -> None:
        """
        Create tables and seed the category reference set.

        Reads and executes schema.sql; safe to run on every startup.
        """
        if not SCHEMA_PATH.exists():
            logger.error(f"Schema file not found: {SCHEMA_PATH}")
            raise FileNotFoundError(f"Schema file not found: {SCHEMA_PATH}")

        logger.info(f"Initializing database schema from {SCHEMA_PATH}")
        await self.execute(SCHEMA_PATH.read_text())
        logger.info("Database schema initialized successfully")

    async def health_check(self) -> dict:
        """
        Check database connectivity and return health status.
        """
        try:
            await self.fetchval("SELECT 1")
            return {
                "status": "healthy",
                "database": "connected",
                "pool_size": self._pool.get_size() if self._pool else 0,
                "pool_free": self._pool.get_idle_size() if self._pool else 0,
            }
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e),
            }
