"""
PostgreSQL client wrapper with async support
"""

from typing import Optional, Dict, Any, AsyncIterator
from contextlib import asynccontextmanager
import asyncpg
from asyncpg import Pool, Connection

from ..config.settings import settings
from .logger import get_logger

logger = get_logger(__name__)


class PostgresClient:
    """
    Async PostgreSQL client
    """

    def __init__(self, database_url: Optional[str] = None, command_timeout: float = 60):
        """
        Initialize PostgreSQL client

        Args:
            database_url: PostgreSQL connection URL (uses settings if not provided)
            command_timeout: Default timeout applied by asyncpg to every query
        """
        self.database_url = database_url or settings.database_url
        self.command_timeout = command_timeout
        self._pool: Optional[Pool] = None

    async def connect(
        self,
        min_size: int = 1,
        max_size: int = 5
    ) -> None:
        """
        Establish database connection pool

        Args:
            min_size: Minimum pool size
            max_size: Maximum pool size
        """
        try:
            self._pool = await asyncpg.create_pool(
                self.database_url,
                min_size=min_size,
                max_size=max_size,
                command_timeout=self.command_timeout
            )
            logger.info("postgres_connected", min_size=min_size, max_size=max_size)
        except Exception as e:
            logger.error("postgres_connect_failed", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close database connection pool"""
        if self._pool:
            await self._pool.close()
            logger.info("postgres_disconnected")

    @property
    def pool(self) -> Pool:
        """Get connection pool"""
        if not self._pool:
            raise RuntimeError("PostgreSQL client not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[Connection]:
        """
        Acquire a connection from the pool

        Usage:
            async with client.acquire() as conn:
                result = await conn.fetch("SELECT * FROM people")
        """
        async with self.pool.acquire() as connection:
            yield connection

    # =============================================
    # QUERY OPERATIONS
    # =============================================

    async def execute(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> str:
        """
        Execute a query without returning results

        Returns:
            Status message, e.g. "DELETE 1"
        """
        try:
            async with self.acquire() as conn:
                result = await conn.execute(query, *args, timeout=timeout)
                logger.debug("query_executed", query=query[:100], result=result)
                return result
        except Exception as e:
            logger.error("query_execution_error", query=query[:100], error=str(e))
            raise

    async def fetchrow(
        self,
        query: str,
        *args,
        timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch a single row

        Returns:
            Row as dictionary or None
        """
        try:
            async with self.acquire() as conn:
                row = await conn.fetchrow(query, *args, timeout=timeout)
                return dict(row) if row else None
        except Exception as e:
            logger.error("query_fetchrow_error", query=query[:100], error=str(e))
            raise

