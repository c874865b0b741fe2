from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Self

import asyncpg
import structlog
from pydantic import BaseModel

from folio.errors import StoreTimeoutError

logger = structlog.get_logger(__name__)


class Database:
    """Owns the asyncpg connection pool.

    Constructed once at startup and handed to services explicitly. Every
    connection is acquired in a scope and returned to the pool when the scope
    exits, whether it exits normally or with an error.
    """

    def __init__(self, dsn: str, pool_size: int = 10, timeout: float = 5.0) -> None:
        self.dsn = dsn
        self.pool_size = pool_size
        self.timeout = timeout
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Create the connection pool."""
        self._pool = await asyncpg.create_pool(
            self.dsn,
            min_size=1,
            max_size=self.pool_size,
            command_timeout=self.timeout,
        )
        logger.info("database_connected", pool_size=self.pool_size)

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("database_closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("Database pool not connected. Call connect() first.")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[asyncpg.Connection]:
        """Borrow a connection for the duration of the block.

        Waiting for a free connection and every statement run on it are
        bounded by ``timeout``; exceeding it raises StoreTimeoutError.
        """
        try:
            async with self.pool.acquire(timeout=self.timeout) as conn:
                yield conn
        except TimeoutError as e:
            logger.warning("database_timeout", timeout=self.timeout)
            raise StoreTimeoutError(f"Database call exceeded {self.timeout}s") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[asyncpg.Connection]:
        """Borrow a connection and run the block in one transaction.

        Commits when the block finishes, rolls back if it raises.
        """
        async with self.acquire() as conn, conn.transaction():
            yield conn


class Record(BaseModel):
    """Base for models loaded from database rows."""

    @classmethod
    def from_row(cls, row: Any) -> Self:
        """Build a model from an asyncpg Record (or any mapping)."""
        return cls.model_validate(dict(row))
