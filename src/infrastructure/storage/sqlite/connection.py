"""
Async SQLite connection pool with aiosqlite.

Every store goes through the process-wide pool. Reads borrow a connection
with ``get_connection``; writes run in ``get_transaction`` (deferred) or
``get_immediate_transaction`` when they read state they are about to
change, so the write lock is held from the first statement.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Literal

import aiosqlite

from src.config import get_logger, get_settings

logger = get_logger(__name__)

TransactionMode = Literal["DEFERRED", "IMMEDIATE"]

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """
    Fixed-size pool of aiosqlite connections to one database file.

    Connections are opened lazily on first use and handed out through a
    queue, so at most ``pool_size`` operations touch the database at once.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._opened: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return bool(self._opened)

    async def initialize(self) -> None:
        """Open every connection of the pool. Safe to call repeatedly."""
        async with self._lock:
            if self._opened:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open_connection()
                self._opened.append(conn)
                self._idle.put_nowait(conn)

            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _open_connection(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        for pragma in _PRAGMAS:
            await conn.execute(pragma)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; it goes back to the pool on exit."""
        if not self.is_open:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(
        self, mode: TransactionMode = "DEFERRED"
    ) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside an explicit transaction.

        Commits when the block exits normally. Any exception, including
        task cancellation, rolls back before the connection returns to
        the pool, and is re-raised.
        """
        async with self.acquire() as conn:
            await conn.execute(f"BEGIN {mode}")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    def immediate_transaction(self):
        """Transaction that takes the database write lock at BEGIN."""
        return self.transaction("IMMEDIATE")

    async def close(self) -> None:
        """Close all connections. The pool reopens on next use."""
        async with self._lock:
            for conn in self._opened:
                await conn.close()
            self._opened.clear()
            self._idle = asyncio.Queue()
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the process-wide pool from storage settings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close and forget the process-wide pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Connection for reads."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Connection inside a deferred transaction, for plain writes."""
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn


@asynccontextmanager
async def get_immediate_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Connection inside a BEGIN IMMEDIATE transaction, for read-modify-write."""
    pool = await get_pool()
    async with pool.transaction("IMMEDIATE") as conn:
        yield conn
