"""SQLite connection adapter (aiosqlite).

Wraps a single :class:`aiosqlite.Connection` so it satisfies the
:class:`~tablekit.protocols.Queryable` protocol. The connection runs in
autocommit mode. Callers that need several statements to be atomic wrap
them in :meth:`SqliteDatabase.transaction`.

Usage::

    from tablekit import SqliteDatabase, Table

    async with await SqliteDatabase.connect("app.db") as db:
        users = Table(db, "users")
        async with db.transaction():
            await users.insert_or_throw(alice, bob)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from tablekit.dialect import Dialect, SQLiteDialect
from tablekit.errors import InvalidArgumentError
from tablekit.fragment import Fragment
from tablekit.logging import get_logger

logger = get_logger(__name__)


class SqliteDatabase:
    """Adapter: ``aiosqlite.Connection`` → ``Queryable`` protocol.

    Driver errors are raised unchanged; wrapping them is the accessor's job.
    """

    dialect: Dialect = SQLiteDialect()

    def __init__(self, conn: aiosqlite.Connection, *, path: str = ":memory:") -> None:
        self._conn = conn
        self.path = path

    @classmethod
    async def connect(
        cls,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        foreign_keys: bool = True,
    ) -> SqliteDatabase:
        """Open *path* (``":memory:"`` gives a private, disposable database)."""
        conn = await aiosqlite.connect(path, timeout=timeout, isolation_level=None)
        conn.row_factory = aiosqlite.Row
        if foreign_keys:
            await conn.execute("PRAGMA foreign_keys = ON")
        logger.debug("sqlite_connected", path=path)
        return cls(conn, path=path)

    # -- Queryable protocol ------------------------------------------------

    async def query(self, fragment: Fragment) -> list[dict[str, Any]]:
        if not isinstance(fragment, Fragment):
            raise InvalidArgumentError(
                "query expects a Fragment; build one with tablekit.sql()",
                argument="fragment",
                value=fragment,
            )
        text, params = fragment.compile(self.dialect)
        async with self._conn.execute(text, params) as cursor:
            rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # -- Transactions ------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SqliteDatabase]:
        """BEGIN … COMMIT, or ROLLBACK if the body raises."""
        await self._conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            await self._conn.execute("ROLLBACK")
            raise
        else:
            await self._conn.execute("COMMIT")

    # -- Lifecycle ---------------------------------------------------------

    async def close(self) -> None:
        await self._conn.close()
        logger.debug("sqlite_closed", path=self.path)

    async def __aenter__(self) -> SqliteDatabase:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def raw(self) -> aiosqlite.Connection:
        """Access the underlying ``aiosqlite.Connection``."""
        return self._conn

    def __repr__(self) -> str:
        return f"SqliteDatabase({self.path!r})"


__all__ = ["SqliteDatabase"]
