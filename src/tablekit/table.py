"""Single-table data access with cardinality checks.

Provides :class:`Table`, which pairs one table name with one
:class:`~tablekit.protocols.Queryable`. Each method builds exactly one
statement from :mod:`tablekit.predicates` output and sends it through the
connection. Multi-row inserts are the exception: they send one statement
per row.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                          Table[TRow]                               │
    │                                                                    │
    │   db: Queryable            ← caller-owned, never closed here       │
    │   table_name: str                                                  │
    │                                                                    │
    │   insert_or_throw / _ignore / _replace(*rows)  → None              │
    │   set_by_sql(where, values) / set(where_values, values) → rows     │
    │   del_by_sql(where) / delete(where_values)     → None              │
    │   get_all_by_sql(where) / get_all(where_values, order_by, ...)     │
    │   get_one_by_sql[_or_throw](where) / get_one[_or_throw](values)    │
    └────────────────────────────────────────────────────────────────────┘

Usage:
    >>> users = Table(db, "users")
    >>> await users.insert_or_throw({"user_id": 1, "screen_name": "@alice"})
    >>> await users.get_one({"user_id": 1})
    {'user_id': 1, 'screen_name': '@alice', 'bio': None, 'age': None}

Guardrails:
    ❌ DON'T: Expect Table to commit, roll back, or retry
    ✅ DO: Pass a transaction-scoped handle when several calls must be atomic

Tags:
    repository, table, cardinality, async, tablekit
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar, cast

from tablekit.dialect import InsertMode
from tablekit.errors import InvariantViolationError, TablekitError, wrap_database_error
from tablekit.fragment import TRUE, Fragment
from tablekit.logging import get_logger
from tablekit.predicates import (
    equality_predicate,
    insert_columns,
    limit_clause,
    normalize_direction,
    order_by_clause,
    update_set_clause,
    validate_limit,
)
from tablekit.protocols import Queryable

logger = get_logger(__name__)

TRow = TypeVar("TRow", bound=Mapping[str, Any])

MORE_THAN_ONE = "more than one row matched this query"
LESS_THAN_ONE = "less than one row matched this query"


class Table(Generic[TRow]):
    """Data access for one table.

    Parameters:
        db: Any object satisfying the :class:`Queryable` protocol.
        table_name: The table every statement targets.
        conflict_columns: Key columns used by dialects that need an explicit
            conflict target for insert-or-replace (PostgreSQL).
    """

    def __init__(
        self,
        db: Queryable,
        table_name: str,
        *,
        conflict_columns: Sequence[str] = (),
    ) -> None:
        self.db = db
        self.table_name = table_name
        self.conflict_columns = tuple(conflict_columns)
        self._ident = Fragment.ident(table_name)

    def __repr__(self) -> str:
        return f"Table({self.table_name!r})"

    # -- Raw access --------------------------------------------------------

    async def query(self, fragment: Fragment, *, operation: str = "query") -> list[dict[str, Any]]:
        """Issue *fragment* directly to the underlying connection.

        Driver errors are wrapped in :class:`~tablekit.errors.DataAccessError`
        (message preserved, original chained as ``__cause__``).
        """
        text, params = fragment.compile(self.db.dialect)
        logger.debug(
            "statement_issued",
            table=self.table_name,
            operation=operation,
            sql=text,
            param_count=len(params),
        )
        try:
            return await self.db.query(fragment)
        except TablekitError as exc:
            raise exc.with_context(table=self.table_name, operation=operation, sql=text)
        except Exception as exc:
            error = wrap_database_error(exc).with_context(
                table=self.table_name, operation=operation, sql=text
            )
            logger.warning("statement_failed", **error.to_dict())
            raise error from exc

    # -- Inserts -----------------------------------------------------------

    def _insert_statement(self, mode: InsertMode, row: Mapping[str, Any]) -> Fragment:
        dialect = self.db.dialect
        columns, values = insert_columns(row)
        suffix = dialect.insert_suffix(mode, list(row), self.conflict_columns)
        return (
            dialect.insert_prefix(mode)
            + self._ident
            + " ("
            + columns
            + ") VALUES ("
            + values
            + ")"
            + suffix
        )

    async def _insert(self, mode: InsertMode, rows: tuple[TRow, ...]) -> None:
        # Build every statement first so argument errors surface before any I/O.
        statements = [self._insert_statement(mode, row) for row in rows]
        operation = f"insert_or_{mode.value}"
        results = await asyncio.gather(
            *(self.query(statement, operation=operation) for statement in statements),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def insert_or_throw(self, *rows: TRow) -> None:
        """INSERT INTO; constraint conflicts raise IntegrityViolationError."""
        await self._insert(InsertMode.THROW, rows)

    async def insert_or_ignore(self, *rows: TRow) -> None:
        """INSERT, keeping the existing row on conflict."""
        await self._insert(InsertMode.IGNORE, rows)

    async def insert_or_replace(self, *rows: TRow) -> None:
        """INSERT, overwriting the existing row on conflict."""
        await self._insert(InsertMode.REPLACE, rows)

    # -- Updates -----------------------------------------------------------

    async def set_by_sql(self, where: Fragment, update_values: Mapping[str, Any]) -> list[TRow]:
        """UPDATE with a SQL predicate.

        Returns whatever rows the engine reports for the statement; for
        SQLite without ``RETURNING`` that is an empty list.
        """
        statement = "UPDATE " + self._ident + " SET " + update_set_clause(update_values)
        rows = await self.query(statement + " WHERE " + where, operation="set")
        return cast(list[TRow], rows)

    async def set(
        self, where_values: Mapping[str, Any], update_values: Mapping[str, Any]
    ) -> list[TRow]:
        """UPDATE with a partial-row predicate."""
        return await self.set_by_sql(equality_predicate(where_values), update_values)

    # -- Deletes -----------------------------------------------------------

    async def del_by_sql(self, where: Fragment) -> None:
        """DELETE FROM with a SQL predicate."""
        await self.query("DELETE FROM " + self._ident + " WHERE " + where, operation="delete")

    async def delete(self, where_values: Mapping[str, Any]) -> None:
        """DELETE FROM with a partial-row predicate."""
        await self.del_by_sql(equality_predicate(where_values))

    # -- Selects -----------------------------------------------------------

    async def get_all_by_sql(self, where: Fragment = TRUE) -> list[TRow]:
        """SELECT * with a SQL predicate (may carry ORDER BY / LIMIT)."""
        rows = await self.query(
            "SELECT * FROM " + self._ident + " WHERE " + where, operation="get_all"
        )
        return cast(list[TRow], rows)

    async def get_one_by_sql(self, where: Fragment = TRUE) -> TRow | None:
        """SELECT * with a SQL predicate; raises if more than one row matches."""
        rows = await self.get_all_by_sql(where + " LIMIT 2")
        return _at_most_one(rows)

    async def get_one_by_sql_or_throw(self, where: Fragment = TRUE) -> TRow:
        """SELECT * with a SQL predicate; raises unless exactly one row matches."""
        return _exactly_one(await self.get_one_by_sql(where))

    async def get_all(
        self,
        where_values: Mapping[str, Any],
        *,
        order_by: str | Sequence[str] | None = None,
        direction: str | None = "asc",
        limit: int | None = None,
    ) -> list[TRow]:
        """SELECT * with a partial-row predicate and optional ordering/limit."""
        normalize_direction(direction)
        if limit is not None:
            validate_limit(limit)

        where = equality_predicate(where_values)
        if order_by is not None:
            where = where + order_by_clause(order_by, direction)
        if limit is not None:
            where = where + limit_clause(limit)
        return await self.get_all_by_sql(where)

    async def get_one(self, where_values: Mapping[str, Any]) -> TRow | None:
        """SELECT * with a partial-row predicate; raises if more than one row matches."""
        return _at_most_one(await self.get_all(where_values))

    async def get_one_or_throw(self, where_values: Mapping[str, Any]) -> TRow:
        """SELECT * with a partial-row predicate; raises unless exactly one row matches."""
        return _exactly_one(await self.get_one(where_values))


def _at_most_one(rows: list[TRow]) -> TRow | None:
    if len(rows) > 1:
        raise InvariantViolationError(MORE_THAN_ONE, row_count=len(rows))
    return rows[0] if rows else None


def _exactly_one(row: TRow | None) -> TRow:
    if row is None:
        raise InvariantViolationError(LESS_THAN_ONE, row_count=0)
    return row


class TableRegistry:
    """Statically declared set of tables sharing one connection.

    Subclasses declare tables as class annotations; instantiating the
    registry binds one :class:`Table` per declared name::

        class DbTables(TableRegistry):
            users: Table[UsersRow]
            photos: Table[PhotosRow]

        db_tables = DbTables(db)
        await db_tables.users.get_one({"user_id": 1})

    Names starting with an underscore are not tables, so the registry keeps
    its own state under such names and any other table name is usable.
    """

    def __init__(self, db: Queryable) -> None:
        self._db = db
        for name in self._table_names():
            setattr(self, name, Table(db, name))

    @classmethod
    def _table_names(cls) -> tuple[str, ...]:
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            if klass in (object, TableRegistry):
                continue
            for name in inspect.get_annotations(klass):
                if not name.startswith("_") and name not in names:
                    names.append(name)
        return tuple(names)

    def __iter__(self):
        return (getattr(self, name) for name in self._table_names())


def tables(db: Queryable, names: Iterable[str]) -> dict[str, Table[Any]]:
    """One :class:`Table` per name, keyed by name."""
    return {name: Table(db, name) for name in names}


__all__ = [
    "LESS_THAN_ONE",
    "MORE_THAN_ONE",
    "Table",
    "TableRegistry",
    "tables",
]
