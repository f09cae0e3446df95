"""SQL dialect abstraction for the table accessor.

Provides a ``Dialect`` protocol and the concrete dialects tablekit ships.
:class:`~tablekit.fragment.Fragment` asks the dialect for placeholders when
it compiles. :class:`~tablekit.table.Table` asks it for the
conflict-resolution wording of INSERT statements. Nothing else in tablekit
is engine specific.

Architecture::

    Fragment.compile(dialect)          Table.insert_or_*(...)
            │                                   │
            ▼                                   ▼
    ┌──────────────────┐      ┌────────────────────────────────────────┐
    │ placeholder(i)   │      │ insert_prefix(mode)                    │
    │  SQLite   → ?    │      │ insert_suffix(mode, columns, keys)     │
    │  Postgres → $i+1 │      │  SQLite   → INSERT OR IGNORE/REPLACE   │
    └──────────────────┘      │  Postgres → ON CONFLICT ...            │
                              └────────────────────────────────────────┘

Examples:
    >>> from tablekit.dialect import get_dialect
    >>> get_dialect("sqlite").placeholder(0)
    '?'
    >>> get_dialect("postgresql").placeholder(2)
    '$3'

Guardrails:
    ❌ DON'T: Hard-code ``?`` or ``INSERT OR IGNORE`` in accessor code
    ✅ DO: Ask the connection's dialect

Tags:
    dialect, sql, portability, tablekit
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

from tablekit.errors import InvalidArgumentError
from tablekit.fragment import Fragment


class InsertMode(str, Enum):
    """Conflict handling for INSERT statements."""

    THROW = "throw"  # surface constraint violations
    IGNORE = "ignore"  # keep the existing row
    REPLACE = "replace"  # overwrite the existing row


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Positional placeholder for the 0-based parameter *index*."""
        ...

    def insert_prefix(self, mode: InsertMode) -> Fragment:
        """Leading keywords of an INSERT, up to and including ``INTO``."""
        ...

    def insert_suffix(
        self,
        mode: InsertMode,
        columns: Sequence[str],
        conflict_columns: Sequence[str] = (),
    ) -> Fragment:
        """Trailing conflict clause of an INSERT (may be empty)."""
        ...


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``INSERT OR IGNORE/REPLACE``."""

    _PREFIXES = {
        InsertMode.THROW: "INSERT INTO ",
        InsertMode.IGNORE: "INSERT OR IGNORE INTO ",
        InsertMode.REPLACE: "INSERT OR REPLACE INTO ",
    }

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def insert_prefix(self, mode: InsertMode) -> Fragment:
        return Fragment.raw(self._PREFIXES[InsertMode(mode)])

    def insert_suffix(
        self,
        mode: InsertMode,  # noqa: ARG002
        columns: Sequence[str],  # noqa: ARG002
        conflict_columns: Sequence[str] = (),  # noqa: ARG002
    ) -> Fragment:
        return Fragment()


class PostgreSQLDialect:
    """PostgreSQL dialect: ``$n`` placeholders (asyncpg), ``ON CONFLICT``.

    PostgreSQL has no ``INSERT OR REPLACE``. Replace is expressed as an
    upsert and therefore needs the conflict target (the key columns).
    """

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholder(self, index: int) -> str:
        return f"${index + 1}"

    def insert_prefix(self, mode: InsertMode) -> Fragment:  # noqa: ARG002
        return Fragment.raw("INSERT INTO ")

    def insert_suffix(
        self,
        mode: InsertMode,
        columns: Sequence[str],
        conflict_columns: Sequence[str] = (),
    ) -> Fragment:
        mode = InsertMode(mode)
        if mode is InsertMode.THROW:
            return Fragment()
        if mode is InsertMode.IGNORE:
            return Fragment.raw(" ON CONFLICT DO NOTHING")

        if not conflict_columns:
            raise InvalidArgumentError(
                "postgresql needs conflict columns to express insert-or-replace",
                argument="conflict_columns",
            )
        target = Fragment.join(Fragment.ident(c) for c in conflict_columns)
        updates = [
            Fragment.ident(c) + " = EXCLUDED." + Fragment.ident(c)
            for c in columns
            if c not in conflict_columns
        ]
        if not updates:
            return " ON CONFLICT (" + target + ") DO NOTHING"
        return " ON CONFLICT (" + target + ") DO UPDATE SET " + Fragment.join(updates)


# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'sqlite'``, ``'postgresql'``, ``'postgres'``.

    Raises:
        InvalidArgumentError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise InvalidArgumentError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}",
            argument="db_type",
            value=db_type,
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "InsertMode",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
]
