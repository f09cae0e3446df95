"""Predicate compiler: partial rows to SQL fragments.

Pure functions with no I/O. Column names always go through
:meth:`Fragment.ident` and values through bound parameters. Iteration follows
the mapping's insertion order so compiled text is deterministic.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from tablekit.errors import InvalidArgumentError
from tablekit.fragment import TRUE, Fragment

DIRECTIONS = ("asc", "desc")


def equality_predicate(row: Mapping[str, Any]) -> Fragment:
    """``"a" = ? AND "b" = ?`` for each entry; always-true when empty.

    ``None`` compiles to ``IS NULL`` since ``= NULL`` never matches.
    """
    if not row:
        return TRUE
    clauses = []
    for column, value in row.items():
        if value is None:
            clauses.append(Fragment.ident(column) + " IS NULL")
        else:
            clauses.append(Fragment.ident(column) + " = " + Fragment.value(value))
    return Fragment.join(clauses, " AND ")


def insert_columns(row: Mapping[str, Any]) -> tuple[Fragment, Fragment]:
    """Column list and value list for an INSERT, in the row's key order."""
    if not row:
        raise InvalidArgumentError("cannot insert a row with no columns", argument="row")
    columns = Fragment.join(Fragment.ident(column) for column in row)
    values = Fragment.join(Fragment.value(value) for value in row.values())
    return columns, values


def update_set_clause(row: Mapping[str, Any]) -> Fragment:
    """``"a" = ?, "b" = ?`` for an UPDATE. Empty updates are rejected."""
    if not row:
        raise InvalidArgumentError(
            "update values must contain at least one column", argument="update_values"
        )
    return Fragment.join(
        Fragment.ident(column) + " = " + Fragment.value(value) for column, value in row.items()
    )


def normalize_direction(direction: str | None) -> str:
    if direction is None:
        return "asc"
    if not isinstance(direction, str) or direction.lower() not in DIRECTIONS:
        raise InvalidArgumentError(
            f"direction must be 'asc' or 'desc'; got {direction!r}",
            argument="direction",
            value=direction,
        )
    return direction.lower()


def order_by_clause(columns: str | Sequence[str], direction: str | None = "asc") -> Fragment:
    """``ORDER BY "a", "b" ASC``.

    Raises:
        InvalidArgumentError: Empty column list or unknown direction.
    """
    names = [columns] if isinstance(columns, str) else list(columns)
    if not names:
        raise InvalidArgumentError(
            "must have at least 1 element in order_by", argument="order_by", value=columns
        )
    keyword = normalize_direction(direction).upper()
    return " ORDER BY " + Fragment.join((Fragment.ident(n) for n in names), ", ") + f" {keyword}"


def validate_limit(limit: Any) -> int:
    # bool is an int subclass; LIMIT True is never intended.
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise InvalidArgumentError(
            f"limit must be a non-negative integer; got {limit!r}",
            argument="limit",
            value=limit,
        )
    return limit


def limit_clause(limit: Any) -> Fragment:
    """``LIMIT ?`` with the validated limit bound as a parameter."""
    return " LIMIT " + Fragment.value(validate_limit(limit))


__all__ = [
    "DIRECTIONS",
    "equality_predicate",
    "insert_columns",
    "limit_clause",
    "normalize_direction",
    "order_by_clause",
    "update_set_clause",
    "validate_limit",
]
