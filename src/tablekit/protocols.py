"""
Connection contract consumed by tablekit.

tablekit never opens, pools, or closes connections. It needs exactly one
capability from whatever the caller hands it: run a fragment and return
the rows. Anything with a ``dialect`` and an ``async query(fragment)``
satisfies :class:`Queryable`. That can be a connection, a transaction-scoped
handle, or a test double.

Architecture:
    ::

        Queryable Protocol:
        ┌────────────────────────────────────────────────────────┐
        │ dialect               → Dialect used to compile        │
        │ query(fragment)       → list[dict] (awaitable)         │
        └────────────────────────────────────────────────────────┘

        Implementations:
        ┌────────────────────────────────────────────────────────┐
        │ tablekit.database.SqliteDatabase  (aiosqlite)          │
        │ anything structurally equivalent                       │
        └────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Add commit/rollback to this protocol
    ✅ DO: Scope transactions outside tablekit and pass the scoped handle

Tags:
    protocol, connection, async, database, tablekit
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from tablekit.dialect import Dialect
from tablekit.fragment import Fragment


@runtime_checkable
class Queryable(Protocol):
    """A DB-independent connection or transaction handle."""

    dialect: Dialect

    async def query(self, fragment: Fragment) -> list[dict[str, Any]]:
        """Run *fragment* and return rows as dicts. Raise on failure."""
        ...


__all__ = ["Queryable"]
