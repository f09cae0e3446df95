"""
Structured error types for tablekit.

Every failure raised by tablekit belongs to one of three kinds. Each kind has
its own class and category, so callers can route on type instead of parsing
messages.

Manifesto:
    - **Typed taxonomy:** Argument problems, cardinality problems, and
      database problems are distinct classes
    - **Never retried:** tablekit performs no retries; every error goes to
      the immediate caller
    - **Cause preserved:** Wrapped driver errors keep their original message
      and are chained via ``__cause__``

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                        TablekitError                          │
        │           (category, context, cause, to_dict())               │
        ├───────────────────────────────────────────────────────────────┤
        │                                                               │
        │  InvalidArgumentError   InvariantViolationError   ConfigError │
        │  (VALIDATION)           (INVARIANT)               (CONFIG)    │
        │  raised before I/O      raised after the query                │
        │                                                               │
        │  DataAccessError (DATABASE)                                   │
        │       │                                                       │
        │  IntegrityViolationError                                      │
        └───────────────────────────────────────────────────────────────┘

Examples:
    >>> err = DataAccessError("UNIQUE constraint failed: users.user_id")
    >>> err.category
    <ErrorCategory.DATABASE: 'DATABASE'>
    >>> err.with_context(table="users", operation="insert").context.table
    'users'

Guardrails:
    ❌ DON'T: Raise bare Exception from tablekit code
    ✅ DO: Use the subclass matching the failure kind

    ❌ DON'T: Re-wrap an error that is already a TablekitError
    ✅ DO: Pass the driver exception as ``cause=`` when wrapping

Tags:
    error-handling, exception-hierarchy, tablekit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    VALIDATION = "VALIDATION"  # Caller-supplied shape is wrong
    INVARIANT = "INVARIANT"  # Result cardinality did not match
    DATABASE = "DATABASE"  # The connection or engine failed
    CONFIG = "CONFIG"  # Missing or unreadable configuration
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set appear in :meth:`to_dict`, so log lines stay
    compact. Anything that has no dedicated field goes into ``metadata``.
    """

    table: str | None = None
    operation: str | None = None
    sql: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key in ("table", "operation", "sql"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TablekitError(Exception):
    """
    Base exception for all tablekit errors.

    Subclasses set ``default_category``. ``cause`` is chained as
    ``__cause__`` so tracebacks show the original driver error.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TablekitError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DataAccessError(str(exc), cause=exc).with_context(
                table="users", operation="insert"
            )
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InvalidArgumentError(TablekitError, ValueError):
    """
    A caller-supplied argument violates a precondition.

    Always raised before any statement reaches the connection.
    """

    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        argument: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.argument = argument
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.argument:
            result["argument"] = self.argument
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvariantViolationError(TablekitError):
    """A single-row query matched zero rows, or more than one."""

    default_category = ErrorCategory.INVARIANT

    def __init__(self, message: str, *, row_count: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.row_count = row_count


class DataAccessError(TablekitError):
    """The underlying connection failed while running a statement."""

    default_category = ErrorCategory.DATABASE


class IntegrityViolationError(DataAccessError):
    """A constraint (unique, primary key, not null, foreign key) rejected a write."""

    pass


class ConfigError(TablekitError):
    """Configuration or input file problem."""

    default_category = ErrorCategory.CONFIG


_INTEGRITY_ERROR_NAMES = (
    "IntegrityError",
    "IntegrityConstraintViolationError",
    "UniqueViolationError",
    "UniqueViolation",
)


def wrap_database_error(exc: BaseException) -> DataAccessError:
    """Wrap a driver exception, keeping its message.

    Constraint failures are recognised by class name so that sqlite3,
    psycopg and asyncpg errors all map to :class:`IntegrityViolationError`
    without importing those drivers here.
    """
    message = str(exc) or type(exc).__name__
    names = {cls.__name__ for cls in type(exc).__mro__}
    if names.intersection(_INTEGRITY_ERROR_NAMES):
        return IntegrityViolationError(message, cause=exc)
    return DataAccessError(message, cause=exc)


__all__ = [
    "ConfigError",
    "DataAccessError",
    "ErrorCategory",
    "ErrorContext",
    "IntegrityViolationError",
    "InvalidArgumentError",
    "InvariantViolationError",
    "TablekitError",
    "wrap_database_error",
]
