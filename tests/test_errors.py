"""Tests for the tablekit error hierarchy."""

from __future__ import annotations

import sqlite3

import pytest

from tablekit.errors import (
    ConfigError,
    DataAccessError,
    ErrorCategory,
    ErrorContext,
    IntegrityViolationError,
    InvalidArgumentError,
    InvariantViolationError,
    TablekitError,
    wrap_database_error,
)


class TestCategories:
    @pytest.mark.parametrize(
        ("cls", "category"),
        [
            (TablekitError, ErrorCategory.INTERNAL),
            (InvalidArgumentError, ErrorCategory.VALIDATION),
            (InvariantViolationError, ErrorCategory.INVARIANT),
            (DataAccessError, ErrorCategory.DATABASE),
            (IntegrityViolationError, ErrorCategory.DATABASE),
            (ConfigError, ErrorCategory.CONFIG),
        ],
    )
    def test_default_category(self, cls: type[TablekitError], category: ErrorCategory) -> None:
        assert cls("x").category is category

    def test_invalid_argument_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            raise InvalidArgumentError("bad", argument="limit", value=-1)


class TestContext:
    def test_with_context_is_fluent(self) -> None:
        err = DataAccessError("boom")
        assert err.with_context(table="users", operation="get_all", attempt=2) is err
        assert err.context.table == "users"
        assert err.context.metadata == {"attempt": 2}

    def test_context_to_dict_skips_unset(self) -> None:
        assert ErrorContext(table="users").to_dict() == {"table": "users"}


class TestToDict:
    def test_full(self) -> None:
        cause = RuntimeError("disk full")
        err = DataAccessError("disk full", cause=cause).with_context(sql="SELECT 1")
        assert err.to_dict() == {
            "error_type": "DataAccessError",
            "message": "disk full",
            "category": "DATABASE",
            "context": {"sql": "SELECT 1"},
            "cause": "RuntimeError: disk full",
        }
        assert err.__cause__ is cause

    def test_invalid_argument_details(self) -> None:
        result = InvalidArgumentError("bad", argument="limit", value=-1).to_dict()
        assert result["argument"] == "limit"
        assert result["value"] == "-1"

    def test_repr(self) -> None:
        assert repr(InvariantViolationError("less")) == "InvariantViolationError('less')"


class TestWrapDatabaseError:
    def test_integrity_error(self) -> None:
        exc = sqlite3.IntegrityError("UNIQUE constraint failed: users.user_id")
        wrapped = wrap_database_error(exc)
        assert type(wrapped) is IntegrityViolationError
        assert wrapped.message == "UNIQUE constraint failed: users.user_id"
        assert wrapped.cause is exc

    def test_matches_by_class_name(self) -> None:
        class UniqueViolationError(Exception):
            pass

        assert isinstance(wrap_database_error(UniqueViolationError("dup")), IntegrityViolationError)

    def test_other_errors(self) -> None:
        wrapped = wrap_database_error(sqlite3.OperationalError("no such table: x"))
        assert type(wrapped) is DataAccessError

    def test_empty_message_falls_back_to_type(self) -> None:
        assert wrap_database_error(TimeoutError()).message == "TimeoutError"
