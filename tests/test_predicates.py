"""Tests for the predicate compiler."""

from __future__ import annotations

import pytest

from tablekit.dialect import PostgreSQLDialect, SQLiteDialect
from tablekit.errors import InvalidArgumentError
from tablekit.predicates import (
    equality_predicate,
    insert_columns,
    limit_clause,
    normalize_direction,
    order_by_clause,
    update_set_clause,
    validate_limit,
)

SQLITE = SQLiteDialect()


class TestEqualityPredicate:
    def test_empty_row_is_always_true(self) -> None:
        assert equality_predicate({}).compile(SQLITE) == ("1 = 1", ())

    def test_conjunction_in_key_order(self) -> None:
        assert equality_predicate({"b": 2, "a": "x"}).compile(SQLITE) == (
            '"b" = ? AND "a" = ?',
            (2, "x"),
        )

    @pytest.mark.parametrize("size", [1, 2, 5])
    def test_one_clause_per_key(self, size: int) -> None:
        row = {f"c{i}": i for i in range(size)}
        text, params = equality_predicate(row).compile(SQLITE)
        assert text.count(" AND ") == size - 1
        assert params == tuple(range(size))

    def test_none_is_null(self) -> None:
        assert equality_predicate({"bio": None, "age": 3}).compile(SQLITE) == (
            '"bio" IS NULL AND "age" = ?',
            (3,),
        )

    def test_hostile_column_name_is_quoted(self) -> None:
        text, _ = equality_predicate({'x" OR 1=1 --': 1}).compile(SQLITE)
        assert text == '"x"" OR 1=1 --" = ?'


class TestInsertColumns:
    def test_columns_and_values(self) -> None:
        columns, values = insert_columns({"user_id": 1, "bio": None})
        assert columns.compile(SQLITE) == ('"user_id", "bio"', ())
        assert values.compile(PostgreSQLDialect()) == ("$1, $2", (1, None))

    def test_empty_row(self) -> None:
        with pytest.raises(InvalidArgumentError, match="no columns"):
            insert_columns({})


class TestUpdateSetClause:
    def test_assignments(self) -> None:
        assert update_set_clause({"bio": None, "age": 2}).compile(SQLITE) == (
            '"bio" = ?, "age" = ?',
            (None, 2),
        )

    def test_empty(self) -> None:
        with pytest.raises(InvalidArgumentError, match="at least one column"):
            update_set_clause({})


class TestOrderBy:
    def test_single_column_string(self) -> None:
        assert order_by_clause("age").compile(SQLITE) == (' ORDER BY "age" ASC', ())

    def test_several_columns(self) -> None:
        assert order_by_clause(["age", "user_id"], "desc").compile(SQLITE) == (
            ' ORDER BY "age", "user_id" DESC',
            (),
        )

    def test_empty(self) -> None:
        with pytest.raises(InvalidArgumentError, match="must have at least 1 element in order_by"):
            order_by_clause([])

    @pytest.mark.parametrize(("given", "expected"), [(None, "asc"), ("DESC", "desc"), ("Asc", "asc")])
    def test_normalize_direction(self, given: str | None, expected: str) -> None:
        assert normalize_direction(given) == expected

    @pytest.mark.parametrize("given", ["up", "", 1])
    def test_bad_direction(self, given: object) -> None:
        with pytest.raises(InvalidArgumentError, match="direction must be 'asc' or 'desc'"):
            normalize_direction(given)  # type: ignore[arg-type]


class TestLimit:
    def test_bound_as_parameter(self) -> None:
        assert limit_clause(10).compile(SQLITE) == (" LIMIT ?", (10,))

    def test_zero_allowed(self) -> None:
        assert validate_limit(0) == 0

    @pytest.mark.parametrize("limit", [-1, 2.0, False, None, "1"])
    def test_rejected(self, limit: object) -> None:
        with pytest.raises(InvalidArgumentError) as info:
            validate_limit(limit)
        assert info.value.argument == "limit"
