"""Tests for the Dialect abstraction layer."""

from __future__ import annotations

import pytest

from tablekit.dialect import (
    Dialect,
    InsertMode,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
)
from tablekit.errors import InvalidArgumentError


@pytest.fixture(params=["sqlite", "postgresql"])
def dialect(request: pytest.FixtureRequest) -> Dialect:
    """Parametric fixture: run each test against every dialect."""
    return get_dialect(request.param)


@pytest.fixture
def sqlite() -> SQLiteDialect:
    return SQLiteDialect()


@pytest.fixture
def pg() -> PostgreSQLDialect:
    return PostgreSQLDialect()


def _text(fragment) -> str:
    return fragment.compile(SQLiteDialect())[0]


class TestProtocol:
    def test_satisfies_protocol(self, dialect: Dialect) -> None:
        assert isinstance(dialect, Dialect)

    def test_throw_has_no_suffix(self, dialect: Dialect) -> None:
        assert dialect.insert_suffix(InsertMode.THROW, ["a"]).is_empty()

    def test_insert_mode_accepts_strings(self, dialect: Dialect) -> None:
        assert _text(dialect.insert_prefix("throw")).startswith("INSERT INTO")  # type: ignore[arg-type]


class TestGetDialect:
    def test_names(self) -> None:
        assert get_dialect("sqlite").name == "sqlite"
        assert get_dialect("PostgreSQL").name == "postgresql"
        assert get_dialect("postgres").name == "postgresql"

    def test_unknown(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Unknown dialect"):
            get_dialect("oracle")


class TestSQLite:
    def test_placeholder(self, sqlite: SQLiteDialect) -> None:
        assert sqlite.placeholder(0) == "?"
        assert sqlite.placeholder(7) == "?"

    @pytest.mark.parametrize(
        ("mode", "prefix"),
        [
            (InsertMode.THROW, "INSERT INTO "),
            (InsertMode.IGNORE, "INSERT OR IGNORE INTO "),
            (InsertMode.REPLACE, "INSERT OR REPLACE INTO "),
        ],
    )
    def test_prefix(self, sqlite: SQLiteDialect, mode: InsertMode, prefix: str) -> None:
        assert _text(sqlite.insert_prefix(mode)) == prefix
        assert sqlite.insert_suffix(mode, ["a", "b"]).is_empty()


class TestPostgreSQL:
    def test_placeholder_is_one_based(self, pg: PostgreSQLDialect) -> None:
        assert pg.placeholder(0) == "$1"
        assert pg.placeholder(2) == "$3"

    def test_prefix_is_plain_insert(self, pg: PostgreSQLDialect) -> None:
        for mode in InsertMode:
            assert _text(pg.insert_prefix(mode)) == "INSERT INTO "

    def test_ignore(self, pg: PostgreSQLDialect) -> None:
        assert _text(pg.insert_suffix(InsertMode.IGNORE, ["a"])) == " ON CONFLICT DO NOTHING"

    def test_replace(self, pg: PostgreSQLDialect) -> None:
        suffix = pg.insert_suffix(InsertMode.REPLACE, ["id", "a", "b"], ["id"])
        assert _text(suffix) == (
            ' ON CONFLICT ("id") DO UPDATE SET "a" = EXCLUDED."a", "b" = EXCLUDED."b"'
        )

    def test_replace_with_only_key_columns(self, pg: PostgreSQLDialect) -> None:
        suffix = pg.insert_suffix(InsertMode.REPLACE, ["id"], ["id"])
        assert _text(suffix) == ' ON CONFLICT ("id") DO NOTHING'

    def test_replace_needs_conflict_columns(self, pg: PostgreSQLDialect) -> None:
        with pytest.raises(InvalidArgumentError, match="conflict columns"):
            pg.insert_suffix(InsertMode.REPLACE, ["id", "a"])
