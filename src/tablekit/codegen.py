"""
Schema codegen: DDL script → row type declarations.

Runs a schema script against a throwaway in-memory SQLite database, reads
each table's column metadata back with ``pragma table_info``, and renders a
declaration of every table's row shape. Nothing outside the disposable
database is touched.

Architecture:
    ::

        script ──split_script──▶ statements ──run_script──▶ :memory: db
                                                              │
                        sqlite_master / pragma table_info ◀───┘
                                     │
                                     ▼
                          list[TableSchema] (pydantic)
                                     │
                  ┌──────────────────┴──────────────────┐
                  ▼                                     ▼
          render_interface()                    render_typeddicts()
          interface DbTables {                  class UsersRow(TypedDict):
            users: {                                user_id: float
              user_id: number;                      bio: str | None
              bio: string | null;               class DbTables(TableRegistry):
            },                                      users: Table[UsersRow]
          }

Type mapping:
    - ``number`` when the declared type contains int, real, double, float,
      bool or bit (case-insensitive substring match), else ``string``
    - nullable unless the column is NOT NULL or part of the primary key

Guardrails:
    ❌ DON'T: Put ``;`` inside string literals or comments in schema scripts
    ✅ DO: Keep schema scripts to plain DDL; splitting is deliberately naive

Tags:
    codegen, schema, introspection, sqlite, typeddict, tablekit
"""

from __future__ import annotations

import keyword
from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from tablekit.database import SqliteDatabase
from tablekit.errors import InvalidArgumentError, TablekitError, wrap_database_error
from tablekit.fragment import Fragment, sql
from tablekit.logging import get_logger
from tablekit.protocols import Queryable

logger = get_logger(__name__)

BaseType = Literal["number", "string"]
OutputFormat = Literal["interface", "python"]

NUMERIC_MARKERS = ("int", "real", "double", "float", "bool", "bit")

_PYTHON_TYPES: dict[str, str] = {"number": "float", "string": "str"}


class ColumnInfo(BaseModel):
    """One row of ``pragma table_info``."""

    model_config = ConfigDict(frozen=True)

    cid: int
    name: str
    type: str = ""
    notnull: bool = False
    pk: int = 0
    dflt_value: Any = None

    @property
    def base_type(self) -> BaseType:
        return column_base_type(self.type)

    @property
    def nullable(self) -> bool:
        # Primary keys are never nullable here, whatever the DDL says.
        return not (self.notnull or self.pk)


class TableSchema(BaseModel):
    """A table and its columns in declaration order."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: list[ColumnInfo] = Field(default_factory=list)


def column_base_type(declared_type: str | None) -> BaseType:
    lowered = (declared_type or "").lower()
    if any(marker in lowered for marker in NUMERIC_MARKERS):
        return "number"
    return "string"


# -- Script execution --------------------------------------------------------


def split_script(script: str, terminator: str = ";") -> list[str]:
    """Split *script* on *terminator*, dropping blank statements.

    Terminators inside string literals or comments are not recognised.
    """
    return [statement for statement in script.split(terminator) if statement.strip()]


async def run_script(db: Queryable, script: str, terminator: str = ";") -> None:
    """Execute each statement of *script* in order."""
    for statement in split_script(script, terminator):
        try:
            await db.query(Fragment.raw(statement))
        except TablekitError:
            raise
        except Exception as exc:
            raise wrap_database_error(exc).with_context(
                operation="run_script", sql=statement.strip()
            ) from exc


# -- Introspection -----------------------------------------------------------


async def list_tables(db: Queryable) -> list[str]:
    rows = await db.query(
        sql(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND substr(name, 1, 7) <> 'sqlite_' ORDER BY name"
        )
    )
    return [row["name"] for row in rows]


async def table_columns(db: Queryable, table_name: str) -> list[ColumnInfo]:
    rows = await db.query(sql("PRAGMA table_info({})", Fragment.ident(table_name)))
    return [ColumnInfo.model_validate(row) for row in rows]


async def introspect(
    script: str,
    table_names: Sequence[str] | None = None,
    *,
    terminator: str = ";",
) -> list[TableSchema]:
    """Run *script* in a disposable database and describe its tables.

    Tables default to every table the script created, sorted by name.
    Requested tables that do not exist come back with no columns, as
    ``pragma table_info`` reports them.
    """
    async with await SqliteDatabase.connect(":memory:") as db:
        await run_script(db, script, terminator)
        names = list(table_names) if table_names is not None else await list_tables(db)
        schemas = [
            TableSchema(name=name, columns=await table_columns(db, name)) for name in names
        ]
    logger.info("codegen_introspected", tables=[s.name for s in schemas])
    return schemas


# -- Rendering ---------------------------------------------------------------


def render_interface(schemas: Sequence[TableSchema], type_name: str = "DbTables") -> str:
    """Render the ``interface <Name> { table: { col: type; }, }`` declaration."""
    lines = [f"interface {type_name} {{"]
    for schema in schemas:
        lines.append(f"  {schema.name}: {{")
        for column in schema.columns:
            nullable = " | null" if column.nullable else ""
            lines.append(f"    {column.name}: {column.base_type}{nullable};")
        lines.append("  },")
    lines.append("}")
    return "\n".join(lines) + "\n"


def row_class_name(table_name: str) -> str:
    """``user_photos`` → ``UserPhotosRow``."""
    words = "".join(c if c.isalnum() else " " for c in table_name).split()
    base = "".join(word[:1].upper() + word[1:] for word in words) or "Table"
    if base[0].isdigit():
        base = f"T{base}"
    return f"{base}Row"


def _is_attribute_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def render_typeddicts(schemas: Sequence[TableSchema], type_name: str = "DbTables") -> str:
    """Render a Python module with one ``TypedDict`` per table and a registry.

    Columns or tables whose names are not valid Python identifiers use the
    functional ``TypedDict`` form or are left out of the registry with a
    comment, respectively.
    """
    lines = [
        '"""Generated by tablekit codegen. Do not edit by hand."""',
        "",
        "from __future__ import annotations",
        "",
        "from typing import TypedDict",
        "",
        "from tablekit import Table, TableRegistry",
    ]

    for schema in schemas:
        class_name = row_class_name(schema.name)
        fields = [
            (column.name, _python_annotation(column)) for column in schema.columns
        ]
        lines += ["", ""]
        if all(_is_attribute_name(name) for name, _ in fields):
            lines.append(f"class {class_name}(TypedDict):")
            lines += [f"    {name}: {annotation}" for name, annotation in fields] or ["    pass"]
        else:
            lines.append(f"{class_name} = TypedDict(")
            lines.append(f"    {class_name!r},")
            lines.append("    {")
            lines += [f"        {name!r}: {annotation!r}," for name, annotation in fields]
            lines.append("    },")
            lines.append(")")

    lines += ["", ""]
    lines.append(f"class {type_name}(TableRegistry):")
    declared = 0
    for schema in schemas:
        if _is_attribute_name(schema.name) and not schema.name.startswith("_"):
            lines.append(f"    {schema.name}: Table[{row_class_name(schema.name)}]")
            declared += 1
        else:
            lines.append(f"    # {schema.name!r} is not a valid attribute name; use Table(db, name)")
    if not declared:
        lines.append("    pass")
    return "\n".join(lines) + "\n"


def _python_annotation(column: ColumnInfo) -> str:
    annotation = _PYTHON_TYPES[column.base_type]
    return f"{annotation} | None" if column.nullable else annotation


async def codegen_types(
    script: str,
    table_names: Sequence[str] | None = None,
    type_name: str = "DbTables",
    fmt: OutputFormat = "interface",
    *,
    terminator: str = ";",
) -> str:
    """Introspect *script* and render declarations in *fmt*."""
    if fmt not in ("interface", "python"):
        raise InvalidArgumentError(
            f"format must be 'interface' or 'python'; got {fmt!r}", argument="fmt", value=fmt
        )
    schemas = await introspect(script, table_names, terminator=terminator)
    if fmt == "python":
        return render_typeddicts(schemas, type_name)
    return render_interface(schemas, type_name)


__all__ = [
    "ColumnInfo",
    "TableSchema",
    "codegen_types",
    "column_base_type",
    "introspect",
    "list_tables",
    "render_interface",
    "render_typeddicts",
    "row_class_name",
    "run_script",
    "split_script",
    "table_columns",
]
