"""
tablekit - single-table data access helpers over an async SQL connection.

Public API:
    - Table / TableRegistry / tables: cardinality-checked CRUD for one table
    - sql / Fragment: parameter-safe query fragments
    - SqliteDatabase: aiosqlite-backed connection
    - codegen_types / run_script: schema introspection and type declarations
"""

__version__ = "0.1.0"

from tablekit.codegen import codegen_types, introspect, run_script, split_script
from tablekit.database import SqliteDatabase
from tablekit.dialect import Dialect, InsertMode, PostgreSQLDialect, SQLiteDialect, get_dialect
from tablekit.errors import (
    ConfigError,
    DataAccessError,
    IntegrityViolationError,
    InvalidArgumentError,
    InvariantViolationError,
    TablekitError,
)
from tablekit.fragment import TRUE, Fragment, sql
from tablekit.protocols import Queryable
from tablekit.table import Table, TableRegistry, tables

__all__ = [
    "ConfigError",
    "DataAccessError",
    "Dialect",
    "Fragment",
    "InsertMode",
    "IntegrityViolationError",
    "InvalidArgumentError",
    "InvariantViolationError",
    "PostgreSQLDialect",
    "Queryable",
    "SQLiteDialect",
    "SqliteDatabase",
    "TRUE",
    "Table",
    "TableRegistry",
    "TablekitError",
    "codegen_types",
    "get_dialect",
    "introspect",
    "run_script",
    "split_script",
    "sql",
    "tables",
]
