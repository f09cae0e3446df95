"""
Shared pytest fixtures for tablekit tests.

Provides:
- ``db``: a fresh in-memory SqliteDatabase loaded with the users/photos schema
- ``users`` / ``photos``: Table accessors bound to ``db``
- ``seeded``: inserts alice, bob and two photos owned by alice
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import pytest_asyncio
import structlog

# Ensure tablekit is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from _support import ALICE, BOB, PHOTO_1, PHOTO_2, SCHEMA  # noqa: E402
from tablekit.codegen import run_script  # noqa: E402
from tablekit.database import SqliteDatabase  # noqa: E402
from tablekit.settings import get_settings  # noqa: E402
from tablekit.table import Table  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Undo CLI-side logging configuration and cached settings."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest_asyncio.fixture
async def db():
    database = await SqliteDatabase.connect(":memory:")
    await run_script(database, SCHEMA)
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
def users(db: SqliteDatabase) -> Table:
    return Table(db, "users")


@pytest.fixture
def photos(db: SqliteDatabase) -> Table:
    return Table(db, "photos")


@pytest_asyncio.fixture
async def seeded(users: Table, photos: Table) -> None:
    await users.insert_or_throw(ALICE, BOB)
    await photos.insert_or_throw(PHOTO_1, PHOTO_2)
