"""Environment-driven settings for tablekit.

Settings only affect the CLI and logging setup; the library API takes every
value explicitly. Values are read from ``TABLEKIT_*`` environment variables
and an optional ``.env`` file.

Examples:
    >>> import os
    >>> os.environ["TABLEKIT_TYPE_NAME"] = "AppTables"
    >>> TablekitSettings().type_name
    'AppTables'

Tags:
    settings, configuration, pydantic, environment, tablekit
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TablekitSettings(BaseSettings):
    """
    Fields
    ──────
    log_level            : structlog log level
    log_json             : force JSON (True) / console (False) logs; None = auto
    type_name            : default name of the generated declaration
    codegen_format       : default codegen output, ``interface`` or ``python``
    statement_terminator : separator used when splitting schema scripts
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool | None = None

    # ── Codegen ──────────────────────────────────────────────────
    type_name: str = Field(default="DbTables", min_length=1)
    codegen_format: Literal["interface", "python"] = "interface"
    statement_terminator: str = Field(default=";", min_length=1)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return upper


@lru_cache(maxsize=1)
def get_settings() -> TablekitSettings:
    """Process-wide settings, read once."""
    return TablekitSettings()


__all__ = ["TablekitSettings", "get_settings"]
