"""
Dialect strategy registry.
"""

from __future__ import annotations

from typing import Any

from ..errors import DriverConfigurationError
from .base import BaseDialect, Dialect, DialectCapabilities, parse_version
from .mysql import MySQLDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect
from .sqlserver import SQLServerDialect

_REGISTRY: dict[str, type[BaseDialect]] = {
    "sqlite": SQLiteDialect,
    "postgresql": PostgresDialect,
    "postgres": PostgresDialect,
    "mysql": MySQLDialect,
    "sqlserver": SQLServerDialect,
    "mssql": SQLServerDialect,
}


def get_dialect(name: str, version: Any = None) -> BaseDialect:
    key = (name or "").lower()
    try:
        dialect_cls = _REGISTRY[key]
    except KeyError:
        available = ", ".join(sorted(_REGISTRY))
        raise DriverConfigurationError(f"Unknown dialect '{name}'. Available: {available}") from None
    return dialect_cls(version)


__all__ = [
    "BaseDialect",
    "Dialect",
    "DialectCapabilities",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    "SQLServerDialect",
    "get_dialect",
    "parse_version",
]
