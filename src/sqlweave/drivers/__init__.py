"""
Driver interfaces and engine implementations.
"""

from __future__ import annotations

from typing import Any

from ..errors import DriverConfigurationError
from .base import ConnectionConfig, DBAPIDriver, Driver, SSLConfig
from .mysql import MySQLDriver
from .postgres import PostgresDriver
from .sqlite import SQLiteDriver
from .sqlserver import SQLServerDriver

_REGISTRY: dict[str, type[DBAPIDriver]] = {
    "sqlite": SQLiteDriver,
    "postgresql": PostgresDriver,
    "postgres": PostgresDriver,
    "mysql": MySQLDriver,
    "sqlserver": SQLServerDriver,
    "mssql": SQLServerDriver,
}


def get_driver_class(name: str) -> type[DBAPIDriver]:
    key = (name or "").split("+", 1)[0].lower()
    try:
        return _REGISTRY[key]
    except KeyError:
        available = ", ".join(sorted(_REGISTRY))
        raise DriverConfigurationError(f"Unknown driver '{name}'. Available: {available}") from None


def create_driver(config: ConnectionConfig, **kwargs: Any) -> DBAPIDriver:
    """
    Instantiate (but do not connect) the driver matching the config's DSN scheme.
    """

    return get_driver_class(config.engine)(**kwargs)


__all__ = [
    "ConnectionConfig",
    "DBAPIDriver",
    "Driver",
    "SSLConfig",
    "SQLiteDriver",
    "PostgresDriver",
    "MySQLDriver",
    "SQLServerDriver",
    "create_driver",
    "get_driver_class",
]
