"""
SQLite driver implementation.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from ..dialects.sqlite import SQLiteDialect
from ..errors import DriverConfigurationError
from ..reflection.sqlite import SQLiteReflector
from .base import ConnectionConfig, DBAPIDriver

_BEGIN_MODES = {"DEFERRED", "IMMEDIATE", "EXCLUSIVE"}


class SQLiteDriver(DBAPIDriver):
    """
    Driver wrapping the Python stdlib sqlite3 module.

    The native connection runs with ``isolation_level=None`` so transactions
    start only on an explicit ``begin()``.
    """

    name = "sqlite"
    dialect_class = SQLiteDialect

    def _load_module(self) -> Any:
        return sqlite3

    def _open(self, module: Any, config: ConnectionConfig) -> Any:
        path = self._normalize_path(config)
        timeout = config.timeout if config.timeout is not None else 5.0
        options = dict(config.options or {})
        options.pop("connect_timeout", None)
        connection = module.connect(
            path,
            isolation_level=None,
            timeout=timeout,
            check_same_thread=False,
            **options,
        )
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    def _server_version(self, connection: Any) -> Any:
        return sqlite3.sqlite_version_info

    def _begin(self, connection: Any) -> None:
        mode = self._state.config.isolation_level if self._state else None
        if mode:
            mode = mode.upper()
            if mode not in _BEGIN_MODES:
                raise DriverConfigurationError(f"Unknown SQLite transaction mode: {mode!r}")
            self._run(f"BEGIN {mode}")
            return
        self._run("BEGIN")

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        return getattr(exc, "sqlite_errorname", None) or getattr(exc, "sqlite_errorcode", None)

    def get_reflector(self) -> SQLiteReflector:
        return SQLiteReflector(self)

    @staticmethod
    def _normalize_path(config: ConnectionConfig) -> str:
        if config.dsn is None:
            return config.url
        path = config.dsn.path
        if config.dsn.host:
            # sqlite://relative/file.db
            path = config.dsn.host + path
        elif path.startswith("/"):
            path = path[1:]
        return path or ":memory:"
