"""
MySQL driver implementation.
"""

from __future__ import annotations

from typing import Any

from ..dialects.mysql import MySQLDialect
from ..errors import DriverConfigurationError
from ..reflection.mysql import MySQLReflector
from .base import ConnectionConfig, DBAPIDriver, normalize_isolation_level


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


class MySQLDriver(DBAPIDriver):
    """
    Driver wrapping a MySQL DB-API client (PyMySQL or mysqlclient).

    Unbuffered mode uses the client's ``SSCursor``; the server keeps the
    result open until it is fully read or freed.
    """

    name = "mysql"
    dialect_class = MySQLDialect

    def _load_module(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise DriverConfigurationError("PyMySQL or mysqlclient is required to use MySQLDriver.")
        return driver

    def _open(self, module: Any, config: ConnectionConfig) -> Any:
        if not config.dsn:
            raise DriverConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )
        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.mysql_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)
        options.setdefault("charset", "utf8mb4")

        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password or "",
            "database": dsn.database,
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port

        connection = module.connect(**connect_kwargs)
        connection.autocommit(bool(config.autocommit))
        if config.isolation_level:
            level = normalize_isolation_level(config.isolation_level)
            cursor = connection.cursor()
            cursor.execute(f"SET SESSION TRANSACTION ISOLATION LEVEL {level}")
            cursor.close()
        return connection

    def _server_version(self, connection: Any) -> Any:
        return connection.get_server_info()

    def _cursor(self, connection: Any, *, buffered: bool) -> Any:
        if buffered:
            return connection.cursor()
        module = self._state.module if self._state else None
        streaming_cls = getattr(getattr(module, "cursors", None), "SSCursor", None)
        if streaming_cls is None:
            raise DriverConfigurationError(f"{module!r} does not provide an unbuffered SSCursor.")
        return connection.cursor(streaming_cls)

    def _begin(self, connection: Any) -> None:
        self._run("START TRANSACTION")

    def _type_name(self, type_code: Any) -> str | None:
        module = self._state.module if self._state else None
        field_type = getattr(getattr(module, "constants", None), "FIELD_TYPE", None)
        if field_type is not None and isinstance(type_code, int):
            for name, value in vars(field_type).items():
                if name.isupper() and value == type_code:
                    return name
        return super()._type_name(type_code)

    def get_reflector(self) -> MySQLReflector:
        return MySQLReflector(self)
