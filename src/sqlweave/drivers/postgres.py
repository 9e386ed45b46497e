"""
PostgreSQL driver implementation.
"""

from __future__ import annotations

from typing import Any

from ..dialects.postgres import PostgresDialect
from ..errors import DriverConfigurationError
from ..reflection.postgres import PostgresReflector
from .base import ConnectionConfig, DBAPIDriver, normalize_isolation_level


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresDriver(DBAPIDriver):
    """
    Driver wrapping the psycopg PostgreSQL client.
    """

    name = "postgres"
    dialect_class = PostgresDialect

    def _load_module(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise DriverConfigurationError("psycopg is required to use PostgresDriver.")
        return driver

    def _open(self, module: Any, config: ConnectionConfig) -> Any:
        if not config.dsn:
            raise DriverConfigurationError(
                "ConnectionConfig must be built from a DSN for PostgreSQL connections."
            )
        options = dict(config.options or {})
        if config.ssl:
            for key, value in config.ssl.postgres_options().items():
                options.setdefault(key, value)
        if config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(config.timeout)

        dsn = config.dsn
        connect_kwargs = {
            key: value
            for key, value in {
                "host": dsn.host,
                "port": dsn.port,
                "user": dsn.username,
                "password": dsn.password,
                "dbname": dsn.database,
            }.items()
            if value is not None
        }
        connection = module.connect(**connect_kwargs, **options)
        connection.autocommit = bool(config.autocommit)
        if config.isolation_level:
            level = normalize_isolation_level(config.isolation_level)
            cursor = connection.cursor()
            cursor.execute(f"SET SESSION CHARACTERISTICS AS TRANSACTION ISOLATION LEVEL {level}")
            cursor.close()
            if not connection.autocommit:
                connection.commit()
        return connection

    def _server_version(self, connection: Any) -> Any:
        info = getattr(connection, "info", None)
        version = getattr(info, "server_version", None)
        if version is None:
            version = getattr(connection, "server_version", None)
        return version

    def _begin(self, connection: Any) -> None:
        # without autocommit psycopg opens the transaction on the next statement
        if getattr(connection, "autocommit", False):
            self._run("BEGIN")

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        return getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)

    def _type_name(self, type_code: Any) -> str | None:
        adapters = getattr(self.get_resource(), "adapters", None)
        types = getattr(adapters, "types", None)
        if types is not None and isinstance(type_code, int):
            info = types.get(type_code)
            if info is not None:
                return info.name
        return super()._type_name(type_code)

    def insert_id(self, sequence: str | None = None) -> int | None:
        self._ensure_connection()
        if sequence:
            sql = f"SELECT CURRVAL({self.dialect.escape_text(sequence)})"
        else:
            sql = "SELECT LASTVAL()"
        value = self._scalar(sql)
        return None if value is None else int(value)

    def get_reflector(self) -> PostgresReflector:
        return PostgresReflector(self)
