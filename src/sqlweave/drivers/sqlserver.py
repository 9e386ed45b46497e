"""
SQL Server driver implementation over ODBC.
"""

from __future__ import annotations

from typing import Any

from ..dialects.sqlserver import SQLServerDialect
from ..errors import DriverConfigurationError
from ..reflection.sqlserver import SQLServerReflector
from .base import ConnectionConfig, DBAPIDriver, normalize_isolation_level

DEFAULT_ODBC_DRIVER = "ODBC Driver 18 for SQL Server"


def _load_driver():
    try:
        import pyodbc

        return pyodbc
    except ImportError:
        return None


def _odbc_value(value: Any) -> str:
    text = str(value)
    if any(ch in text for ch in ";{}=") or text != text.strip():
        return "{" + text.replace("}", "}}") + "}"
    return text


class SQLServerDriver(DBAPIDriver):
    """
    Driver wrapping pyodbc for Microsoft SQL Server.

    The ODBC connection runs in autocommit mode and transactions are
    controlled with T-SQL statements. Cursors stream by default.
    """

    name = "sqlserver"
    dialect_class = SQLServerDialect
    default_buffered = False

    def _load_module(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise DriverConfigurationError("pyodbc is required to use SQLServerDriver.")
        return driver

    def _open(self, module: Any, config: ConnectionConfig) -> Any:
        connection = module.connect(
            self.connection_string(config),
            autocommit=True,
            timeout=int(config.timeout or 0),
        )
        if config.isolation_level:
            level = normalize_isolation_level(config.isolation_level)
            cursor = connection.cursor()
            cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {level}")
            cursor.close()
        return connection

    @staticmethod
    def connection_string(config: ConnectionConfig) -> str:
        if not config.dsn:
            raise DriverConfigurationError(
                "ConnectionConfig must be built from a DSN for SQL Server connections."
            )
        dsn = config.dsn
        options = dict(config.options or {})
        parts: dict[str, Any] = {"DRIVER": options.pop("driver", DEFAULT_ODBC_DRIVER)}
        server = dsn.host or "localhost"
        if dsn.port:
            server = f"{server},{dsn.port}"
        parts["SERVER"] = server
        if dsn.database:
            parts["DATABASE"] = dsn.database
        if dsn.username:
            parts["UID"] = dsn.username
            parts["PWD"] = dsn.password or ""
        else:
            parts["Trusted_Connection"] = "yes"
        if config.ssl:
            parts.update(config.ssl.sqlserver_options())
        if "connect_timeout" in options:
            parts["Connection Timeout"] = options.pop("connect_timeout")
        parts.update(options)
        return ";".join(f"{key}={_odbc_value(value)}" for key, value in parts.items())

    def _server_version(self, connection: Any) -> Any:
        cursor = connection.cursor()
        try:
            cursor.execute("SELECT CAST(SERVERPROPERTY('ProductVersion') AS NVARCHAR(128))")
            row = cursor.fetchone()
        finally:
            cursor.close()
        return row[0] if row else None

    def _begin(self, connection: Any) -> None:
        self._run("BEGIN TRANSACTION")

    def _commit(self, connection: Any) -> None:
        self._run("COMMIT TRANSACTION")

    def _rollback(self, connection: Any) -> None:
        self._run("ROLLBACK TRANSACTION")

    def _savepoint_sql(self, action: str, name: str) -> str | None:
        identifier = self.dialect.escape_identifier(name)
        if action == "begin":
            return f"SAVE TRANSACTION {identifier}"
        if action == "commit":
            # savepoints cannot be released in T-SQL
            return None
        return f"ROLLBACK TRANSACTION {identifier}"

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        args = getattr(exc, "args", ())
        if args and isinstance(args[0], str):
            return args[0]
        return None

    def insert_id(self, sequence: str | None = None) -> int | None:
        self._ensure_connection()
        value = self._scalar("SELECT @@IDENTITY")
        return None if value is None else int(value)

    def get_reflector(self) -> SQLServerReflector:
        return SQLServerReflector(self)
