"""
Driver protocol definitions and the shared DB-API driver implementation.
"""

from __future__ import annotations

import abc
import os
from dataclasses import dataclass
from typing import Any, Protocol

from ..dialects.base import BaseDialect, Dialect
from ..errors import (
    ConnectionStateError,
    DialectCapabilityError,
    DriverConfigurationError,
    NativeExecutionError,
    SqlWeaveError,
)
from ..reflection.base import Reflector
from ..results import BufferedCursor, ResultCursor, StreamingCursor
from ..security.dsns import DSNConfig, parse_dsn
from ..utils import get_logger, time_call
from ..utils.performance import resolve_slow_query_ms


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["sslmode"] = self.mode
        if self.rootcert:
            options["sslrootcert"] = self.rootcert
        if self.cert:
            options["sslcert"] = self.cert
        if self.key:
            options["sslkey"] = self.key
        return options

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {}
        if self.ca:
            ssl["ca"] = self.ca
        if self.cert:
            ssl["cert"] = self.cert
        if self.key:
            ssl["key"] = self.key
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        if not ssl:
            return {}
        return {"ssl": ssl}

    def sqlserver_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["Encrypt"] = "no" if self.mode in {"disable", "allow"} else "yes"
        if self.check_hostname is False:
            options["TrustServerCertificate"] = "yes"
        return options


ISOLATION_LEVELS = frozenset(
    {"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE", "SNAPSHOT"}
)


def normalize_isolation_level(value: str) -> str:
    level = " ".join(value.replace("_", " ").split()).upper()
    if level not in ISOLATION_LEVELS:
        raise DriverConfigurationError(f"Unknown isolation level: {value!r}")
    return level


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise DriverConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise DriverConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise DriverConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


def _pop_bool(query: dict[str, str], key: str) -> bool | None:
    if key not in query:
        return None
    return _parse_bool(query.pop(key), key=key)


def _pop_float(query: dict[str, str], key: str) -> float | None:
    if key not in query:
        return None
    return _parse_float(query.pop(key), key=key)


def _parse_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    if "sslmode" in query:
        ssl.mode = query.pop("sslmode")
    if "sslrootcert" in query:
        ssl.rootcert = query.pop("sslrootcert")
    if "sslcert" in query:
        ssl.cert = query.pop("sslcert")
    if "sslkey" in query:
        ssl.key = query.pop("sslkey")
    if "ssl_ca" in query:
        ssl.ca = query.pop("ssl_ca")
    if "ssl_cert" in query:
        ssl.cert = query.pop("ssl_cert")
    if "ssl_key" in query:
        ssl.key = query.pop("ssl_key")
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
    if any([ssl.mode, ssl.rootcert, ssl.cert, ssl.key, ssl.ca, ssl.check_hostname is not None]):
        return ssl
    return None


def _parse_option_values(query: dict[str, str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in query.items():
        if key == "connect_timeout":
            options[key] = _parse_int(value, key=key)
        else:
            options[key] = value
    return options


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for drivers.

    ``buffered=None`` lets each driver pick its default cursor variant.
    """

    url: str
    autocommit: bool = False
    isolation_level: str | None = None
    timeout: float | None = None
    buffered: bool | None = None
    lazy: bool = False
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string.
        """

        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        parsed_autocommit = _pop_bool(query, "autocommit")
        parsed_timeout = _pop_float(query, "timeout")
        parsed_buffered = _pop_bool(query, "buffered")
        parsed_lazy = _pop_bool(query, "lazy")
        parsed_isolation_level = query.pop("isolation_level", None)
        parsed_ssl = _parse_ssl(query)

        options = _parse_option_values(query)
        options.update(kwargs.pop("options", None) or {})

        autocommit = kwargs.pop("autocommit", parsed_autocommit)
        lazy = kwargs.pop("lazy", parsed_lazy)

        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=bool(autocommit),
            isolation_level=kwargs.pop("isolation_level", parsed_isolation_level),
            timeout=kwargs.pop("timeout", parsed_timeout),
            buffered=kwargs.pop("buffered", parsed_buffered),
            lazy=bool(lazy),
            options=options or None,
            ssl=kwargs.pop("ssl", parsed_ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise DriverConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @property
    def engine(self) -> str:
        if self.dsn:
            return self.dsn.engine
        return self.url.split(":", 1)[0].split("+", 1)[0].lower()

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class Driver(Protocol):
    """
    Capability contract every engine driver satisfies.
    """

    dialect: Dialect

    def connect(self, config: ConnectionConfig) -> Any: ...

    def disconnect(self) -> None:
        """
        Close the native connection. Idempotent.
        """

    def is_connected(self) -> bool: ...

    def execute(self, sql: str) -> ResultCursor | None:
        """
        Run one statement; row-bearing statements return a cursor, others ``None``.
        """

    def affected_rows(self) -> int | None: ...

    def insert_id(self, sequence: str | None = None) -> int | None: ...

    def begin(self, savepoint: str | None = None) -> None: ...

    def commit(self, savepoint: str | None = None) -> None: ...

    def rollback(self, savepoint: str | None = None) -> None: ...

    def get_resource(self) -> Any: ...

    def get_reflector(self) -> Reflector: ...

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str: ...


@dataclass
class DriverState:
    connection: Any
    config: ConnectionConfig
    module: Any


class DBAPIDriver(abc.ABC):
    """
    Shared plumbing for drivers wrapping a DB-API 2.0 module.

    Subclasses supply ``_load_module``, ``_open`` and ``_server_version``;
    everything else is common.
    """

    name: str = "dbapi"
    dialect_class: type[BaseDialect]
    default_buffered: bool = True

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.dialect: BaseDialect = self.dialect_class()
        self._state: DriverState | None = None
        self._affected_rows: int | None = None
        self._last_rowid: Any = None
        self.buffered = self.default_buffered
        self.logger = get_logger(f"drivers.{self.name}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    def __repr__(self) -> str:
        state = "connected" if self.is_connected() else "disconnected"
        return f"<{self.__class__.__name__} {state}>"

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    @abc.abstractmethod
    def _load_module(self) -> Any: ...

    @abc.abstractmethod
    def _open(self, module: Any, config: ConnectionConfig) -> Any: ...

    @abc.abstractmethod
    def _server_version(self, connection: Any) -> Any: ...

    def connect(self, config: ConnectionConfig) -> Any:
        if self._state is not None:
            # one engine session per driver
            self.disconnect()
        module = self._load_module()
        self.logger.info(
            "Connecting to %s %s (autocommit=%s)",
            self.name,
            config.descriptive_label(),
            config.autocommit,
        )
        try:
            connection = self._open(module, config)
        except DriverConfigurationError:
            raise
        except Exception as exc:
            raise NativeExecutionError(
                f"Failed to connect to {self.name}: {exc}", code=self._error_code(exc)
            ) from exc

        try:
            version = self._server_version(connection)
        except Exception as exc:
            connection.close()
            if isinstance(exc, SqlWeaveError):
                raise
            raise NativeExecutionError(
                f"Failed to read {self.name} server version: {exc}", code=self._error_code(exc)
            ) from exc
        self._state = DriverState(connection, config, module)
        self.buffered = self.default_buffered if config.buffered is None else config.buffered
        self.dialect = self.dialect_class(version)
        self.logger.debug("Connected to %s server version %s", self.name, self.dialect.version)
        return connection

    def disconnect(self) -> None:
        if self._state:
            try:
                self._state.connection.close()
            finally:
                self._state = None
                self.logger.info("Disconnected from %s", self.name)

    def is_connected(self) -> bool:
        return self._state is not None and not self._native_closed(self._state.connection)

    def get_resource(self) -> Any:
        return self._state.connection if self._state else None

    def _ensure_connection(self) -> Any:
        if not self._state:
            raise ConnectionStateError(f"{self.__class__.__name__} is not connected.")
        connection = self._state.connection
        if self._native_closed(connection):
            raise ConnectionStateError(f"{self.name} connection was closed by the server or client.")
        return connection

    @staticmethod
    def _native_closed(connection: Any) -> bool:
        closed = getattr(connection, "closed", False)
        # psycopg exposes a bool, psycopg2 an int, pyodbc nothing
        return bool(closed) if not callable(closed) else False

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #
    def execute(self, sql: str) -> ResultCursor | None:
        connection = self._ensure_connection()
        buffered = self.buffered
        cursor = self._open_cursor(connection, sql, buffered=buffered)
        self._run_native(cursor, sql, "execute")

        if cursor.description is None:
            rowcount = getattr(cursor, "rowcount", -1)
            self._affected_rows = rowcount if isinstance(rowcount, int) and rowcount >= 0 else None
            self._last_rowid = getattr(cursor, "lastrowid", None)
            cursor.close()
            return None

        self._affected_rows = None
        if buffered:
            rows = self._fetch_all_native(cursor, sql)
            return BufferedCursor(cursor, dialect=self.dialect, rows=rows, type_namer=self._type_name)
        return StreamingCursor(cursor, dialect=self.dialect, type_namer=self._type_name)

    def _cursor(self, connection: Any, *, buffered: bool) -> Any:
        return connection.cursor()

    def _open_cursor(self, connection: Any, sql: str, *, buffered: bool = True) -> Any:
        try:
            return self._cursor(connection, buffered=buffered)
        except self._native_error_class() as exc:
            raise NativeExecutionError(str(exc), code=self._error_code(exc), sql=sql) from exc

    def _fetch_all_native(self, cursor: Any, sql: str) -> list[Any]:
        try:
            return list(cursor.fetchall())
        except self._native_error_class() as exc:
            cursor.close()
            raise NativeExecutionError(str(exc), code=self._error_code(exc), sql=sql) from exc

    def _run_native(self, cursor: Any, sql: str, operation: str) -> None:
        native_error = self._native_error_class()
        try:
            with time_call(
                f"{self.name}.{operation}",
                self.logger,
                sql=sql,
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql)
        except native_error as exc:
            cursor.close()
            raise NativeExecutionError(str(exc), code=self._error_code(exc), sql=sql) from exc

    def _run(self, sql: str) -> None:
        connection = self._ensure_connection()
        cursor = self._open_cursor(connection, sql)
        self._run_native(cursor, sql, "run")
        cursor.close()

    def _scalar(self, sql: str) -> Any:
        connection = self._ensure_connection()
        cursor = self._open_cursor(connection, sql)
        self._run_native(cursor, sql, "scalar")
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        return row[0] if row else None

    def _native_error_class(self) -> type[BaseException]:
        module = self._state.module if self._state else None
        return getattr(module, "Error", None) or Exception

    @staticmethod
    def _error_code(exc: BaseException) -> Any:
        args = getattr(exc, "args", ())
        if args and isinstance(args[0], int):
            return args[0]
        return None

    def _type_name(self, type_code: Any) -> str | None:
        if type_code is None:
            return None
        if isinstance(type_code, type):
            return type_code.__name__
        return str(type_code)

    def affected_rows(self) -> int | None:
        self._ensure_connection()
        return self._affected_rows

    def insert_id(self, sequence: str | None = None) -> int | None:
        self._ensure_connection()
        return self._last_rowid

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin(self, savepoint: str | None = None) -> None:
        connection = self._ensure_connection()
        if savepoint:
            self._run_savepoint("begin", savepoint)
            return
        self._begin(connection)

    def commit(self, savepoint: str | None = None) -> None:
        connection = self._ensure_connection()
        if savepoint:
            self._run_savepoint("commit", savepoint)
            return
        self._commit(connection)

    def rollback(self, savepoint: str | None = None) -> None:
        connection = self._ensure_connection()
        if savepoint:
            self._run_savepoint("rollback", savepoint)
            return
        self._rollback(connection)

    def _begin(self, connection: Any) -> None:
        self._run("BEGIN")

    def _commit(self, connection: Any) -> None:
        self._wrap_native("commit", connection.commit)

    def _rollback(self, connection: Any) -> None:
        self._wrap_native("rollback", connection.rollback)

    def _wrap_native(self, operation: str, func: Any) -> None:
        try:
            func()
        except self._native_error_class() as exc:
            raise NativeExecutionError(f"{operation} failed: {exc}", code=self._error_code(exc)) from exc

    def _savepoint_sql(self, action: str, name: str) -> str | None:
        identifier = self.dialect.escape_identifier(name)
        if action == "begin":
            return f"SAVEPOINT {identifier}"
        if action == "commit":
            return f"RELEASE SAVEPOINT {identifier}"
        return f"ROLLBACK TO SAVEPOINT {identifier}"

    def _run_savepoint(self, action: str, name: str) -> None:
        if not self.dialect.capabilities.supports_savepoints:
            raise DialectCapabilityError(f"{self.name} does not support savepoints.")
        sql = self._savepoint_sql(action, name)
        if sql is not None:
            self._run(sql)

    # ------------------------------------------------------------------ #
    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        return self.dialect.apply_limit(sql, limit, offset)

    @abc.abstractmethod
    def get_reflector(self) -> Reflector: ...
