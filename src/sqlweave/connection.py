"""
Connection facade tying together translation, drivers, results and events.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from .dialects.base import Dialect
from .drivers import ConnectionConfig, create_driver
from .drivers.base import Driver
from .errors import InvalidArgumentError, SqlWeaveError
from .events import Event, EventDispatcher, EventHandler, EventType
from .reflection.base import Reflector
from .results import ResultCursor, Row
from .transaction import TransactionManager
from .translation import Substitutions, Translator
from .utils import get_logger


class Connection:
    """
    One database connection.

    ``query(*args)`` translates the arguments, executes the statement and
    returns a ``ResultCursor`` for row-bearing statements or the affected
    row count otherwise. Not thread-safe; use one connection per worker.
    """

    def __init__(
        self,
        config: ConnectionConfig | str,
        *,
        driver: Driver | None = None,
        substitutions: Substitutions | None = None,
        lazy: bool | None = None,
        slow_query_ms: int | None = None,
    ) -> None:
        if isinstance(config, str):
            config = ConnectionConfig.from_dsn(config)
        self.config = config
        self.driver = driver if driver is not None else create_driver(config, slow_query_ms=slow_query_ms)
        self.substitutions = substitutions if substitutions is not None else Substitutions()
        self.events = EventDispatcher()
        self.logger = get_logger("connection")
        self._transactions = TransactionManager(self)
        if not (config.lazy if lazy is None else lazy):
            self.connect()

    def __repr__(self) -> str:
        state = "connected" if self.is_connected() else "disconnected"
        return f"<Connection {self.config.redacted_dsn()} {state}>"

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def connect(self) -> None:
        if self.driver.is_connected():
            return
        event = self._event(EventType.CONNECT)
        try:
            self.driver.connect(self.config)
        except SqlWeaveError as exc:
            self._fire(event, exc)
            raise
        self._fire(event)

    def disconnect(self) -> None:
        self.driver.disconnect()
        self._transactions.reset()

    def is_connected(self) -> bool:
        return self.driver.is_connected()

    def get_driver(self) -> Driver:
        if not self.driver.is_connected():
            self.connect()
        return self.driver

    @property
    def dialect(self) -> Dialect:
        return self.driver.dialect

    def on_event(self, handler: EventHandler, mask: EventType = EventType.ALL) -> None:
        self.events.register(handler, mask)

    # ------------------------------------------------------------------ #
    # Statements
    # ------------------------------------------------------------------ #
    def translate(self, *args: Any) -> str:
        driver = self.get_driver()
        return Translator(driver.dialect, self.substitutions).translate(args)

    def query(self, *args: Any) -> ResultCursor | int | None:
        sql = self.translate(*args)
        return self.native_query(sql, params=args)

    def native_query(self, sql: str, *, params: Any = None) -> ResultCursor | int | None:
        """
        Execute already-rendered SQL through the driver, firing a QUERY event.
        """

        driver = self.get_driver()
        event = self._event(EventType.QUERY, sql, params)
        try:
            result: Any = driver.execute(sql)
            if result is None:
                result = driver.affected_rows()
        except SqlWeaveError as exc:
            self._fire(event, exc)
            raise
        self._fire(event, result)
        return result

    def fetch(self, *args: Any) -> Row | None:
        with self._select(args) as cursor:
            return cursor.fetch()

    def fetch_all(self, *args: Any) -> list[Row]:
        with self._select(args) as cursor:
            return cursor.fetch_all()

    def fetch_single(self, *args: Any) -> Any:
        with self._select(args) as cursor:
            return cursor.fetch_single()

    def fetch_pairs(self, *args: Any, key: str | None = None, value: str | None = None) -> dict[Any, Any]:
        with self._select(args) as cursor:
            return cursor.fetch_pairs(key, value)

    def _select(self, args: tuple[Any, ...]) -> ResultCursor:
        result = self.query(*args)
        if not isinstance(result, ResultCursor):
            raise InvalidArgumentError("Statement did not return a result set.")
        return result

    def affected_rows(self) -> int | None:
        return self.get_driver().affected_rows()

    def insert_id(self, sequence: str | None = None) -> int | None:
        return self.get_driver().insert_id(sequence)

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin(self, savepoint: str | None = None) -> None:
        self._transaction_call(EventType.BEGIN, "begin", savepoint)

    def commit(self, savepoint: str | None = None) -> None:
        self._transaction_call(EventType.COMMIT, "commit", savepoint)

    def rollback(self, savepoint: str | None = None) -> None:
        self._transaction_call(EventType.ROLLBACK, "rollback", savepoint)

    @contextmanager
    def transaction(self) -> Generator["Connection", None, None]:
        """
        Commit on success, roll back on error; nested blocks use savepoints.
        """

        with self._transactions.transaction():
            yield self

    def _transaction_call(self, event_type: EventType, operation: str, savepoint: str | None) -> None:
        driver = self.get_driver()
        event = self._event(event_type, savepoint)
        try:
            getattr(driver, operation)(savepoint)
        except SqlWeaveError as exc:
            self._fire(event, exc)
            raise
        self._fire(event)

    # ------------------------------------------------------------------ #
    def get_reflector(self) -> Reflector:
        return self.get_driver().get_reflector()

    def _event(self, event_type: EventType, sql: str | None = None, params: Any = None) -> Event | None:
        if not self.events:
            return None
        return Event(self, event_type, sql, params)

    def _fire(self, event: Event | None, result: Any = None) -> None:
        if event is not None:
            self.events.fire(event.done(result))
