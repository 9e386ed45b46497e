"""
Profiler and logger event wrapping one connection operation.
"""

from __future__ import annotations

import enum
import os
import re
import time
import traceback
from typing import Any

from ..errors import SqlWeaveError
from ..results.cursor import ResultCursor

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_STATEMENT_RE = re.compile(r"\(?\s*(SELECT|UPDATE|INSERT|DELETE)\b", re.IGNORECASE)


class EventType(enum.IntFlag):
    CONNECT = 1
    SELECT = 4
    INSERT = 8
    DELETE = 16
    UPDATE = 32
    QUERY = SELECT | INSERT | DELETE | UPDATE
    BEGIN = 64
    COMMIT = 128
    ROLLBACK = 256
    TRANSACTION = BEGIN | COMMIT | ROLLBACK
    ALL = 1023


class Event:
    """
    One timed operation.

    A ``QUERY`` event is narrowed to SELECT/INSERT/UPDATE/DELETE from the
    statement's leading keyword. ``source`` is the first caller frame outside
    this package as ``(filename, lineno)``.
    """

    def __init__(
        self,
        connection: Any,
        type: EventType,
        sql: str | None = None,
        params: Any = None,
    ) -> None:
        self.connection = connection
        self.type = EventType(type)
        self.sql = (sql or "").strip()
        self.params = params
        self.result: Any = None
        self.count: int | None = None
        self.elapsed_ms: float | None = None
        self.source = _caller_source()
        self._started = time.monotonic()

        if self.type == EventType.QUERY:
            match = _STATEMENT_RE.match(self.sql)
            if match:
                self.type = EventType[match.group(1).upper()]

    def __repr__(self) -> str:
        return f"<Event {self.type.name} sql={self.sql!r} elapsed_ms={self.elapsed_ms}>"

    @property
    def failed(self) -> bool:
        return isinstance(self.result, BaseException)

    def done(self, result: Any = None) -> "Event":
        """
        Stamp the elapsed time and keep ``result`` (a cursor, a count, or the error).
        """

        self.result = result
        self.count = None
        if isinstance(result, ResultCursor):
            try:
                self.count = result.count()
            except SqlWeaveError:
                # streaming cursors cannot count
                self.count = None
        self.elapsed_ms = (time.monotonic() - self._started) * 1000
        return self


def _caller_source() -> tuple[str, int] | None:
    for frame in reversed(traceback.extract_stack()[:-2]):
        filename = os.path.abspath(frame.filename)
        if not filename.startswith(_PACKAGE_DIR + os.sep):
            return frame.filename, frame.lineno or 0
    return None
