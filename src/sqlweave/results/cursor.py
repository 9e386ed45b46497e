"""
Result cursors reconciling buffered and streaming fetch semantics.
"""

from __future__ import annotations

import abc
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Sequence

from ..dialects.base import Dialect
from ..errors import DialectCapabilityError, InvalidArgumentError, ReleasedResourceError
from ..reflection.base import ColumnInfo
from ..utils import get_logger
from .row import Row

TypeNamer = Callable[[Any], "str | None"]

logger = get_logger("results")


def _default_type_name(type_code: Any) -> str | None:
    if type_code is None:
        return None
    if isinstance(type_code, type):
        return type_code.__name__
    return str(type_code)


def describe_columns(description: Sequence[Sequence[Any]] | None, type_namer: TypeNamer | None = None) -> list[ColumnInfo]:
    """
    Build column descriptors from a DB-API ``cursor.description``.
    """

    namer = type_namer or _default_type_name
    columns: list[ColumnInfo] = []
    for entry in description or ():
        name = entry[0]
        type_code = entry[1] if len(entry) > 1 else None
        display_size = entry[2] if len(entry) > 2 else None
        internal_size = entry[3] if len(entry) > 3 else None
        null_ok = entry[6] if len(entry) > 6 else None
        size = internal_size if isinstance(internal_size, int) and internal_size >= 0 else None
        if size is None and isinstance(display_size, int) and display_size >= 0:
            size = display_size
        vendor: dict[str, Any] = {"type_code": type_code}
        if len(entry) > 5:
            vendor["precision"] = entry[4]
            vendor["scale"] = entry[5]
        columns.append(
            ColumnInfo(
                name=name,
                native_type=namer(type_code),
                full_name=name,
                size=size,
                nullable=null_ok if isinstance(null_ok, bool) else None,
                vendor=vendor,
            )
        )
    return columns


class ResultCursor(abc.ABC):
    """
    Owns one native result handle and surfaces its rows.

    Use it as a context manager so the handle is released on every exit
    path; ``free()`` may be called any number of times.
    """

    buffered: bool = False

    def __init__(
        self,
        native: Any,
        *,
        dialect: Dialect,
        columns: list[ColumnInfo] | None = None,
        type_namer: TypeNamer | None = None,
    ) -> None:
        self._native = native
        self.dialect = dialect
        if columns is None:
            columns = describe_columns(getattr(native, "description", None), type_namer)
        self._columns = columns
        self._names = [column.name for column in columns]
        self._freed = False

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.free()

    def __iter__(self) -> Iterator[Row]:
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        state = "freed" if self._freed else "open"
        return f"<{self.__class__.__name__} columns={self._names!r} {state}>"

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #
    def fetch(self, assoc: bool = True) -> Row | tuple | None:
        """
        Return the next row (``Row`` or plain tuple) or ``None`` at end of data.
        """

        self._ensure_open()
        raw = self._next_raw()
        if raw is None:
            return None
        values = self._normalize(raw)
        if assoc:
            return Row(zip(self._names, values))
        return values

    def fetch_all(self, assoc: bool = True) -> list:
        rows = []
        while True:
            row = self.fetch(assoc)
            if row is None:
                return rows
            rows.append(row)

    def fetch_single(self) -> Any:
        row = self.fetch(assoc=False)
        if row is None:
            return None
        return row[0] if row else None

    def fetch_pairs(self, key: str | None = None, value: str | None = None) -> dict[Any, Any]:
        """
        Map one column to another; defaults to the first two columns.
        """

        key = key or (self._names[0] if self._names else None)
        if value is None and len(self._names) > 1:
            value = self._names[1]
        pairs: dict[Any, Any] = {}
        for row in self:
            pairs[row[key]] = row[value] if value is not None else row
        return pairs

    # ------------------------------------------------------------------ #
    # Capabilities
    # ------------------------------------------------------------------ #
    @abc.abstractmethod
    def count(self) -> int: ...

    @abc.abstractmethod
    def seek(self, row: int) -> bool: ...

    @abc.abstractmethod
    def _next_raw(self) -> Any: ...

    def get_result_columns(self) -> list[ColumnInfo]:
        return list(self._columns)

    @property
    def column_names(self) -> list[str]:
        return list(self._names)

    def get_result_resource(self) -> Any:
        return None if self._freed else self._native

    @property
    def is_freed(self) -> bool:
        return self._freed

    def free(self) -> None:
        if self._freed:
            return
        self._freed = True
        native, self._native = self._native, None
        self._release()
        close = getattr(native, "close", None)
        if close is not None:
            close()
        logger.debug("Result set freed (%s)", self.__class__.__name__)

    def _release(self) -> None:
        """Drop variant-specific state; the native handle is closed by ``free``."""

    # ------------------------------------------------------------------ #
    def _ensure_open(self) -> None:
        if self._freed:
            raise ReleasedResourceError("Result set has already been freed.")

    def _normalize(self, raw: Any) -> tuple:
        if isinstance(raw, Mapping):
            raw = raw.values()
        unescape = self.dialect.unescape_binary
        return tuple(
            unescape(value) if isinstance(value, (memoryview, bytearray)) else value for value in raw
        )


class BufferedCursor(ResultCursor):
    """
    All rows are materialized up front; supports ``count`` and ``seek``.
    """

    buffered = True

    def __init__(
        self,
        native: Any,
        *,
        dialect: Dialect,
        rows: Sequence[Any] | None = None,
        columns: list[ColumnInfo] | None = None,
        type_namer: TypeNamer | None = None,
    ) -> None:
        super().__init__(native, dialect=dialect, columns=columns, type_namer=type_namer)
        if rows is None:
            rows = native.fetchall()
        self._rows: list[Any] = list(rows)
        self._position = 0

    def count(self) -> int:
        self._ensure_open()
        return len(self._rows)

    def __len__(self) -> int:
        return self.count()

    def seek(self, row: int) -> bool:
        self._ensure_open()
        if isinstance(row, bool) or not isinstance(row, int):
            raise InvalidArgumentError(f"Row position must be an integer, got {row!r}.")
        if 0 <= row < len(self._rows):
            self._position = row
            return True
        return False

    def _next_raw(self) -> Any:
        if self._position >= len(self._rows):
            return None
        raw = self._rows[self._position]
        self._position += 1
        return raw

    def _release(self) -> None:
        self._rows = []


class StreamingCursor(ResultCursor):
    """
    Rows are pulled from the engine one at a time; forward-only.
    """

    buffered = False

    def __init__(
        self,
        native: Any,
        *,
        dialect: Dialect,
        columns: list[ColumnInfo] | None = None,
        type_namer: TypeNamer | None = None,
    ) -> None:
        super().__init__(native, dialect=dialect, columns=columns, type_namer=type_namer)
        self._exhausted = False

    def count(self) -> int:
        self._ensure_open()
        raise DialectCapabilityError("Row count is not available for unbuffered queries.")

    def seek(self, row: int) -> bool:
        self._ensure_open()
        raise DialectCapabilityError("Cannot seek an unbuffered result set.")

    def _next_raw(self) -> Any:
        if self._exhausted:
            return None
        raw = self._native.fetchone()
        if raw is None:
            self._exhausted = True
        return raw
