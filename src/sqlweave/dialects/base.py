"""
Dialect strategy interfaces describing how values become SQL text.
"""

from __future__ import annotations

import abc
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Protocol

from ..errors import DialectCapabilityError, InvalidArgumentError, TranslationError
from ..parameters import ParameterKind, ParameterValue

NULL = "NULL"
LIKE_ESCAPE = "\\"

Version = tuple[int, ...]


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_savepoints: bool = True
    supports_schema_namespaces: bool = False
    supports_offset: bool = True
    supports_intervals: bool = False
    supports_timezones: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed by the translator, drivers, and reflectors.
    """

    @property
    def name(self) -> str: ...

    @property
    def version(self) -> Version | None: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def escape_text(self, value: str) -> str: ...

    def escape_ascii_text(self, value: str) -> str: ...

    def escape_binary(self, value: bytes) -> str: ...

    def escape_identifier(self, value: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def escape_bool(self, value: bool) -> str: ...

    def escape_date(self, value: date) -> str: ...

    def escape_datetime(self, value: datetime) -> str: ...

    def escape_interval(self, value: timedelta) -> str: ...

    def escape_like(self, value: str, pos: int) -> str: ...

    def render(self, param: ParameterValue) -> str: ...

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str: ...

    def unescape_binary(self, value: Any) -> bytes: ...


def parse_version(raw: Any) -> Version | None:
    """
    Normalize a server version (``"11.0.2100"``, ``150004``, ``(3, 45)``) to a tuple.
    """

    if raw is None:
        return None
    if isinstance(raw, tuple):
        return tuple(int(part) for part in raw)
    if isinstance(raw, int):
        # PostgreSQL reports e.g. 150004 for 15.4
        if raw >= 100000:
            return (raw // 10000, raw % 10000)
        return (raw,)
    numbers = re.findall(r"\d+", str(raw))
    if not numbers:
        return None
    return tuple(int(part) for part in numbers)


class BaseDialect(abc.ABC):
    """
    Shared rendering logic; engines override the escaping rules that differ.
    """

    name: str = "generic"
    capabilities: DialectCapabilities = DialectCapabilities()
    datetime_fraction_digits: int = 6

    def __init__(self, version: Any = None) -> None:
        self.version: Version | None = parse_version(version)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(version={self.version!r})"

    # ------------------------------------------------------------------ #
    # Engine specific rules
    # ------------------------------------------------------------------ #
    @abc.abstractmethod
    def escape_text(self, value: str) -> str: ...

    @abc.abstractmethod
    def escape_binary(self, value: bytes) -> str: ...

    @abc.abstractmethod
    def escape_identifier(self, value: str) -> str: ...

    @abc.abstractmethod
    def escape_bool(self, value: bool) -> str: ...

    def escape_interval(self, value: timedelta) -> str:
        raise DialectCapabilityError(f"{self.name} has no interval literal.", value=value)

    # ------------------------------------------------------------------ #
    # Common rules
    # ------------------------------------------------------------------ #
    def escape_ascii_text(self, value: str) -> str:
        return self.escape_text(value)

    def format_table(self, table_name: str) -> str:
        if "." in table_name and self.capabilities.supports_schema_namespaces:
            schema, table = table_name.split(".", 1)
            return f"{self.escape_identifier(schema)}.{self.escape_identifier(table)}"
        return self.escape_identifier(table_name)

    def escape_date(self, value: date) -> str:
        if isinstance(value, datetime):
            value = value.date()
        return f"'{value.year:04d}-{value.month:02d}-{value.day:02d}'"

    def escape_datetime(self, value: datetime) -> str:
        if value.tzinfo is not None and not self.capabilities.supports_timezones:
            raise DialectCapabilityError(
                f"{self.name} cannot express timezone-aware datetime literals."
            )
        stamp = (
            f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
            f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        )
        if value.microsecond:
            fraction = f"{value.microsecond:06d}"[: self.datetime_fraction_digits]
            stamp += f".{fraction}"
        offset = value.utcoffset()
        if offset is not None:
            stamp += _format_utc_offset(offset)
        return f"'{stamp}'"

    def escape_like(self, value: str, pos: int) -> str:
        """
        Encode ``value`` as a LIKE pattern; ``pos`` < 0 ends-with, > 0 starts-with, 0 contains.
        """

        escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = _wrap_like(escaped, pos)
        return f"{self.escape_text(pattern)} ESCAPE {self.escape_text(LIKE_ESCAPE)}"

    def escape_numeric(self, value: Decimal) -> str:
        return format(value, "f")

    def escape_integer(self, value: int) -> str:
        return str(int(value))

    def render(self, param: ParameterValue) -> str:
        """
        Render a parameter value into dialect SQL; NULL for ``None`` payloads.
        """

        if param.value is None:
            return NULL
        kind = param.kind
        value = param.value
        if kind is ParameterKind.TEXT:
            return self.escape_text(value)
        if kind is ParameterKind.ASCII_TEXT:
            return self.escape_ascii_text(value)
        if kind is ParameterKind.IDENTIFIER:
            return self.escape_identifier(value)
        if kind is ParameterKind.INTEGER:
            return self.escape_integer(value)
        if kind is ParameterKind.NUMERIC:
            return self.escape_numeric(value)
        if kind is ParameterKind.BOOLEAN:
            return self.escape_bool(value)
        if kind is ParameterKind.DATE:
            return self.escape_date(value)
        if kind is ParameterKind.DATETIME:
            return self.escape_datetime(value)
        if kind is ParameterKind.INTERVAL:
            if not self.capabilities.supports_intervals:
                raise DialectCapabilityError(f"{self.name} has no interval literal.", value=value)
            return self.escape_interval(value)
        if kind is ParameterKind.BINARY:
            return self.escape_binary(value)
        raise TranslationError(f"Unsupported parameter kind {kind!r}.")

    def apply_limit(self, sql: str, limit: int | None, offset: int | None) -> str:
        """
        Return ``sql`` rewritten to honour ``limit``/``offset``.
        """

        for label, value in (("limit", limit), ("offset", offset)):
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{label.capitalize()} must be an integer, got {value!r}.")
            if value < 0:
                raise InvalidArgumentError(f"Negative {label} is not allowed: {value}.")
        if limit is None and not offset:
            return sql
        return self.limit_sql(sql, limit, offset or None)

    def limit_sql(self, sql: str, limit: int | None, offset: int | None) -> str:
        return f"{sql} {self.limit_clause(limit, offset)}"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)

    def unescape_binary(self, value: Any) -> bytes:
        if isinstance(value, (memoryview, bytearray)):
            return bytes(value)
        return value

    def quote_single(self, value: str) -> str:
        return "'" + value.replace("'", "''") + "'"


def _wrap_like(pattern: str, pos: int) -> str:
    prefix = "%" if pos <= 0 else ""
    suffix = "%" if pos >= 0 else ""
    return f"{prefix}{pattern}{suffix}"


def _format_utc_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{sign}{total // 3600:02d}:{(total % 3600) // 60:02d}"


def reject_nul(dialect_name: str, value: str) -> None:
    if "\x00" in value:
        raise TranslationError(f"{dialect_name} text literals cannot contain NUL characters.", value=value)
