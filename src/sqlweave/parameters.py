"""
Tagged parameter values consumed by dialect rendering.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any

from .errors import TranslationError


class ParameterKind(enum.Enum):
    TEXT = "text"
    ASCII_TEXT = "ascii_text"
    IDENTIFIER = "identifier"
    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    INTERVAL = "interval"
    BINARY = "binary"


@dataclass(frozen=True)
class ParameterValue:
    """
    A value paired with the kind that decides how a dialect renders it.

    Construction validates and normalizes the payload; a ``None`` payload
    stands for SQL NULL under every kind except identifiers.
    """

    kind: ParameterKind
    value: Any
    length: int | None = None
    encoding: str | None = None
    precision: int | None = None
    scale: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ParameterKind):
            raise TranslationError(f"Unknown parameter kind {self.kind!r}.")
        if self.value is None:
            if self.kind is ParameterKind.IDENTIFIER:
                raise TranslationError("Identifier parameters cannot be NULL.")
            return
        normalized = _NORMALIZERS[self.kind](self)
        object.__setattr__(self, "value", normalized)

    @property
    def is_null(self) -> bool:
        return self.value is None


def _expect(param: ParameterValue, types: tuple[type, ...], label: str) -> Any:
    value = param.value
    if isinstance(value, bool) and bool not in types:
        raise TranslationError(f"Expected {label}, got bool.", value=value)
    if not isinstance(value, types):
        raise TranslationError(
            f"Expected {label} for {param.kind.value} parameter, got {type(value).__name__}.",
            value=value,
        )
    return value


def _normalize_text(param: ParameterValue) -> str:
    value = _expect(param, (str,), "str")
    if param.length is not None and len(value) > param.length:
        raise TranslationError(
            f"Text of length {len(value)} exceeds declared length {param.length}.", value=value
        )
    encoding = param.encoding
    if encoding is None and param.kind is ParameterKind.ASCII_TEXT:
        encoding = "ascii"
    if encoding is not None:
        try:
            value.encode(encoding)
        except UnicodeEncodeError as exc:
            raise TranslationError(
                f"Text cannot be encoded as {encoding}.", value=value
            ) from exc
        except LookupError as exc:
            raise TranslationError(f"Unknown encoding {encoding!r}.", value=value) from exc
    return value


def _normalize_identifier(param: ParameterValue) -> str:
    value = _expect(param, (str,), "str")
    if not value:
        raise TranslationError("Identifier cannot be empty.", value=value)
    return value


def _normalize_integer(param: ParameterValue) -> int:
    return _expect(param, (int,), "int")


def _normalize_numeric(param: ParameterValue) -> Decimal:
    raw = _expect(param, (int, float, Decimal), "a number")
    try:
        number = Decimal(repr(raw)) if isinstance(raw, float) else Decimal(raw)
    except InvalidOperation as exc:
        raise TranslationError("Numeric value is not decimal-representable.", value=raw) from exc
    if not number.is_finite():
        raise TranslationError("Numeric value must be finite.", value=raw)
    if param.scale is not None:
        if param.scale < 0:
            raise TranslationError("Numeric scale cannot be negative.", value=param.scale)
        number = number.quantize(Decimal(1).scaleb(-param.scale), rounding=ROUND_HALF_EVEN)
    if param.precision is not None:
        integer_digits = param.precision - (param.scale or 0)
        if integer_digits < 0:
            raise TranslationError("Numeric scale cannot exceed precision.", value=param.scale)
        if abs(number) >= Decimal(10) ** integer_digits:
            raise TranslationError(
                f"Numeric value does not fit NUMERIC({param.precision}, {param.scale or 0}).",
                value=raw,
            )
    return number


def _normalize_boolean(param: ParameterValue) -> bool:
    return _expect(param, (bool,), "bool")


def _normalize_date(param: ParameterValue) -> date:
    value = _expect(param, (date,), "date")
    if isinstance(value, datetime):
        return value.date()
    return value


def _normalize_datetime(param: ParameterValue) -> datetime:
    value = _expect(param, (date,), "datetime")
    if not isinstance(value, datetime):
        return datetime.combine(value, time())
    return value


def _normalize_interval(param: ParameterValue) -> timedelta:
    return _expect(param, (timedelta,), "timedelta")


def _normalize_binary(param: ParameterValue) -> bytes:
    return bytes(_expect(param, (bytes, bytearray, memoryview), "bytes"))


_NORMALIZERS = {
    ParameterKind.TEXT: _normalize_text,
    ParameterKind.ASCII_TEXT: _normalize_text,
    ParameterKind.IDENTIFIER: _normalize_identifier,
    ParameterKind.INTEGER: _normalize_integer,
    ParameterKind.NUMERIC: _normalize_numeric,
    ParameterKind.BOOLEAN: _normalize_boolean,
    ParameterKind.DATE: _normalize_date,
    ParameterKind.DATETIME: _normalize_datetime,
    ParameterKind.INTERVAL: _normalize_interval,
    ParameterKind.BINARY: _normalize_binary,
}


# ---------------------------------------------------------------------- #
# Factories
# ---------------------------------------------------------------------- #
def text(value: str | None, *, length: int | None = None, encoding: str | None = None) -> ParameterValue:
    return ParameterValue(ParameterKind.TEXT, value, length=length, encoding=encoding)


def ascii_text(
    value: str | None, *, length: int | None = None, encoding: str | None = None
) -> ParameterValue:
    return ParameterValue(ParameterKind.ASCII_TEXT, value, length=length, encoding=encoding)


def identifier(value: str) -> ParameterValue:
    return ParameterValue(ParameterKind.IDENTIFIER, value)


def integer(value: int | None) -> ParameterValue:
    return ParameterValue(ParameterKind.INTEGER, value)


def numeric(
    value: int | float | Decimal | None,
    precision: int | None = None,
    scale: int | None = None,
) -> ParameterValue:
    return ParameterValue(ParameterKind.NUMERIC, value, precision=precision, scale=scale)


def boolean(value: bool | None) -> ParameterValue:
    return ParameterValue(ParameterKind.BOOLEAN, value)


def date_value(value: date | None) -> ParameterValue:
    return ParameterValue(ParameterKind.DATE, value)


def datetime_value(value: datetime | date | None) -> ParameterValue:
    return ParameterValue(ParameterKind.DATETIME, value)


def interval(value: timedelta | None) -> ParameterValue:
    return ParameterValue(ParameterKind.INTERVAL, value)


def binary(value: bytes | bytearray | memoryview | None) -> ParameterValue:
    return ParameterValue(ParameterKind.BINARY, value)


def infer_kind(value: Any) -> ParameterKind | None:
    """
    Pick a parameter kind from the Python type of ``value``.

    Returns ``None`` for types with no scalar rendering.
    """

    if isinstance(value, bool):
        return ParameterKind.BOOLEAN
    if isinstance(value, int):
        return ParameterKind.INTEGER
    if isinstance(value, (float, Decimal)):
        return ParameterKind.NUMERIC
    if isinstance(value, datetime):
        return ParameterKind.DATETIME
    if isinstance(value, date):
        return ParameterKind.DATE
    if isinstance(value, timedelta):
        return ParameterKind.INTERVAL
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParameterKind.BINARY
    if isinstance(value, str):
        return ParameterKind.TEXT
    return None


def infer(value: Any) -> ParameterValue:
    if isinstance(value, ParameterValue):
        return value
    if value is None:
        return ParameterValue(ParameterKind.TEXT, None)
    kind = infer_kind(value)
    if kind is None:
        raise TranslationError(
            f"Cannot infer a parameter kind for {type(value).__name__}.", value=value
        )
    return ParameterValue(kind, value)


__all__ = [
    "ParameterKind",
    "ParameterValue",
    "text",
    "ascii_text",
    "identifier",
    "integer",
    "numeric",
    "boolean",
    "date_value",
    "datetime_value",
    "interval",
    "binary",
    "infer",
    "infer_kind",
]
