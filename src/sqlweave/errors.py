"""
Error taxonomy shared by the translation, driver, and result layers.
"""

from __future__ import annotations

from typing import Any


class SqlWeaveError(RuntimeError):
    """Base error for all sqlweave failures."""


class DriverConfigurationError(SqlWeaveError):
    """Raised when configuration or required native libraries are invalid."""


class ConnectionStateError(SqlWeaveError):
    """Raised when an operation needs a live connection and there is none."""


class InvalidArgumentError(SqlWeaveError, ValueError):
    """Raised for caller mistakes such as a negative limit or offset."""


class ArgumentError(SqlWeaveError):
    """
    Base for errors that can point at the offending translator argument.

    ``position`` is the zero-based index of that argument when known.
    """

    def __init__(self, message: str, *, position: int | None = None, value: Any = None) -> None:
        self.message = message
        self.position = position
        self.value = value
        super().__init__(self._describe())

    def _describe(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (argument #{self.position}: {self.value!r})"

    def at(self, position: int, value: Any) -> "ArgumentError":
        """
        Return a copy of this error pinned to an argument position.
        """

        return type(self)(self.message, position=position, value=value)


class DialectCapabilityError(ArgumentError):
    """Raised when the current engine, version, or cursor lacks a feature."""


class ReleasedResourceError(SqlWeaveError):
    """Raised when a result cursor is used after it was freed."""


class TranslationError(ArgumentError):
    """Raised when an argument sequence cannot be turned into SQL."""


class NativeExecutionError(SqlWeaveError):
    """
    Wraps an error reported by the native client, keeping its code and the SQL.
    """

    def __init__(self, message: str, *, code: Any = None, sql: str | None = None) -> None:
        self.message = message
        self.code = code
        self.sql = sql
        text = message if code is None else f"{message} (code {code})"
        if sql:
            text = f"{text}\nSQL: {sql}"
        super().__init__(text)


__all__ = [
    "SqlWeaveError",
    "DriverConfigurationError",
    "ConnectionStateError",
    "InvalidArgumentError",
    "ArgumentError",
    "DialectCapabilityError",
    "ReleasedResourceError",
    "TranslationError",
    "NativeExecutionError",
]
