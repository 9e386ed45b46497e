"""Redaction helpers for DSNs, logged SQL parameters, and event payloads."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from ..parameters import ParameterValue

REDACTED_VALUE = "***"

_SENSITIVE_KEY_TOKENS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "access_key",
    "private_key",
    "sslkey",
    "ssl_key",
    "sslcert",
    "ssl_cert",
    "sslrootcert",
    "ssl_ca",
)

_SENSITIVE_VALUE_TOKENS = (
    "password",
    "passwd",
    "secret",
    "token",
    "apikey",
    "api_key",
    "bearer",
    "authorization",
)

# quoted sections never hold modifiers; the word before a modifier names the bound column
_BOUND_MODIFIER_RE = re.compile(
    r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|(?P<column>[\w.]+)?\W*%(?P<modifier>~?like~?|[A-Za-z]+)"""
)


def _compact(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum())


def is_sensitive_key(key: str) -> bool:
    normalized = key.lower()
    compact = _compact(normalized)
    return any(token in normalized or _compact(token) in compact for token in _SENSITIVE_KEY_TOKENS)


def is_sensitive_value(value: str) -> bool:
    normalized = value.lower()
    return any(token in normalized for token in _SENSITIVE_VALUE_TOKENS)


def redact_query_params(query: Mapping[str, str]) -> dict[str, str]:
    return {key: REDACTED_VALUE if is_sensitive_key(key) else val for key, val in query.items()}


def redact_value(value: Any, *, key: str | None = None) -> Any:
    if key is not None and is_sensitive_key(str(key)):
        return REDACTED_VALUE
    if isinstance(value, ParameterValue):
        return REDACTED_VALUE if redact_value(value.value) is REDACTED_VALUE else value
    if isinstance(value, Mapping):
        return {k: redact_value(v, key=str(k)) for k, v in value.items()}
    if isinstance(value, tuple):
        return tuple(redact_value(item) for item in value)
    if isinstance(value, list):
        return [redact_value(item) for item in value]
    if isinstance(value, (bytes, bytearray)):
        decoded = bytes(value).decode("utf-8", errors="ignore")
        if decoded and is_sensitive_value(decoded):
            return REDACTED_VALUE
        return value
    if isinstance(value, str) and is_sensitive_value(value):
        return REDACTED_VALUE
    return value


def _bound_columns(fragment: str) -> list[str | None]:
    return [
        match.group("column")
        for match in _BOUND_MODIFIER_RE.finditer(fragment)
        if match.group("modifier") is not None
    ]


def redact_params(params: Iterable[Any] | None) -> list[Any]:
    """
    Mask translator arguments before they reach a log record.

    Arguments are walked the way the translator consumes them: a string
    that no pending modifier binds is trusted SQL and is kept verbatim, so
    statements stay readable in logs. Every bound argument is masked when
    its payload looks sensitive or when the column written in front of
    its modifier (``password = %s``) does. Mapping arguments
    (``%a``/``%v``/``%and`` payloads) are masked per key.
    """

    if params is None:
        return []
    redacted: list[Any] = []
    pending: list[str | None] = []
    for value in params:
        if pending:
            column = pending.pop(0)
            redacted.append(redact_value(value, key=column))
        elif isinstance(value, str):
            pending.extend(_bound_columns(value))
            redacted.append(value)
        else:
            redacted.append(redact_value(value))
    return redacted
