"""
MySQL dialect implementation.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Final

from ..errors import DialectCapabilityError
from .base import BaseDialect, DialectCapabilities

# Same table as mysql_real_escape_string().
_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    '"': '\\"',
    "\x00": "\\0",
    "\n": "\\n",
    "\r": "\\r",
    "\x1a": "\\Z",
}

# Largest magnitude of a TIME value: 838:59:59.
_MAX_TIME_SECONDS = 838 * 3600 + 59 * 60 + 59


class MySQLDialect(BaseDialect):
    """
    MySQL dialect using backslash escapes inside string literals.
    """

    name: Final[str] = "mysql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_savepoints=True,
        supports_schema_namespaces=True,
        supports_offset=True,
        supports_intervals=True,
        supports_timezones=False,
    )

    def escape_text(self, value: str) -> str:
        return "'" + "".join(_ESCAPES.get(ch, ch) for ch in value) + "'"

    def escape_binary(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace("`", "``")
        return f"`{escaped}`"

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_interval(self, value: timedelta) -> str:
        total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
        sign = "-" if total_us < 0 else ""
        total_us = abs(total_us)
        seconds, micros = divmod(total_us, 1_000_000)
        if seconds > _MAX_TIME_SECONDS:
            raise DialectCapabilityError("MySQL TIME values are limited to 838:59:59.")
        hours, remainder = divmod(seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        literal = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
        if micros:
            literal += f".{micros:06d}"
        return f"'{literal}'"

    def escape_like(self, value: str, pos: int) -> str:
        escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        prefix = "%" if pos <= 0 else ""
        suffix = "%" if pos >= 0 else ""
        return self.escape_text(f"{prefix}{escaped}{suffix}")

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT 18446744073709551615")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
