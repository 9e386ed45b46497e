"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import BaseDialect, DialectCapabilities, reject_nul


class SQLiteDialect(BaseDialect):
    """
    SQLite dialect with quote-doubling literals and minimal capabilities.
    """

    name: Final[str] = "sqlite"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_savepoints=True,
        supports_schema_namespaces=False,
        supports_offset=True,
        supports_intervals=False,
        supports_timezones=False,
    )

    def escape_text(self, value: str) -> str:
        reject_nul(self.name, value)
        return self.quote_single(value)

    def escape_binary(self, value: bytes) -> str:
        return f"X'{value.hex()}'"

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace('"', '""')
        return f'"{escaped}"'

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {limit}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT -1")
            parts.append(f"OFFSET {offset}")
        return " ".join(parts)
