"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Final

from .base import BaseDialect, DialectCapabilities, reject_nul


class PostgresDialect(BaseDialect):
    """
    PostgreSQL dialect; backslashes switch text literals to the ``E''`` form.
    """

    name: Final[str] = "postgresql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_savepoints=True,
        supports_schema_namespaces=True,
        supports_offset=True,
        supports_intervals=True,
        supports_timezones=True,
    )

    def escape_text(self, value: str) -> str:
        reject_nul(self.name, value)
        if "\\" in value:
            escaped = value.replace("\\", "\\\\").replace("'", "''")
            return f"E'{escaped}'"
        return self.quote_single(value)

    def escape_binary(self, value: bytes) -> str:
        return f"decode('{value.hex()}', 'hex')"

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace('"', '""')
        return f'"{escaped}"'

    def escape_bool(self, value: bool) -> str:
        return "TRUE" if value else "FALSE"

    def escape_interval(self, value: timedelta) -> str:
        return (
            f"INTERVAL '{value.days} days {value.seconds} seconds "
            f"{value.microseconds} microseconds'"
        )
