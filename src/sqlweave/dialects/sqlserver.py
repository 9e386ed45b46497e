"""
Microsoft SQL Server dialect implementation.
"""

from __future__ import annotations

from typing import Final

from ..errors import DialectCapabilityError
from .base import BaseDialect, DialectCapabilities

# SQL Server 2012 reports major version 11 and introduced OFFSET ... FETCH.
OFFSET_FETCH_MIN_VERSION = (11,)

_LIKE_ESCAPES = {"'": "''", "%": "[%]", "_": "[_]", "[": "[[]"}


class SQLServerDialect(BaseDialect):
    """
    SQL Server dialect; LIMIT/OFFSET support depends on the server version.

    An unknown version is treated as pre-2012, the conservative choice.
    """

    name: Final[str] = "sqlserver"
    datetime_fraction_digits = 3

    def __init__(self, version=None) -> None:
        super().__init__(version)
        self.capabilities = DialectCapabilities(
            supports_savepoints=True,
            supports_schema_namespaces=True,
            supports_offset=self.has_offset_fetch,
            supports_intervals=False,
            supports_timezones=True,
        )

    @property
    def has_offset_fetch(self) -> bool:
        return self.version is not None and self.version >= OFFSET_FETCH_MIN_VERSION

    def escape_text(self, value: str) -> str:
        return "N" + self.quote_single(value)

    def escape_ascii_text(self, value: str) -> str:
        return self.quote_single(value)

    def escape_binary(self, value: bytes) -> str:
        return f"0x{value.hex()}"

    def escape_identifier(self, value: str) -> str:
        escaped = value.replace("]", "]]")
        return f"[{escaped}]"

    def escape_bool(self, value: bool) -> str:
        return "1" if value else "0"

    def escape_like(self, value: str, pos: int) -> str:
        escaped = "".join(_LIKE_ESCAPES.get(ch, ch) for ch in value)
        prefix = "%" if pos <= 0 else ""
        suffix = "%" if pos >= 0 else ""
        return f"N'{prefix}{escaped}{suffix}'"

    def limit_sql(self, sql: str, limit: int | None, offset: int | None) -> str:
        if not self.has_offset_fetch:
            if offset:
                raise DialectCapabilityError(
                    "OFFSET is not supported by this SQL Server version "
                    f"({self._version_label()}); version 11 or newer is required."
                )
            return f"SELECT TOP {limit} * FROM ({sql}) t"

        # OFFSET ... FETCH requires an ORDER BY in the statement.
        clause = f"{sql} OFFSET {offset or 0} ROWS"
        if limit is not None:
            clause += f" FETCH NEXT {limit} ROWS ONLY"
        return clause

    def _version_label(self) -> str:
        if self.version is None:
            return "unknown"
        return ".".join(str(part) for part in self.version)
