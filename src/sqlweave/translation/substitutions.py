"""
Named substitutions expanded from ``:name:`` tokens in SQL text.
"""

from __future__ import annotations

import re
from typing import Iterator, Mapping

from ..errors import InvalidArgumentError, TranslationError

# Quoted sections are matched first so tokens inside string literals are
# left alone; a token preceded by ':' is part of a PostgreSQL cast.
_TOKEN_RE = re.compile(
    r"""('(?:[^']|'')*')"""
    r"""|("(?:[^"]|"")*")"""
    r"""|(?<![:\w]):([A-Za-z_]\w*):(?!:)"""
)

_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")


class Substitutions:
    """
    Explicit name-to-replacement table; lookups are exact-key only.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._table: dict[str, str] = {}
        for name, replacement in (initial or {}).items():
            self.add(name, replacement)

    def add(self, name: str, replacement: str) -> None:
        if not isinstance(name, str) or not _NAME_RE.match(name):
            raise InvalidArgumentError(f"Invalid substitution name {name!r}.")
        if not isinstance(replacement, str):
            raise InvalidArgumentError(
                f"Substitution for '{name}' must be a string, got {type(replacement).__name__}."
            )
        self._table[name] = replacement

    def remove(self, name: str) -> None:
        self._table.pop(name, None)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._table.get(name, default)

    def resolve(self, name: str) -> str:
        try:
            return self._table[name]
        except KeyError:
            raise TranslationError(f"Unresolved substitution ':{name}:'.") from None

    def copy(self) -> "Substitutions":
        return Substitutions(self._table)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __repr__(self) -> str:
        return f"Substitutions({self._table!r})"

    def apply(self, sql: str) -> str:
        """
        Expand every ``:name:`` token outside quoted literals.

        Raises ``TranslationError`` for names missing from the table.
        """

        if ":" not in sql:
            return sql

        def replace(match: re.Match[str]) -> str:
            name = match.group(3)
            if name is None:
                return match.group(0)
            return self.resolve(name)

        return _TOKEN_RE.sub(replace, sql)
