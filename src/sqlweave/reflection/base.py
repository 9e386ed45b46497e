"""
Schema descriptors and the reflector interface.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from ..drivers.base import Driver


@dataclass(frozen=True)
class TableInfo:
    name: str
    is_view: bool = False


@dataclass(frozen=True)
class ColumnInfo:
    """
    Column metadata shared by result cursors and reflectors.
    """

    name: str
    native_type: str | None = None
    table: str | None = None
    full_name: str | None = None
    size: int | None = None
    nullable: bool | None = None
    default: Any = None
    autoincrement: bool | None = None
    vendor: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class IndexInfo:
    name: str
    columns: tuple[str, ...]
    unique: bool = False
    primary: bool = False


@dataclass(frozen=True)
class ForeignKeyInfo:
    name: str | None
    columns: tuple[str, ...]
    referenced_table: str
    referenced_columns: tuple[str, ...]
    on_delete: str | None = None
    on_update: str | None = None


class Reflector(Protocol):
    """
    Read-only schema introspection issued through a driver.
    """

    def get_tables(self) -> list[TableInfo]: ...

    def get_columns(self, table: str) -> list[ColumnInfo]: ...

    def get_indexes(self, table: str) -> list[IndexInfo]: ...

    def get_foreign_keys(self, table: str) -> list[ForeignKeyInfo]: ...


class DriverReflector:
    """
    Base for reflectors; runs queries through ``driver.execute`` and frees every cursor.
    """

    def __init__(self, driver: "Driver") -> None:
        self.driver = driver

    @property
    def dialect(self):
        return self.driver.dialect

    def _rows(self, sql: str, *, assoc: bool = True) -> list:
        cursor = self.driver.execute(sql)
        if cursor is None:
            return []
        with cursor:
            return cursor.fetch_all(assoc)

    def _literal(self, value: str) -> str:
        return self.dialect.escape_text(value)


_TYPE_RE = re.compile(r"^\s*([^(]+?)\s*(?:\(\s*(\d+)[^)]*\)\s*(.*))?$")


def split_native_type(declared: str | None) -> tuple[str | None, int | None]:
    """
    Split ``varchar(255)`` into ``("VARCHAR", 255)``; trailing words are kept.
    """

    if not declared:
        return None, None
    match = _TYPE_RE.match(declared)
    if match is None:
        return declared.upper(), None
    base, size, rest = match.groups()
    native = " ".join(part for part in (base, rest) if part).upper()
    return native, int(size) if size else None


def build_indexes(rows: Sequence[Any]) -> list[IndexInfo]:
    """
    Fold one-row-per-column results into ``IndexInfo`` objects.

    Rows must carry ``index_name``, ``column_name``, ``is_unique`` and ``is_primary``.
    """

    order: list[str] = []
    columns: dict[str, list[str]] = {}
    flags: dict[str, tuple[bool, bool]] = {}
    for row in rows:
        name = row["index_name"]
        if name not in columns:
            order.append(name)
            columns[name] = []
            flags[name] = (bool(row["is_unique"]), bool(row["is_primary"]))
        columns[name].append(row["column_name"])
    return [
        IndexInfo(name=name, columns=tuple(columns[name]), unique=flags[name][0], primary=flags[name][1])
        for name in order
    ]


def build_foreign_keys(rows: Sequence[Any]) -> list[ForeignKeyInfo]:
    """
    Fold one-row-per-column results into ``ForeignKeyInfo`` objects.

    Rows must carry ``constraint_name``, ``column_name``, ``referenced_table``,
    ``referenced_column``, ``on_delete`` and ``on_update``.
    """

    order: list[Any] = []
    grouped: dict[Any, list[Any]] = {}
    for row in rows:
        name = row["constraint_name"]
        if name not in grouped:
            order.append(name)
            grouped[name] = []
        grouped[name].append(row)
    keys = []
    for name in order:
        members = grouped[name]
        first = members[0]
        keys.append(
            ForeignKeyInfo(
                name=None if name is None else str(name),
                columns=tuple(member["column_name"] for member in members),
                referenced_table=first["referenced_table"],
                referenced_columns=tuple(member["referenced_column"] for member in members),
                on_delete=_rule(first["on_delete"]),
                on_update=_rule(first["on_update"]),
            )
        )
    return keys


def _rule(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).replace("_", " ").upper()
