"""
SQLite schema reflection through ``sqlite_master`` and table PRAGMAs.
"""

from __future__ import annotations

from .base import (
    ColumnInfo,
    DriverReflector,
    ForeignKeyInfo,
    IndexInfo,
    TableInfo,
    build_foreign_keys,
    split_native_type,
)


class SQLiteReflector(DriverReflector):
    def get_tables(self) -> list[TableInfo]:
        rows = self._rows(
            "SELECT name, type FROM sqlite_master "
            "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
            "ORDER BY name"
        )
        return [TableInfo(name=row["name"], is_view=row["type"] == "view") for row in rows]

    def get_columns(self, table: str) -> list[ColumnInfo]:
        rows = self._rows(f"PRAGMA table_info({self.dialect.escape_identifier(table)})")
        primary = [row for row in rows if row["pk"]]
        columns = []
        for row in rows:
            native, size = split_native_type(row["type"])
            # only a lone INTEGER PRIMARY KEY aliases the rowid
            autoincrement = bool(row["pk"]) and native == "INTEGER" and len(primary) == 1
            columns.append(
                ColumnInfo(
                    name=row["name"],
                    native_type=native,
                    table=table,
                    full_name=f"{table}.{row['name']}",
                    size=size,
                    nullable=not row["notnull"],
                    default=row["dflt_value"],
                    autoincrement=autoincrement,
                    vendor={"cid": row["cid"], "pk": row["pk"]},
                )
            )
        return columns

    def get_indexes(self, table: str) -> list[IndexInfo]:
        identifier = self.dialect.escape_identifier(table)
        indexes = []
        has_primary = False
        for entry in self._rows(f"PRAGMA index_list({identifier})"):
            info = self._rows(f"PRAGMA index_info({self.dialect.escape_identifier(entry['name'])})")
            primary = entry.get("origin") == "pk"
            has_primary = has_primary or primary
            indexes.append(
                IndexInfo(
                    name=entry["name"],
                    columns=tuple(row["name"] for row in sorted(info, key=lambda row: row["seqno"])),
                    unique=bool(entry["unique"]),
                    primary=primary,
                )
            )
        if not has_primary:
            pk_columns = sorted(
                (row for row in self._rows(f"PRAGMA table_info({identifier})") if row["pk"]),
                key=lambda row: row["pk"],
            )
            if pk_columns:
                indexes.insert(
                    0,
                    IndexInfo(
                        name="PRIMARY",
                        columns=tuple(row["name"] for row in pk_columns),
                        unique=True,
                        primary=True,
                    ),
                )
        return indexes

    def get_foreign_keys(self, table: str) -> list[ForeignKeyInfo]:
        rows = self._rows(f"PRAGMA foreign_key_list({self.dialect.escape_identifier(table)})")
        normalized = [
            {
                "constraint_name": row["id"],
                "column_name": row["from"],
                "referenced_table": row["table"],
                "referenced_column": row["to"],
                "on_delete": row["on_delete"],
                "on_update": row["on_update"],
            }
            for row in sorted(rows, key=lambda row: (row["id"], row["seq"]))
        ]
        return build_foreign_keys(normalized)
