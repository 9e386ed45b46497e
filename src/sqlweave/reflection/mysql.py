"""
MySQL schema reflection through ``SHOW`` statements and ``information_schema``.
"""

from __future__ import annotations

from .base import (
    ColumnInfo,
    DriverReflector,
    ForeignKeyInfo,
    IndexInfo,
    TableInfo,
    build_foreign_keys,
    build_indexes,
    split_native_type,
)


class MySQLReflector(DriverReflector):
    def get_tables(self) -> list[TableInfo]:
        # first column is named after the database (Tables_in_<db>)
        rows = self._rows("SHOW FULL TABLES", assoc=False)
        return [TableInfo(name=row[0], is_view=row[1] == "VIEW") for row in rows]

    def get_columns(self, table: str) -> list[ColumnInfo]:
        rows = self._rows(f"SHOW FULL COLUMNS FROM {self.dialect.format_table(table)}")
        columns = []
        for row in rows:
            native, size = split_native_type(row["Type"])
            extra = row["Extra"] or ""
            columns.append(
                ColumnInfo(
                    name=row["Field"],
                    native_type=native,
                    table=table,
                    full_name=f"{table}.{row['Field']}",
                    size=size,
                    nullable=row["Null"] == "YES",
                    default=row["Default"],
                    autoincrement="auto_increment" in extra.lower(),
                    vendor={
                        "key": row["Key"],
                        "extra": extra,
                        "collation": row["Collation"],
                        "comment": row["Comment"],
                    },
                )
            )
        return columns

    def get_indexes(self, table: str) -> list[IndexInfo]:
        rows = self._rows(f"SHOW INDEX FROM {self.dialect.format_table(table)}")
        normalized = [
            {
                "index_name": row["Key_name"],
                "column_name": row["Column_name"],
                "is_unique": not int(row["Non_unique"]),
                "is_primary": row["Key_name"] == "PRIMARY",
            }
            for row in sorted(rows, key=lambda row: (row["Key_name"] != "PRIMARY", row["Seq_in_index"]))
        ]
        return build_indexes(normalized)

    def get_foreign_keys(self, table: str) -> list[ForeignKeyInfo]:
        rows = self._rows(
            "SELECT kcu.CONSTRAINT_NAME AS constraint_name, kcu.COLUMN_NAME AS column_name, "
            "kcu.REFERENCED_TABLE_NAME AS referenced_table, "
            "kcu.REFERENCED_COLUMN_NAME AS referenced_column, "
            "rc.DELETE_RULE AS on_delete, rc.UPDATE_RULE AS on_update "
            "FROM information_schema.KEY_COLUMN_USAGE kcu "
            "JOIN information_schema.REFERENTIAL_CONSTRAINTS rc "
            "ON rc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA AND rc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME "
            f"WHERE kcu.TABLE_SCHEMA = DATABASE() AND kcu.TABLE_NAME = {self._literal(table)} "
            "AND kcu.REFERENCED_TABLE_NAME IS NOT NULL "
            "ORDER BY kcu.CONSTRAINT_NAME, kcu.ORDINAL_POSITION"
        )
        return build_foreign_keys(rows)
