"""
SQL Server schema reflection through ``INFORMATION_SCHEMA`` and ``sys`` catalog views.
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
)


class SQLServerReflector(DriverReflector):
    def get_tables(self) -> list[TableInfo]:
        rows = self._rows(
            "SELECT TABLE_NAME AS table_name, TABLE_TYPE AS table_type "
            "FROM INFORMATION_SCHEMA.TABLES WHERE TABLE_SCHEMA = SCHEMA_NAME() "
            "ORDER BY TABLE_NAME"
        )
        return [TableInfo(name=row["table_name"], is_view=row["table_type"] == "VIEW") for row in rows]

    def get_columns(self, table: str) -> list[ColumnInfo]:
        rows = self._rows(
            "SELECT c.COLUMN_NAME AS column_name, c.DATA_TYPE AS data_type, "
            "c.CHARACTER_MAXIMUM_LENGTH AS max_length, c.NUMERIC_PRECISION AS numeric_precision, "
            "c.IS_NULLABLE AS is_nullable, c.COLUMN_DEFAULT AS column_default, "
            "COLUMNPROPERTY(OBJECT_ID(QUOTENAME(c.TABLE_SCHEMA) + '.' + QUOTENAME(c.TABLE_NAME)), "
            "c.COLUMN_NAME, 'IsIdentity') AS is_identity "
            "FROM INFORMATION_SCHEMA.COLUMNS c "
            f"WHERE c.TABLE_NAME = {self._literal(table)} AND c.TABLE_SCHEMA = SCHEMA_NAME() "
            "ORDER BY c.ORDINAL_POSITION"
        )
        columns = []
        for row in rows:
            size = row["max_length"]
            columns.append(
                ColumnInfo(
                    name=row["column_name"],
                    native_type=str(row["data_type"]).upper(),
                    table=table,
                    full_name=f"{table}.{row['column_name']}",
                    # -1 marks (max) columns
                    size=size if size is not None and size >= 0 else row["numeric_precision"],
                    nullable=row["is_nullable"] == "YES",
                    default=row["column_default"],
                    autoincrement=bool(row["is_identity"]),
                    vendor={"max": size == -1},
                )
            )
        return columns

    def get_indexes(self, table: str) -> list[IndexInfo]:
        rows = self._rows(
            "SELECT i.name AS index_name, c.name AS column_name, "
            "i.is_unique AS is_unique, i.is_primary_key AS is_primary "
            "FROM sys.indexes i "
            "JOIN sys.index_columns ic ON ic.object_id = i.object_id AND ic.index_id = i.index_id "
            "JOIN sys.columns c ON c.object_id = ic.object_id AND c.column_id = ic.column_id "
            f"WHERE i.object_id = OBJECT_ID({self._literal(table)}) "
            "ORDER BY i.name, ic.key_ordinal"
        )
        return build_indexes(rows)

    def get_foreign_keys(self, table: str) -> list[ForeignKeyInfo]:
        rows = self._rows(
            "SELECT fk.name AS constraint_name, pc.name AS column_name, "
            "rt.name AS referenced_table, rc.name AS referenced_column, "
            "fk.delete_referential_action_desc AS on_delete, "
            "fk.update_referential_action_desc AS on_update "
            "FROM sys.foreign_keys fk "
            "JOIN sys.foreign_key_columns fkc ON fkc.constraint_object_id = fk.object_id "
            "JOIN sys.columns pc ON pc.object_id = fkc.parent_object_id AND pc.column_id = fkc.parent_column_id "
            "JOIN sys.tables rt ON rt.object_id = fkc.referenced_object_id "
            "JOIN sys.columns rc ON rc.object_id = fkc.referenced_object_id "
            "AND rc.column_id = fkc.referenced_column_id "
            f"WHERE fk.parent_object_id = OBJECT_ID({self._literal(table)}) "
            "ORDER BY fk.name, fkc.constraint_column_id"
        )
        return build_foreign_keys(rows)
