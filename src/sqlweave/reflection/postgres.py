"""
PostgreSQL schema reflection through ``information_schema`` and ``pg_catalog``.
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

_FK_ACTIONS = {
    "a": "NO ACTION",
    "r": "RESTRICT",
    "c": "CASCADE",
    "n": "SET NULL",
    "d": "SET DEFAULT",
}


class PostgresReflector(DriverReflector):
    def _schema_and_name(self, table: str) -> tuple[str, str]:
        """
        ``schema.table`` pins the schema; a bare name uses ``current_schema()``.
        """

        if "." in table:
            schema, name = table.split(".", 1)
            return self._literal(schema), self._literal(name)
        return "current_schema()", self._literal(table)

    def get_tables(self) -> list[TableInfo]:
        rows = self._rows(
            "SELECT table_name, table_type FROM information_schema.tables "
            "WHERE table_schema = current_schema() ORDER BY table_name"
        )
        return [TableInfo(name=row["table_name"], is_view=row["table_type"] == "VIEW") for row in rows]

    def get_columns(self, table: str) -> list[ColumnInfo]:
        schema, name = self._schema_and_name(table)
        rows = self._rows(
            "SELECT column_name, data_type, udt_name, character_maximum_length, "
            "numeric_precision, is_nullable, column_default, is_identity "
            "FROM information_schema.columns "
            f"WHERE table_schema = {schema} AND table_name = {name} "
            "ORDER BY ordinal_position"
        )
        columns = []
        for row in rows:
            default = row["column_default"]
            autoincrement = row["is_identity"] == "YES" or (
                isinstance(default, str) and default.startswith("nextval(")
            )
            columns.append(
                ColumnInfo(
                    name=row["column_name"],
                    native_type=str(row["udt_name"]).upper(),
                    table=table,
                    full_name=f"{table}.{row['column_name']}",
                    size=row["character_maximum_length"] or row["numeric_precision"],
                    nullable=row["is_nullable"] == "YES",
                    default=None if autoincrement else default,
                    autoincrement=autoincrement,
                    vendor={"data_type": row["data_type"]},
                )
            )
        return columns

    def get_indexes(self, table: str) -> list[IndexInfo]:
        schema, name = self._schema_and_name(table)
        rows = self._rows(
            "SELECT ci.relname AS index_name, a.attname AS column_name, "
            "i.indisunique AS is_unique, i.indisprimary AS is_primary "
            "FROM pg_class c "
            "JOIN pg_namespace n ON n.oid = c.relnamespace "
            "JOIN pg_index i ON i.indrelid = c.oid "
            "JOIN pg_class ci ON ci.oid = i.indexrelid "
            "JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum = ANY(i.indkey) "
            f"WHERE n.nspname = {schema} AND c.relname = {name} "
            "ORDER BY ci.relname, array_position(i.indkey::int2[], a.attnum)"
        )
        return build_indexes(rows)

    def get_foreign_keys(self, table: str) -> list[ForeignKeyInfo]:
        schema, name = self._schema_and_name(table)
        rows = self._rows(
            "SELECT con.conname AS constraint_name, att.attname AS column_name, "
            "ref.relname AS referenced_table, ratt.attname AS referenced_column, "
            "con.confdeltype AS on_delete, con.confupdtype AS on_update "
            "FROM pg_constraint con "
            "JOIN pg_class cl ON cl.oid = con.conrelid "
            "JOIN pg_namespace n ON n.oid = cl.relnamespace "
            "JOIN pg_class ref ON ref.oid = con.confrelid "
            "CROSS JOIN LATERAL unnest(con.conkey, con.confkey) WITH ORDINALITY AS k(attnum, refnum, ord) "
            "JOIN pg_attribute att ON att.attrelid = con.conrelid AND att.attnum = k.attnum "
            "JOIN pg_attribute ratt ON ratt.attrelid = con.confrelid AND ratt.attnum = k.refnum "
            f"WHERE con.contype = 'f' AND n.nspname = {schema} AND cl.relname = {name} "
            "ORDER BY con.conname, k.ord"
        )
        normalized = [
            dict(
                row.to_dict(),
                on_delete=_FK_ACTIONS.get(row["on_delete"], row["on_delete"]),
                on_update=_FK_ACTIONS.get(row["on_update"], row["on_update"]),
            )
            for row in rows
        ]
        return build_foreign_keys(normalized)
