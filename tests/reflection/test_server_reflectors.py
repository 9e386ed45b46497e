import pytest

from sqlweave.dialects import MySQLDialect, PostgresDialect, SQLServerDialect
from sqlweave.reflection import (
    ColumnInfo,
    ForeignKeyInfo,
    IndexInfo,
    MySQLReflector,
    PostgresReflector,
    SQLServerReflector,
    TableInfo,
)
from sqlweave.reflection.base import build_indexes, split_native_type
from sqlweave.results import BufferedCursor


class FakeDriver:
    """Answers each statement from canned ``(needle, column_names, rows)`` responses."""

    def __init__(self, dialect, *responses):
        self.dialect = dialect
        self.responses = responses
        self.statements = []
        self.cursors = []

    def execute(self, sql):
        self.statements.append(sql)
        for needle, names, rows in self.responses:
            if needle in sql:
                cursor = BufferedCursor(
                    None, dialect=self.dialect, rows=rows, columns=[ColumnInfo(name) for name in names]
                )
                self.cursors.append(cursor)
                return cursor
        return None


@pytest.mark.parametrize(
    "declared, expected",
    [
        ("varchar(255)", ("VARCHAR", 255)),
        ("DECIMAL(10,2)", ("DECIMAL", 10)),
        ("int(10) unsigned", ("INT UNSIGNED", 10)),
        ("text", ("TEXT", None)),
        ("", (None, None)),
        (None, (None, None)),
    ],
)
def test_split_native_type(declared, expected):
    assert split_native_type(declared) == expected


def test_build_indexes_groups_columns_in_order():
    rows = [
        {"index_name": "pk", "column_name": "a", "is_unique": 1, "is_primary": 1},
        {"index_name": "pk", "column_name": "b", "is_unique": 1, "is_primary": 1},
        {"index_name": "ix", "column_name": "c", "is_unique": 0, "is_primary": 0},
    ]
    assert build_indexes(rows) == [
        IndexInfo("pk", ("a", "b"), unique=True, primary=True),
        IndexInfo("ix", ("c",)),
    ]


def test_postgres_reflector():
    driver = FakeDriver(
        PostgresDialect((15, 4)),
        ("information_schema.tables", ["table_name", "table_type"], [("users", "BASE TABLE"), ("v", "VIEW")]),
        (
            "information_schema.columns",
            [
                "column_name",
                "data_type",
                "udt_name",
                "character_maximum_length",
                "numeric_precision",
                "is_nullable",
                "column_default",
                "is_identity",
            ],
            [
                ("id", "integer", "int4", None, 32, "NO", "nextval('users_id_seq'::regclass)", "NO"),
                ("name", "character varying", "varchar", 80, None, "YES", "'anon'::character varying", "NO"),
            ],
        ),
        (
            "FROM pg_class c",
            ["index_name", "column_name", "is_unique", "is_primary"],
            [("users_pkey", "id", True, True), ("users_name_idx", "name", False, False)],
        ),
        (
            "FROM pg_constraint con",
            ["constraint_name", "column_name", "referenced_table", "referenced_column", "on_delete", "on_update"],
            [("users_team_fk", "team_id", "teams", "id", "c", "a")],
        ),
    )
    reflector = PostgresReflector(driver)

    assert reflector.get_tables() == [TableInfo("users"), TableInfo("v", is_view=True)]

    id_column, name_column = reflector.get_columns("public.users")
    assert "table_schema = 'public' AND table_name = 'users'" in driver.statements[-1]
    assert (id_column.native_type, id_column.size, id_column.autoincrement, id_column.default) == (
        "INT4",
        32,
        True,
        None,
    )
    assert (name_column.size, name_column.nullable, name_column.default) == (
        80,
        True,
        "'anon'::character varying",
    )

    assert reflector.get_indexes("users")[0] == IndexInfo("users_pkey", ("id",), unique=True, primary=True)
    assert "n.nspname = current_schema()" in driver.statements[-1]

    assert reflector.get_foreign_keys("users") == [
        ForeignKeyInfo("users_team_fk", ("team_id",), "teams", ("id",), on_delete="CASCADE", on_update="NO ACTION")
    ]
    assert all(cursor.is_freed for cursor in driver.cursors)


def test_mysql_reflector():
    driver = FakeDriver(
        MySQLDialect((8, 0)),
        ("SHOW FULL TABLES", ["Tables_in_app", "Table_type"], [("orders", "BASE TABLE")]),
        (
            "SHOW FULL COLUMNS",
            ["Field", "Type", "Collation", "Null", "Key", "Default", "Extra", "Privileges", "Comment"],
            [
                ("id", "int unsigned", None, "NO", "PRI", None, "auto_increment", "select", ""),
                ("note", "varchar(40)", "utf8mb4_general_ci", "YES", "", None, "", "select", "free text"),
            ],
        ),
        (
            "SHOW INDEX",
            ["Table", "Non_unique", "Key_name", "Seq_in_index", "Column_name"],
            [
                ("orders", 1, "idx_note", 1, "note"),
                ("orders", 0, "PRIMARY", 1, "id"),
            ],
        ),
        (
            "KEY_COLUMN_USAGE",
            ["constraint_name", "column_name", "referenced_table", "referenced_column", "on_delete", "on_update"],
            [("fk_customer", "customer_id", "customers", "id", "SET NULL", "RESTRICT")],
        ),
    )
    reflector = MySQLReflector(driver)

    assert reflector.get_tables() == [TableInfo("orders")]

    id_column, note = reflector.get_columns("orders")
    assert (id_column.native_type, id_column.autoincrement, id_column.nullable) == ("INT UNSIGNED", True, False)
    assert (note.native_type, note.size, note.vendor["comment"]) == ("VARCHAR", 40, "free text")

    assert reflector.get_indexes("orders") == [
        IndexInfo("PRIMARY", ("id",), unique=True, primary=True),
        IndexInfo("idx_note", ("note",)),
    ]
    assert reflector.get_foreign_keys("orders")[0].on_delete == "SET NULL"
    assert "kcu.TABLE_NAME = 'orders'" in driver.statements[-1]


def test_sqlserver_reflector():
    driver = FakeDriver(
        SQLServerDialect((15,)),
        ("INFORMATION_SCHEMA.TABLES", ["table_name", "table_type"], [("items", "BASE TABLE")]),
        (
            "INFORMATION_SCHEMA.COLUMNS",
            [
                "column_name",
                "data_type",
                "max_length",
                "numeric_precision",
                "is_nullable",
                "column_default",
                "is_identity",
            ],
            [
                ("id", "int", None, 10, "NO", None, 1),
                ("body", "nvarchar", -1, None, "YES", None, 0),
            ],
        ),
        (
            "sys.indexes",
            ["index_name", "column_name", "is_unique", "is_primary"],
            [("PK_items", "id", True, True)],
        ),
        (
            "sys.foreign_keys",
            ["constraint_name", "column_name", "referenced_table", "referenced_column", "on_delete", "on_update"],
            [("FK_items_owner", "owner_id", "owners", "id", "SET_NULL", "NO_ACTION")],
        ),
    )
    reflector = SQLServerReflector(driver)

    assert reflector.get_tables() == [TableInfo("items")]
    id_column, body = reflector.get_columns("items")
    assert (id_column.size, id_column.autoincrement) == (10, True)
    assert (body.native_type, body.size, body.vendor) == ("NVARCHAR", None, {"max": True})
    assert "c.TABLE_NAME = N'items'" in driver.statements[-1]
    assert reflector.get_indexes("items") == [IndexInfo("PK_items", ("id",), unique=True, primary=True)]
    assert reflector.get_foreign_keys("items") == [
        ForeignKeyInfo("FK_items_owner", ("owner_id",), "owners", ("id",), on_delete="SET NULL", on_update="NO ACTION")
    ]
