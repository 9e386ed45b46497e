import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from sqlweave.dialects import SQLiteDialect
from sqlweave.errors import DialectCapabilityError, InvalidArgumentError, TranslationError
from sqlweave.parameters import ParameterKind, ParameterValue, boolean


def test_sqlite_text_doubles_quotes():
    dialect = SQLiteDialect()
    assert dialect.escape_text("it's") == "'it''s'"
    with pytest.raises(TranslationError):
        dialect.escape_text("a\x00b")


@pytest.mark.parametrize("value", ["plain", "it's", "a''b", "back\\slash", "'';--", "üñí"])
def test_sqlite_text_round_trips_through_engine(value):
    dialect = SQLiteDialect()
    connection = sqlite3.connect(":memory:")
    try:
        assert connection.execute(f"SELECT {dialect.escape_text(value)}").fetchone()[0] == value
    finally:
        connection.close()


def test_sqlite_binary_identifier_and_bool():
    dialect = SQLiteDialect()
    assert dialect.escape_binary(b"\x00\xff") == "X'00ff'"
    assert dialect.escape_identifier('a"b') == '"a""b"'
    assert dialect.render(boolean(True)) == "1"
    assert dialect.render(ParameterValue(ParameterKind.TEXT, None)) == "NULL"


def test_sqlite_datetime_and_capability_errors():
    dialect = SQLiteDialect()
    assert dialect.escape_datetime(datetime(2024, 1, 2, 3, 4, 5, 123456)) == "'2024-01-02 03:04:05.123456'"
    with pytest.raises(DialectCapabilityError):
        dialect.escape_datetime(datetime(2024, 1, 2, tzinfo=timezone.utc))
    with pytest.raises(DialectCapabilityError):
        dialect.escape_interval(timedelta(days=1))


def test_sqlite_like_escapes_wildcards():
    dialect = SQLiteDialect()
    assert dialect.escape_like("50%_off", 0) == "'%50\\%\\_off%' ESCAPE '\\'"
    assert dialect.escape_like("ab", 1) == "'ab%' ESCAPE '\\'"
    assert dialect.escape_like("ab", -1) == "'%ab' ESCAPE '\\'"


def test_sqlite_like_pattern_matches_literally():
    dialect = SQLiteDialect()
    connection = sqlite3.connect(":memory:")
    try:
        connection.execute("CREATE TABLE t (v TEXT)")
        connection.executemany("INSERT INTO t VALUES (?)", [("50%_off",), ("50xyoff",)])
        rows = connection.execute(f"SELECT v FROM t WHERE v LIKE {dialect.escape_like('%_', 0)}").fetchall()
    finally:
        connection.close()
    assert rows == [("50%_off",)]


def test_sqlite_limit_offset():
    dialect = SQLiteDialect()
    assert dialect.apply_limit("SELECT 1", 10, None) == "SELECT 1 LIMIT 10"
    assert dialect.apply_limit("SELECT 1", None, 5) == "SELECT 1 LIMIT -1 OFFSET 5"
    assert dialect.apply_limit("SELECT 1", 10, 5) == "SELECT 1 LIMIT 10 OFFSET 5"
    assert dialect.apply_limit("SELECT 1", None, None) == "SELECT 1"
    with pytest.raises(InvalidArgumentError):
        dialect.apply_limit("SELECT 1", -1, None)
