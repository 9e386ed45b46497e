from datetime import datetime, timedelta, timezone

from sqlweave.dialects import PostgresDialect


def test_postgres_dialect_quotes_identifiers():
    dialect = PostgresDialect()
    assert dialect.escape_identifier('table"name') == '"table""name"'
    assert dialect.format_table("public.users") == '"public"."users"'


def test_postgres_text_switches_to_escape_string_for_backslashes():
    dialect = PostgresDialect()
    assert dialect.escape_text("it's") == "'it''s'"
    assert dialect.escape_text("a\\b'c") == "E'a\\\\b''c'"


def test_postgres_binary_bool_and_interval():
    dialect = PostgresDialect()
    assert dialect.escape_binary(b"\x00\xff") == "decode('00ff', 'hex')"
    assert dialect.escape_bool(True) == "TRUE"
    assert dialect.escape_bool(False) == "FALSE"
    assert (
        dialect.escape_interval(timedelta(days=1, seconds=30, microseconds=5))
        == "INTERVAL '1 days 30 seconds 5 microseconds'"
    )


def test_postgres_datetime_keeps_utc_offset():
    dialect = PostgresDialect()
    value = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone(timedelta(hours=-5)))
    assert dialect.escape_datetime(value) == "'2024-01-02 03:04:05-05:00'"


def test_postgres_like_uses_escape_string():
    dialect = PostgresDialect()
    assert dialect.escape_like("a_b", 1) == "E'a\\\\_b%' ESCAPE E'\\\\'"


def test_postgres_dialect_limit_clause():
    dialect = PostgresDialect()
    assert dialect.limit_clause(10, None) == "LIMIT 10"
    assert dialect.limit_clause(None, 5) == "OFFSET 5"
    assert dialect.apply_limit("SELECT 1", 10, 5) == "SELECT 1 LIMIT 10 OFFSET 5"


def test_postgres_numeric_server_version():
    assert PostgresDialect(150004).version == (15, 4)
    assert PostgresDialect("16.2").version == (16, 2)
