import sqlite3

import pytest

from sqlweave.dialects import SQLiteDialect
from sqlweave.errors import DialectCapabilityError, InvalidArgumentError, ReleasedResourceError
from sqlweave.results import BufferedCursor, Row, StreamingCursor


@pytest.fixture
def native():
    connection = sqlite3.connect(":memory:")
    connection.execute("CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT, avatar BLOB)")
    connection.executemany(
        "INSERT INTO people (name, avatar) VALUES (?, ?)",
        [("ann", b"\x01"), ("bob", None), ("cid", None)],
    )
    yield connection
    connection.close()


def _select(native):
    cursor = native.cursor()
    cursor.execute("SELECT id, name, avatar FROM people ORDER BY id")
    return cursor


def test_buffered_cursor_counts_and_seeks(native):
    cursor = BufferedCursor(_select(native), dialect=SQLiteDialect())
    assert cursor.count() == 3
    assert len(cursor) == 3
    assert cursor.fetch()["name"] == "ann"
    assert cursor.seek(2) is True
    assert cursor.fetch()["name"] == "cid"
    assert cursor.fetch() is None
    assert cursor.seek(0) is True
    assert cursor.fetch()["name"] == "ann"
    assert cursor.seek(3) is False
    assert cursor.seek(-1) is False
    with pytest.raises(InvalidArgumentError):
        cursor.seek("1")
    cursor.free()


def test_streaming_cursor_is_forward_only(native):
    cursor = StreamingCursor(_select(native), dialect=SQLiteDialect())
    with pytest.raises(DialectCapabilityError):
        cursor.count()
    with pytest.raises(DialectCapabilityError):
        cursor.seek(0)
    assert [row["name"] for row in cursor] == ["ann", "bob", "cid"]
    assert cursor.fetch() is None
    assert not cursor.is_freed
    cursor.free()


@pytest.mark.parametrize("cursor_cls", [BufferedCursor, StreamingCursor])
def test_free_is_idempotent_and_blocks_reads(native, cursor_cls):
    cursor = cursor_cls(_select(native), dialect=SQLiteDialect())
    cursor.free()
    cursor.free()
    assert cursor.is_freed
    assert cursor.get_result_resource() is None
    with pytest.raises(ReleasedResourceError):
        cursor.fetch()
    with pytest.raises(ReleasedResourceError):
        cursor.fetch_all()


@pytest.mark.parametrize("cursor_cls", [BufferedCursor, StreamingCursor])
def test_count_and_seek_after_free_raise(native, cursor_cls):
    cursor = cursor_cls(_select(native), dialect=SQLiteDialect())
    cursor.free()
    with pytest.raises(ReleasedResourceError):
        cursor.count()
    with pytest.raises(ReleasedResourceError):
        cursor.seek(0)


@pytest.mark.parametrize("cursor_cls", [BufferedCursor, StreamingCursor])
def test_cursors_convert_to_lists(native, cursor_cls):
    with cursor_cls(_select(native), dialect=SQLiteDialect()) as cursor:
        rows = list(cursor)
    assert [row["name"] for row in rows] == ["ann", "bob", "cid"]


def test_streaming_cursor_has_no_len(native):
    with StreamingCursor(_select(native), dialect=SQLiteDialect()) as cursor:
        with pytest.raises(TypeError):
            len(cursor)
        newest_first = sorted(cursor, key=lambda row: row["id"], reverse=True)
    assert [row["name"] for row in newest_first] == ["cid", "bob", "ann"]


def test_context_manager_frees_on_error(native):
    cursor = BufferedCursor(_select(native), dialect=SQLiteDialect())
    with pytest.raises(RuntimeError):
        with cursor:
            cursor.fetch()
            raise RuntimeError("boom")
    assert cursor.is_freed


def test_fetch_helpers(native):
    with BufferedCursor(_select(native), dialect=SQLiteDialect()) as cursor:
        assert cursor.fetch_single() == 1
        cursor.seek(0)
        assert cursor.fetch(assoc=False) == (1, "ann", b"\x01")
        cursor.seek(0)
        assert cursor.fetch_pairs("id", "name") == {1: "ann", 2: "bob", 3: "cid"}
        cursor.seek(0)
        rows = cursor.fetch_all()
        assert all(isinstance(row, Row) for row in rows)
        assert rows[1] == {"id": 2, "name": "bob", "avatar": None}


def test_result_columns_come_from_description(native):
    with StreamingCursor(_select(native), dialect=SQLiteDialect()) as cursor:
        assert cursor.column_names == ["id", "name", "avatar"]
        assert [column.name for column in cursor.get_result_columns()] == ["id", "name", "avatar"]


class _ClosingCursor:
    description = (("data", None, None, None, None, None, None),)

    def __init__(self, rows):
        self.rows = list(rows)
        self.closed = 0

    def fetchall(self):
        return self.rows

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None

    def close(self):
        self.closed += 1


def test_free_closes_native_handle_once_and_unescapes_binary():
    native = _ClosingCursor([(memoryview(b"\x00\x01"),)])
    cursor = BufferedCursor(native, dialect=SQLiteDialect())
    assert cursor.fetch_single() == b"\x00\x01"
    cursor.free()
    cursor.free()
    assert native.closed == 1


def test_cursors_hold_independent_handles():
    first = _ClosingCursor([(1,)])
    second = _ClosingCursor([(2,)])
    a = StreamingCursor(first, dialect=SQLiteDialect())
    b = StreamingCursor(second, dialect=SQLiteDialect())
    a.free()
    assert second.closed == 0
    assert b.fetch_single() == 2
