import pickle
from datetime import date, datetime

import pytest

from sqlweave.results import Row


def test_row_is_an_ordered_mapping():
    row = Row([("id", 1), ("name", "Ann")])
    assert list(row) == ["id", "name"]
    assert row["name"] == "Ann"
    assert row.name == "Ann"
    assert "id" in row
    assert len(row) == 2
    assert row == {"id": 1, "name": "Ann"}
    assert row.to_dict() == {"id": 1, "name": "Ann"}
    assert repr(row) == "Row(id=1, name='Ann')"


def test_row_missing_column_suggests_close_match():
    row = Row({"username": "ann"})
    with pytest.raises(KeyError, match="did you mean 'username'"):
        row["usernme"]
    with pytest.raises(AttributeError, match="usrname"):
        row.usrname


def test_row_is_read_only():
    row = Row({"a": 1})
    with pytest.raises(AttributeError):
        row.a = 2
    with pytest.raises(TypeError):
        row["a"] = 2


def test_row_pickles_by_value():
    row = Row({"a": 1, "b": "x"})
    assert pickle.loads(pickle.dumps(row)) == row


def test_as_datetime_handles_engine_representations():
    row = Row(
        {
            "iso": "2024-01-02 03:04:05",
            "day": date(2024, 1, 2),
            "zero": "0000-00-00 00:00:00",
            "empty": "",
            "none": None,
        }
    )
    assert row.as_datetime("iso") == datetime(2024, 1, 2, 3, 4, 5)
    assert row.as_datetime("iso", "%Y/%m/%d") == "2024/01/02"
    assert row.as_datetime("day") == datetime(2024, 1, 2)
    assert row.as_datetime("zero") is None
    assert row.as_datetime("empty") is None
    assert row.as_datetime("none") is None
