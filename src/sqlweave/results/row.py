"""
Result rows: ordered, immutable column-to-value snapshots.
"""

from __future__ import annotations

import difflib
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Iterable, Iterator


def _missing_column_message(key: Any, names: Iterable[str]) -> str:
    names = [name for name in names if isinstance(name, str)]
    hint = difflib.get_close_matches(str(key), names, n=1, cutoff=0.6)
    if hint:
        return f"Attempt to read missing column '{key}', did you mean '{hint[0]}'?"
    return f"Attempt to read missing column '{key}'."


class Row(Mapping):
    """
    One fetched record.

    Columns are reachable by key (``row["name"]``) and by attribute
    (``row.name``). Reading a column that is not present raises
    ``KeyError``/``AttributeError`` with a suggestion for a close match.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        object.__setattr__(self, "_data", dict(data))

    def __getitem__(self, key: str) -> Any:
        try:
            return self._data[key]
        except KeyError:
            raise KeyError(_missing_column_message(key, self._data)) from None

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(_missing_column_message(name, self._data)) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Row objects are read-only.")

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Row):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self._data.items())
        return f"Row({fields})"

    def __getstate__(self) -> dict[str, Any]:
        return dict(self._data)

    def __setstate__(self, state: dict[str, Any]) -> None:
        object.__setattr__(self, "_data", dict(state))

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def as_datetime(self, key: str, fmt: str | None = None) -> datetime | str | None:
        """
        Read ``key`` as a datetime; empty and zero dates (``0000-00-00``) give ``None``.
        """

        value = self[key]
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            moment = datetime(value.year, value.month, value.day)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            moment = datetime.fromtimestamp(value)
        elif not value or str(value).startswith("000"):
            return None
        else:
            moment = datetime.fromisoformat(str(value))
        if fmt is None:
            return moment
        return moment.strftime(fmt)
