"""
Translator turning mixed argument sequences into dialect SQL.

Arguments are consumed left to right. A ``str`` is trusted SQL unless the
previous fragment ended with a ``%modifier`` token, in which case it is the
value for that modifier. Every other argument is a value whose kind is
either explicit (``ParameterValue``), named by the pending modifier, or
inferred from its Python type::

    translator.translate([
        "SELECT * FROM :prefix:users WHERE name = %s", name,
        "AND id %in", [1, 2, 3],
        "%lmt", 10,
    ])
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Sequence

from ..dialects.base import Dialect
from ..errors import TranslationError
from ..parameters import ParameterKind, ParameterValue, identifier, infer
from .substitutions import Substitutions
from .unit import Literal, Parameter, Segment, TranslationUnit, UnitBuilder

_SCALAR_KINDS: dict[str, ParameterKind] = {
    "s": ParameterKind.TEXT,
    "sN": ParameterKind.TEXT,
    "ascii": ParameterKind.ASCII_TEXT,
    "bin": ParameterKind.BINARY,
    "b": ParameterKind.BOOLEAN,
    "i": ParameterKind.INTEGER,
    "iN": ParameterKind.INTEGER,
    "f": ParameterKind.NUMERIC,
    "d": ParameterKind.DATE,
    "dt": ParameterKind.DATETIME,
    "t": ParameterKind.DATETIME,
    "di": ParameterKind.INTERVAL,
}

_LIKE_POSITIONS: dict[str, int] = {"like~": 1, "~like": -1, "~like~": 0}

_STRUCTURAL = frozenset({"n", "sql", "in", "l", "a", "v", "m", "and", "or", "by", "lmt", "ofs"})

MODIFIERS = frozenset(_SCALAR_KINDS) | frozenset(_LIKE_POSITIONS) | _STRUCTURAL

_MODIFIER_RE = re.compile(
    r"""'(?:[^']|'')*'"""
    r'|"(?:[^"]|"")*"'
    r"""|%(?P<modifier>~?like~?|[A-Za-z]+)"""
)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, _SEQUENCE_TYPES)


class Translator:
    """
    Builds translation units for one dialect and substitution table.
    """

    def __init__(self, dialect: Dialect, substitutions: Substitutions | None = None) -> None:
        self.dialect = dialect
        self.substitutions = substitutions if substitutions is not None else Substitutions()

    def translate(self, args: Sequence[Any]) -> str:
        return self.parse(args).render(self.dialect)

    # ------------------------------------------------------------------ #
    # Argument scanning
    # ------------------------------------------------------------------ #
    def parse(self, args: Sequence[Any]) -> TranslationUnit:
        if isinstance(args, (str, bytes)) or not isinstance(args, Iterable):
            raise TranslationError("Arguments must be a sequence of SQL fragments and values.")
        builder = UnitBuilder()
        # (modifier, text following it) slots still waiting for a value
        slots: deque[tuple[str, str]] = deque()
        slot_position = 0
        slot_fragment: Any = None

        for position, arg in enumerate(args):
            builder.position = position
            try:
                if slots:
                    modifier, tail = slots.popleft()
                    self._format(builder, arg, modifier)
                    builder.literal(self.substitutions.apply(tail))
                    continue
                builder.separate()
                if isinstance(arg, str):
                    head, found = self._split_modifiers(arg)
                    builder.literal(self.substitutions.apply(head))
                    slots.extend(found)
                    slot_position = position
                    slot_fragment = arg
                elif isinstance(arg, ParameterValue):
                    builder.parameter(arg)
                else:
                    self._format(builder, arg, None)
            except TranslationError as exc:
                if exc.position is not None:
                    raise
                raise exc.at(position, arg) from exc

        if slots:
            raise TranslationError(
                f"Modifier %{slots[0][0]} has no value.", position=slot_position, value=slot_fragment
            )
        return builder.build()

    @staticmethod
    def _split_modifiers(fragment: str) -> tuple[str, list[tuple[str, str]]]:
        """
        Split ``"a = %i AND b = %s"`` into ``"a = "`` and ``[("i", " AND b = "), ("s", "")]``.

        Modifier tokens inside quoted literals are ignored.
        """

        head: str | None = None
        slots: list[tuple[str, str]] = []
        modifier: str | None = None
        start = 0
        for match in _MODIFIER_RE.finditer(fragment):
            token = match.group("modifier")
            if token is None:
                continue
            if token not in MODIFIERS:
                raise TranslationError(f"Unknown modifier %{token}.")
            text = fragment[start : match.start()]
            if head is None:
                head = text
            else:
                slots.append((modifier, text))
            modifier = token
            start = match.end()
        if head is None:
            return fragment, []
        slots.append((modifier, fragment[start:]))
        return head, slots

    # ------------------------------------------------------------------ #
    # Value formatting
    # ------------------------------------------------------------------ #
    def _format(self, builder: UnitBuilder, value: Any, modifier: str | None) -> None:
        if isinstance(value, ParameterValue):
            if modifier is not None:
                raise TranslationError(
                    f"Modifier %{modifier} cannot be applied to a ParameterValue; it carries its own kind."
                )
            builder.parameter(value)
            return

        if modifier is None:
            if isinstance(value, Mapping):
                builder.extend(self._assignments(value))
            elif _is_sequence(value):
                builder.extend(self._value_list(value))
            else:
                builder.extend(self._scalar(value, None))
            return

        handler = self._structural_handlers().get(modifier)
        if handler is not None:
            handler(builder, value)
            return

        if _is_sequence(value):
            builder.extend(self._joined(value, modifier))
        else:
            builder.extend(self._scalar(value, modifier))

    def _structural_handlers(self) -> dict[str, Callable[[UnitBuilder, Any], None]]:
        return {
            "n": lambda b, v: b.extend(self._identifiers(v)),
            "sql": lambda b, v: b.literal(self._raw_sql(v)),
            "in": lambda b, v: b.extend(self._value_list(v)),
            "l": lambda b, v: b.extend(self._value_list(v)),
            "a": lambda b, v: b.extend(self._assignments(v)),
            "v": lambda b, v: b.extend(self._values(v)),
            "m": lambda b, v: b.extend(self._multi_values(v)),
            "and": lambda b, v: b.extend(self._conditions(v, "AND")),
            "or": lambda b, v: b.extend(self._conditions(v, "OR")),
            "by": lambda b, v: b.extend(self._order_by(v)),
            "lmt": lambda b, v: setattr(b, "limit", self._bound(v, "%lmt")),
            "ofs": lambda b, v: setattr(b, "offset", self._bound(v, "%ofs")),
        }

    def _scalar(self, value: Any, modifier: str | None) -> list[Segment]:
        """
        Segments for one value; strings are text here, never SQL.
        """

        if isinstance(value, ParameterValue):
            if modifier is not None:
                raise TranslationError(
                    f"Modifier %{modifier} cannot be applied to a ParameterValue.", value=value
                )
            return [Parameter(value)]
        if modifier is None:
            if isinstance(value, Mapping) or _is_sequence(value):
                raise TranslationError("Nested collections need an explicit modifier.", value=value)
            return [Parameter(infer(value))]
        if modifier in _LIKE_POSITIONS:
            if value is not None and not isinstance(value, str):
                raise TranslationError(
                    f"Modifier %{modifier} expects str, got {type(value).__name__}.", value=value
                )
            return [Parameter(ParameterValue(ParameterKind.TEXT, value), like=_LIKE_POSITIONS[modifier])]
        if modifier == "n":
            return self._identifier_segments(value)
        kind = _SCALAR_KINDS.get(modifier)
        if kind is None:
            raise TranslationError(f"Modifier %{modifier} cannot be used for a single value.", value=value)
        if modifier.endswith("N") and value == "":
            value = None
        try:
            return [Parameter(ParameterValue(kind, value))]
        except TranslationError as exc:
            raise TranslationError(f"Modifier %{modifier}: {exc.message}", value=value) from exc

    def _joined(self, values: Iterable[Any], modifier: str | None) -> list[Segment]:
        segments: list[Segment] = []
        for index, item in enumerate(values):
            if index:
                segments.append(Literal(", "))
            segments.extend(self._scalar(item, modifier))
        return segments

    def _value_list(self, values: Any) -> list[Segment]:
        if not _is_sequence(values):
            raise TranslationError(
                f"Expected a list of values, got {type(values).__name__}.", value=values
            )
        if not values:
            raise TranslationError("Value list cannot be empty.", value=values)
        return [Literal("("), *self._joined(values, None), Literal(")")]

    # ------------------------------------------------------------------ #
    # Identifiers
    # ------------------------------------------------------------------ #
    def _identifier_segments(self, name: Any) -> list[Segment]:
        if not isinstance(name, str):
            raise TranslationError(
                f"Identifier must be str, got {type(name).__name__}.", value=name
            )
        name = self.substitutions.apply(name)
        segments: list[Segment] = []
        for index, part in enumerate(name.split(".")):
            if index:
                segments.append(Literal("."))
            if part == "*":
                segments.append(Literal("*"))
            else:
                segments.append(Parameter(identifier(part)))
        return segments

    def _identifiers(self, value: Any) -> list[Segment]:
        if isinstance(value, Mapping):
            if not value:
                raise TranslationError("Identifier mapping cannot be empty.", value=value)
            segments: list[Segment] = []
            for index, (name, alias) in enumerate(value.items()):
                if index:
                    segments.append(Literal(", "))
                segments.extend(self._identifier_segments(name))
                segments.append(Literal(" AS "))
                segments.append(Parameter(identifier(alias)))
            return segments
        if _is_sequence(value):
            if not value:
                raise TranslationError("Identifier list cannot be empty.", value=value)
            return self._joined(value, "n")
        return self._identifier_segments(value)

    def _column(self, key: Any) -> tuple[list[Segment], str | None]:
        if not isinstance(key, str):
            raise TranslationError(f"Column names must be str, got {type(key).__name__}.", value=key)
        column, modifier = key, None
        if "%" in key:
            column, _, suffix = key.rpartition("%")
            if suffix not in _SCALAR_KINDS and suffix not in _LIKE_POSITIONS and suffix != "sql":
                raise TranslationError(f"Unknown modifier %{suffix} in key {key!r}.", value=key)
            modifier = suffix
        return self._identifier_segments(column), modifier

    def _keyed_value(self, value: Any, modifier: str | None) -> list[Segment]:
        if modifier == "sql":
            return [Literal(self._raw_sql(value))]
        return self._scalar(value, modifier)

    # ------------------------------------------------------------------ #
    # Structures
    # ------------------------------------------------------------------ #
    def _require_mapping(self, value: Any, label: str) -> Mapping[str, Any]:
        if not isinstance(value, Mapping):
            raise TranslationError(f"{label} expects a mapping, got {type(value).__name__}.", value=value)
        if not value:
            raise TranslationError(f"{label} mapping cannot be empty.", value=value)
        return value

    def _assignments(self, value: Any) -> list[Segment]:
        mapping = self._require_mapping(value, "%a")
        segments: list[Segment] = []
        for index, (key, item) in enumerate(mapping.items()):
            if index:
                segments.append(Literal(", "))
            column, modifier = self._column(key)
            segments.extend(column)
            segments.append(Literal(" = "))
            segments.extend(self._keyed_value(item, modifier))
        return segments

    def _values(self, value: Any) -> list[Segment]:
        mapping = self._require_mapping(value, "%v")
        columns: list[Segment] = [Literal("(")]
        values: list[Segment] = [Literal("(")]
        for index, (key, item) in enumerate(mapping.items()):
            if index:
                columns.append(Literal(", "))
                values.append(Literal(", "))
            column, modifier = self._column(key)
            columns.extend(column)
            values.extend(self._keyed_value(item, modifier))
        return [*columns, Literal(") VALUES "), *values, Literal(")")]

    def _multi_values(self, rows: Any) -> list[Segment]:
        if isinstance(rows, Mapping) or not _is_sequence(rows) or isinstance(rows, (set, frozenset)):
            raise TranslationError("%m expects a list of row mappings.", value=rows)
        if not rows:
            raise TranslationError("No rows to insert.", value=rows)
        first = self._require_mapping(rows[0], "%m")
        keys = list(first.keys())
        parsed = [self._column(key) for key in keys]

        segments: list[Segment] = [Literal("(")]
        for index, (column, _modifier) in enumerate(parsed):
            if index:
                segments.append(Literal(", "))
            segments.extend(column)
        segments.append(Literal(") VALUES "))

        for row_index, row in enumerate(rows):
            row = self._require_mapping(row, "%m")
            if set(row.keys()) != set(keys):
                raise TranslationError(
                    f"Row {row_index} columns differ from the first row.", value=row
                )
            if row_index:
                segments.append(Literal(", "))
            segments.append(Literal("("))
            for index, key in enumerate(keys):
                if index:
                    segments.append(Literal(", "))
                segments.extend(self._keyed_value(row[key], parsed[index][1]))
            segments.append(Literal(")"))
        return segments

    def _conditions(self, value: Any, operator: str) -> list[Segment]:
        mapping = self._require_mapping(value, f"%{operator.lower()}")
        segments: list[Segment] = []
        for index, (key, item) in enumerate(mapping.items()):
            if index:
                segments.append(Literal(f" {operator} "))
            column, modifier = self._column(key)
            segments.extend(column)
            if item is None:
                segments.append(Literal(" IS NULL"))
            elif _is_sequence(item):
                if not item:
                    raise TranslationError(f"IN list for {key!r} cannot be empty.", value=item)
                segments.append(Literal(" IN ("))
                segments.extend(self._joined(item, modifier))
                segments.append(Literal(")"))
            elif modifier in _LIKE_POSITIONS:
                segments.append(Literal(" LIKE "))
                segments.extend(self._scalar(item, modifier))
            else:
                segments.append(Literal(" = "))
                segments.extend(self._keyed_value(item, modifier))
        if operator == "OR" and len(mapping) > 1:
            return [Literal("("), *segments, Literal(")")]
        return segments

    def _order_by(self, value: Any) -> list[Segment]:
        if _is_sequence(value):
            if not value:
                raise TranslationError("ORDER BY list cannot be empty.", value=value)
            return self._joined(value, "n")
        mapping = self._require_mapping(value, "%by")
        segments: list[Segment] = []
        for index, (key, direction) in enumerate(mapping.items()):
            if index:
                segments.append(Literal(", "))
            segments.extend(self._identifier_segments(key))
            segments.append(Literal(" " + self._direction(direction)))
        return segments

    @staticmethod
    def _direction(direction: Any) -> str:
        if isinstance(direction, str) and direction.upper() in ("ASC", "DESC"):
            return direction.upper()
        if isinstance(direction, int) and not isinstance(direction, bool) and direction != 0:
            return "ASC" if direction > 0 else "DESC"
        raise TranslationError(f"Invalid sort direction {direction!r}.", value=direction)

    def _raw_sql(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TranslationError(f"%sql expects str, got {type(value).__name__}.", value=value)
        return self.substitutions.apply(value)

    @staticmethod
    def _bound(value: Any, label: str) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise TranslationError(f"{label} expects int, got {type(value).__name__}.", value=value)
        return value


def translate(
    args: Sequence[Any], dialect: Dialect, substitutions: Substitutions | None = None
) -> str:
    return Translator(dialect, substitutions).translate(args)
