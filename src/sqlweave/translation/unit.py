"""
Translation units: ordered literal and parameter segments awaiting a dialect.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, Union

from ..dialects.base import NULL, Dialect
from ..errors import ArgumentError
from ..parameters import ParameterValue


@dataclass(frozen=True)
class Literal:
    """Trusted SQL text, emitted verbatim."""

    text: str


@dataclass(frozen=True)
class Parameter:
    """
    A value rendered by the dialect.

    ``like`` holds the LIKE wildcard position (see ``Dialect.escape_like``)
    when the value is a pattern rather than a plain literal. ``position`` is
    the index of the argument the value came from.
    """

    value: ParameterValue
    like: int | None = None
    position: int | None = field(default=None, compare=False)

    def render(self, dialect: Dialect) -> str:
        if self.like is not None:
            if self.value.value is None:
                return NULL
            return dialect.escape_like(self.value.value, self.like)
        return dialect.render(self.value)


Segment = Union[Literal, Parameter]


@dataclass(frozen=True)
class TranslationUnit:
    segments: tuple[Segment, ...]
    limit: int | None = None
    offset: int | None = None

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def parameters(self) -> tuple[ParameterValue, ...]:
        return tuple(seg.value for seg in self.segments if isinstance(seg, Parameter))

    def render(self, dialect: Dialect) -> str:
        parts = []
        for segment in self.segments:
            if isinstance(segment, Literal):
                parts.append(segment.text)
            else:
                parts.append(self._render_parameter(segment, dialect))
        sql = "".join(parts)
        if self.limit is not None or self.offset is not None:
            sql = dialect.apply_limit(sql.rstrip(), self.limit, self.offset)
        return sql

    @staticmethod
    def _render_parameter(segment: Parameter, dialect: Dialect) -> str:
        try:
            return segment.render(dialect)
        except ArgumentError as exc:
            if exc.position is not None or segment.position is None:
                raise
            raise exc.at(segment.position, segment.value.value) from exc


class UnitBuilder:
    """
    Accumulates segments in order, merging adjacent literals.

    ``separate()`` marks a boundary between top-level arguments; a single
    space is inserted there unless whitespace already separates the pieces.
    """

    def __init__(self) -> None:
        self._segments: list[Segment] = []
        self._space = False
        # index of the argument being consumed, stamped onto parameters
        self.position: int | None = None
        self.limit: int | None = None
        self.offset: int | None = None

    def separate(self) -> None:
        self._space = bool(self._segments)

    def literal(self, text: str) -> None:
        if not text:
            return
        self._pad(text)
        self._merge(text)

    def parameter(self, value: ParameterValue, *, like: int | None = None) -> None:
        self._pad(None)
        self._segments.append(Parameter(value, like=like, position=self.position))

    def extend(self, segments: list[Segment]) -> None:
        for segment in segments:
            if isinstance(segment, Literal):
                self.literal(segment.text)
            else:
                self._pad(None)
                if segment.position is None:
                    segment = replace(segment, position=self.position)
                self._segments.append(segment)

    def build(self) -> TranslationUnit:
        return TranslationUnit(tuple(self._segments), limit=self.limit, offset=self.offset)

    def _pad(self, text: str | None) -> None:
        if not self._space:
            return
        self._space = False
        last = self._segments[-1]
        if isinstance(last, Literal) and last.text[-1:].isspace():
            return
        if text is not None and text[:1].isspace():
            return
        self._merge(" ")

    def _merge(self, text: str) -> None:
        if self._segments and isinstance(self._segments[-1], Literal):
            self._segments[-1] = Literal(self._segments[-1].text + text)
        else:
            self._segments.append(Literal(text))
