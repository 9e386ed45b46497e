from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from sqlweave.errors import TranslationError
from sqlweave.parameters import (
    ParameterKind,
    ParameterValue,
    ascii_text,
    binary,
    date_value,
    datetime_value,
    identifier,
    infer,
    integer,
    numeric,
    text,
)


def test_null_payload_is_allowed_for_value_kinds():
    for kind in ParameterKind:
        if kind is ParameterKind.IDENTIFIER:
            continue
        assert ParameterValue(kind, None).is_null


def test_identifier_rejects_null_and_empty():
    with pytest.raises(TranslationError):
        identifier(None)
    with pytest.raises(TranslationError):
        identifier("")


def test_text_length_and_encoding_are_checked():
    assert text("abc", length=3).value == "abc"
    with pytest.raises(TranslationError):
        text("abcd", length=3)
    with pytest.raises(TranslationError):
        ascii_text("naïve")
    with pytest.raises(TranslationError):
        text("x", encoding="no-such-codec")


def test_integer_rejects_bool_and_strings():
    assert integer(7).value == 7
    with pytest.raises(TranslationError):
        integer(True)
    with pytest.raises(TranslationError) as excinfo:
        integer("7")
    assert excinfo.value.value == "7"


def test_numeric_normalizes_to_decimal():
    assert numeric(0.1).value == Decimal("0.1")
    assert numeric(Decimal("1.235"), scale=2).value == Decimal("1.24")
    assert numeric(12, precision=4, scale=2).value == Decimal("12.00")


def test_numeric_precision_and_finiteness():
    with pytest.raises(TranslationError):
        numeric(123.4, precision=4, scale=2)
    with pytest.raises(TranslationError):
        numeric(float("nan"))
    with pytest.raises(TranslationError):
        numeric(float("inf"))


def test_temporal_normalization():
    assert date_value(datetime(2024, 5, 6, 7, 8)).value == date(2024, 5, 6)
    assert datetime_value(date(2024, 5, 6)).value == datetime(2024, 5, 6)
    with pytest.raises(TranslationError):
        date_value("2024-05-06")


def test_binary_accepts_buffer_types():
    assert binary(bytearray(b"ab")).value == b"ab"
    assert binary(memoryview(b"cd")).value == b"cd"
    with pytest.raises(TranslationError):
        binary("ab")


def test_infer_picks_kind_from_python_type():
    assert infer(True).kind is ParameterKind.BOOLEAN
    assert infer(3).kind is ParameterKind.INTEGER
    assert infer(1.5).kind is ParameterKind.NUMERIC
    assert infer(datetime(2024, 1, 1)).kind is ParameterKind.DATETIME
    assert infer(date(2024, 1, 1)).kind is ParameterKind.DATE
    assert infer(timedelta(seconds=1)).kind is ParameterKind.INTERVAL
    assert infer(b"x").kind is ParameterKind.BINARY
    assert infer("x").kind is ParameterKind.TEXT
    assert infer(None).is_null


def test_infer_rejects_unknown_types():
    with pytest.raises(TranslationError):
        infer(object())


def test_parameter_values_are_immutable():
    value = integer(1)
    with pytest.raises(AttributeError):
        value.value = 2
