import pytest

from fetchxml.query.values import (
    coerce_number,
    coerce_value_attribute,
    coerce_value_text,
    format_number,
    format_value,
)


@pytest.mark.parametrize(
    "number, text",
    [
        (3, "3"),
        (-12, "-12"),
        (2.5, "2.5"),
        (3.0, "3"),
        (1e21, "1000000000000000000000"),
        (1e-7, "0.0000001"),
        (0.1, "0.1"),
    ],
)
def test_format_number(number, text):
    assert format_number(number) == text


def test_format_value():
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(7) == "7"
    assert format_value("007") == "007"


@pytest.mark.parametrize("text", ["007", "1.0", "3.140", "1e3", "+5", " 5", "abc", "", "nan", "inf"])
def test_non_canonical_numbers_stay_strings(text):
    assert coerce_number(text) is None
    assert coerce_value_text(text) == text


def test_large_integers_stay_strings():
    text = "12345678901234567890"
    assert coerce_value_text(text) == text


def test_canonical_numbers_are_coerced():
    assert coerce_number("42") == 42
    assert isinstance(coerce_number("42"), int)
    assert coerce_number("-0.5") == -0.5


def test_booleans_only_from_attributes():
    assert coerce_value_attribute("true") is True
    assert coerce_value_attribute("false") is False
    assert coerce_value_attribute("True") == "True"
    assert coerce_value_text("true") == "true"
