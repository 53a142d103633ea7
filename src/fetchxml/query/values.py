"""Literal coercion shared by the parser and the serializer.

A text is read as a number only when formatting that number gives back the
exact same text, so ``"007"``, ``"1.0"`` or ``"1e3"`` stay strings.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional, Union

from .nodes import Scalar

Number = Union[int, float]


def format_number(value: Number) -> str:
    """Decimal text for a number, never in scientific notation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def format_value(value: Scalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def coerce_number(text: str) -> Optional[Number]:
    try:
        parsed = float(text)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    number: Number = int(parsed) if parsed.is_integer() else parsed
    if format_number(number) != text:
        return None
    return number


def coerce_value_text(text: str) -> Scalar:
    """Coerce the text of a ``<value>`` element."""
    number = coerce_number(text)
    return text if number is None else number


def coerce_value_attribute(text: str) -> Scalar:
    """Coerce a ``value=`` attribute; also understands ``true``/``false``."""
    number = coerce_number(text)
    if number is not None:
        return number
    if text == "true":
        return True
    if text == "false":
        return False
    return text


__all__ = [
    "format_number",
    "format_value",
    "coerce_number",
    "coerce_value_text",
    "coerce_value_attribute",
]
