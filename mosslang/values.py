"""Runtime values and their text forms.

Values are plain Python objects: ``int``, ``float``, ``str``, ``bool``,
``list``, a ``TypedFunc`` for functions and ``Void()`` for no value.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from mosslang.syntax import TypedFunc


class Void:
    """The single value of type Void."""

    _instance: Void | None = None

    def __new__(cls) -> Void:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Void"


def _float_fixed_one(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return f"{value:.1f}"


def _float_shortest(value: float) -> str:
    """Shortest round-tripping decimal form, never in exponent notation."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def display_value(value: Any) -> str:
    """The display form of a value; floats show one decimal place."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_fixed_one(value)
    if isinstance(value, str):
        return value
    if isinstance(value, Void):
        return "Void"
    if isinstance(value, TypedFunc):
        return str(value)
    if isinstance(value, list):
        raise ValueError("list values have no display form")
    raise TypeError(f"not a runtime value: {value!r}")


def print_string(value: Any) -> str:
    """The text that printing a value writes."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _float_shortest(value)
    if isinstance(value, list):
        return "[" + ",".join(display_value(item) for item in value) + "]"
    return display_value(value)