"""
Runtime values produced by expression evaluation.

A Value is exactly one of Float, Text, Bool or Null. Every consumer
dispatches over these four variants and nothing else; column storage
types outside FLOAT64/STRING never become Values (the evaluator rejects
them first).
"""

import math
from dataclasses import dataclass
from typing import Any

from ..storage.types import DataType
from ..utils.validators import parse_float


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Null:
    pass


NULL = Null()

Value = Float | Text | Bool | Null


def _unknown(value) -> TypeError:
    return TypeError(f"Not a Value: {value!r}")


def from_cell(data_type: DataType, raw: Any) -> Value:
    """Wrap a stored cell of an engine-readable column."""
    if raw is None:
        return NULL
    if data_type == DataType.FLOAT64:
        return Float(float(raw))
    if data_type == DataType.STRING:
        return Text(raw)
    raise ValueError(f"No Value variant for column type {data_type.value}")


def parse_literal(text: str) -> Value:
    """A lexeme that parses as a float is numeric; anything else is text."""
    try:
        return Float(parse_float(text))
    except ValueError:
        return Text(text)


def to_float(value: Value) -> float:
    """
    Numeric coercion used by arithmetic, comparisons and aggregates.

    Numeric text parses to its value; non-numeric text, booleans and NULL
    become 0.0.
    """
    if isinstance(value, Float):
        return value.value
    if isinstance(value, Text):
        try:
            return parse_float(value.value)
        except ValueError:
            return 0.0
    if isinstance(value, (Bool, Null)):
        return 0.0
    raise _unknown(value)


def to_bool(value: Value) -> bool:
    """Truthiness used by AND/OR: nonzero floats and non-empty text are true."""
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, Float):
        return value.value != 0
    if isinstance(value, Text):
        return value.value != ""
    if isinstance(value, Null):
        return False
    raise _unknown(value)


def values_equal(left: Value, right: Value) -> bool:
    """
    Exact equality with no coercion.

    Values of different variants are never equal. NULL equals NULL.
    """
    if type(left) is not type(right):
        return False
    if isinstance(left, Null):
        return True
    return left.value == right.value


def is_null(value: Value) -> bool:
    return isinstance(value, Null)


def _format_float(x: float) -> str:
    if math.isfinite(x) and x.is_integer() and abs(x) < 1e21:
        return str(int(x))
    return repr(x)


def key_text(value: Value) -> str:
    """
    Render a value for use inside a GROUP BY key.

    Integral floats drop their fraction, so Float(5.0) and Text("5")
    render identically and land in the same group.
    """
    if isinstance(value, Float):
        return _format_float(value.value)
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, Null):
        return "NULL"
    raise _unknown(value)


def to_python(value: Value) -> Any:
    """Unwrap to a plain Python object (None for NULL)."""
    if isinstance(value, (Float, Text, Bool)):
        return value.value
    if isinstance(value, Null):
        return None
    raise _unknown(value)
