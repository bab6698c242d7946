"""Runtime value model: a value is either a scalar or a (nested) array."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

from .config import DISPLAY_DIGITS, DISPLAY_EPSILON, SNAP_DIGITS, SNAP_EPSILON


@dataclass(frozen=True)
class Scalar:
    value: float

    def __str__(self) -> str:
        return format_value(self)


@dataclass(frozen=True)
class Array:
    items: tuple["Value", ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index: int) -> "Value":
        return self.items[index]

    def __str__(self) -> str:
        return format_value(self)


Value = Union[Scalar, Array]


class ValueKind(str, Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"
    NESTED = "nested"


@dataclass(frozen=True)
class ValueInfo:
    kind: ValueKind
    shape: tuple[int, ...]
    depth: int


def is_scalar(value: object) -> bool:
    return isinstance(value, Scalar)


def is_array(value: object) -> bool:
    return isinstance(value, Array)


def array_of(items) -> Array:
    return Array(items=tuple(items))


def scalars(values) -> Array:
    """Wrap plain floats into a one-dimensional array value."""
    return Array(items=tuple(Scalar(float(v)) for v in values))


def flatten(value: Value) -> list[float]:
    """Collect every scalar of ``value`` depth-first, left to right."""
    out: list[float] = []
    _collect_scalars(value, out)
    return out


def _collect_scalars(value: Value, out: list[float]) -> None:
    if isinstance(value, Scalar):
        out.append(value.value)
        return
    for item in value.items:
        _collect_scalars(item, out)


def to_value(obj: object) -> Value:
    """Convert caller data (numbers, nested sequences, array-likes) to a value."""
    if isinstance(obj, (Scalar, Array)):
        return obj
    if isinstance(obj, numbers.Real):
        return Scalar(float(obj))
    if hasattr(obj, "tolist"):
        return to_value(obj.tolist())
    if isinstance(obj, (list, tuple)):
        return Array(items=tuple(to_value(item) for item in obj))
    raise TypeError(f"unsupported value type {type(obj).__name__}")


def to_python(value: Value):
    if isinstance(value, Scalar):
        return value.value
    return [to_python(item) for item in value.items]


def shape_of(value: Value) -> tuple[int, ...]:
    """Shape of a rectangular value; ragged nesting stops at the first level that differs."""
    if isinstance(value, Scalar):
        return ()
    if not value.items:
        return (0,)
    inner = [shape_of(item) for item in value.items]
    if all(shape == inner[0] for shape in inner):
        return (len(value.items),) + inner[0]
    return (len(value.items),)


def depth_of(value: Value) -> int:
    if isinstance(value, Scalar):
        return 0
    if not value.items:
        return 1
    return 1 + max(depth_of(item) for item in value.items)


def kind_of(value: Value) -> ValueKind:
    depth = depth_of(value)
    if depth == 0:
        return ValueKind.SCALAR
    if depth == 1:
        return ValueKind.VECTOR
    if depth == 2:
        return ValueKind.MATRIX
    return ValueKind.NESTED


def value_info(value: Value) -> ValueInfo:
    return ValueInfo(kind=kind_of(value), shape=shape_of(value), depth=depth_of(value))


def _round_half_up(x: float) -> float:
    return float(math.floor(x + 0.5))


def normalize_scalar(value: float) -> float:
    """Snap arithmetic noise to the nearest integer or 12-significant-digit decimal.

    Applied to every scalar arithmetic result, so ``0.1 + 0.2`` is stored as
    ``0.3`` and ``sin(PI)`` as ``0``.
    """
    if math.isnan(value) or math.isinf(value):
        return value

    rounded = _round_half_up(value)
    if abs(value - rounded) < SNAP_EPSILON:
        return rounded

    if value != 0:
        exponent = SNAP_DIGITS - math.ceil(math.log10(abs(value)))
        try:
            scale = 10.0**exponent
        except OverflowError:
            return value
        scaled_rounded = _round_half_up(value * scale) / scale
        if abs(value - scaled_rounded) < SNAP_EPSILON * abs(value):
            return scaled_rounded
    return value


def format_scalar(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    if abs(value) < DISPLAY_EPSILON:
        return "0"
    nearest = round(value)
    if abs(value - nearest) < DISPLAY_EPSILON:
        return str(int(nearest))

    text = f"{value:.{DISPLAY_DIGITS}g}"
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
    return text


def format_value(value: Value) -> str:
    """Canonical text: integral scalars without a decimal point, arrays as ``[a, b]``."""
    if isinstance(value, Scalar):
        return format_scalar(value.value)
    return "[" + ", ".join(format_value(item) for item in value.items) + "]"
