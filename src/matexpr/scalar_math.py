"""Numeric helpers behind the scalar function registry."""

from __future__ import annotations

import math
from typing import Sequence

import jax.numpy as jnp

from . import config as _config  # noqa: F401  (enables float64 before any jnp array exists)
from .errors import ErrorCode, raise_error


def gcd(a: int, b: int) -> int:
    a = abs(a)
    b = abs(b)
    while b != 0:
        a, b = b, a % b
    return a


def lcm(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return abs(a // gcd(a, b) * b)


def require_integer(x: float, func: str) -> int:
    if not math.isfinite(x) or x != math.floor(x):
        raise_error(ErrorCode.INTEGER_REQUIRED, func)
    return int(x)


def ieee_pow(base: float, exponent: float) -> float:
    """``math.pow`` with IEEE results (nan/inf) instead of Python exceptions."""
    try:
        return math.pow(base, exponent)
    except (OverflowError, ValueError) as exc:
        odd_integer = math.isfinite(exponent) and exponent == math.floor(exponent) and math.fmod(exponent, 2.0) != 0
        if isinstance(exc, OverflowError):
            return -math.inf if base < 0 and odd_integer else math.inf
        if base == 0:
            # 0 ** negative
            return math.copysign(math.inf, base) if odd_integer else math.inf
        return math.nan


def ieee_fmod(x: float, y: float) -> float:
    try:
        return math.fmod(x, y)
    except ValueError:
        return math.nan


def _as_vector(values: Sequence[float]) -> jnp.ndarray:
    return jnp.asarray(values, dtype=jnp.float64)


def mean(values: Sequence[float]) -> float:
    return float(jnp.sum(_as_vector(values)) / len(values))


def variance(values: Sequence[float], *, sample: bool) -> float:
    """Sample (divide by n-1) or population (divide by n) variance."""
    arr = _as_vector(values)
    n = arr.shape[0]
    centered = arr - jnp.sum(arr) / n
    return float(jnp.sum(centered * centered) / (n - 1 if sample else n))


def covariance(x: Sequence[float], y: Sequence[float], *, sample: bool) -> float:
    xs = _as_vector(x)
    ys = _as_vector(y)
    n = xs.shape[0]
    dx = xs - jnp.sum(xs) / n
    dy = ys - jnp.sum(ys) / n
    return float(jnp.sum(dx * dy) / (n - 1 if sample else n))


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation from sample covariance and sample standard deviations."""
    cov = covariance(x, y, sample=True)
    std_x = math.sqrt(variance(x, sample=True))
    std_y = math.sqrt(variance(y, sample=True))
    if std_x == 0 or std_y == 0:
        raise_error(ErrorCode.STD_DEV_ZERO)
    return cov / (std_x * std_y)


def median(values: Sequence[float]) -> float:
    ordered = jnp.sort(_as_vector(values))
    n = ordered.shape[0]
    if n % 2 == 0:
        return float((ordered[n // 2 - 1] + ordered[n // 2]) / 2.0)
    return float(ordered[n // 2])


def percentile(p: float, data: Sequence[float]) -> float:
    """Linear interpolation between the two nearest ranks of the sorted data."""
    ordered = [float(v) for v in jnp.sort(_as_vector(data)).tolist()]
    n = len(ordered)
    if n == 1:
        return ordered[0]
    index = (p / 100.0) * (n - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return ordered[lower]
    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def sum_of_squares(values: Sequence[float]) -> float:
    arr = _as_vector(values)
    return float(jnp.sum(arr * arr))


def split_pairs(values: Sequence[float]) -> tuple[list[float], list[float]]:
    """Split ``x1..xn, y1..yn`` into its X and Y halves."""
    half = len(values) // 2
    return list(values[:half]), list(values[half:])
