"""Small dense-vector helpers used throughout the partitioner."""

from __future__ import annotations

import math
from collections.abc import Sequence


def argmax(values: Sequence[float]) -> int:
    """Return the index of the first largest element of ``values``."""
    if not values:
        raise ValueError("argmax() of an empty sequence")
    return max(range(len(values)), key=values.__getitem__)


def argmin(values: Sequence[float]) -> int:
    """Return the index of the first smallest element of ``values``."""
    if not values:
        raise ValueError("argmin() of an empty sequence")
    return min(range(len(values)), key=values.__getitem__)


def strided_sum(values: Sequence[float], count: int, stride: int) -> float:
    """Sum ``count`` elements of ``values`` taken every ``stride`` positions."""
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if stride < 0:
        raise ValueError(f"stride must be non-negative, got {stride}")
    if count and (count - 1) * stride >= len(values):
        raise IndexError(
            f"{count} elements with stride {stride} exceed a sequence of length {len(values)}"
        )
    total = 0.0
    for position in range(count):
        total += values[position * stride]
    return total


def scale(alpha: float, values: Sequence[float]) -> list[float]:
    """Return ``values`` multiplied element-wise by ``alpha``."""
    return [value * alpha for value in values]


def norm2(values: Sequence[float]) -> float:
    """Return the Euclidean norm of ``values``."""
    return math.sqrt(dot(values, values))


def dot(x: Sequence[float], y: Sequence[float]) -> float:
    """Return the dot product of two sequences of equal length."""
    if len(x) != len(y):
        raise ValueError(f"length mismatch: {len(x)} != {len(y)}")
    total = 0.0
    for a, b in zip(x, y):
        total += a * b
    return total


def saxpy(
    alpha: float,
    x: Sequence[float],
    y: Sequence[float],
    incx: int = 1,
    incy: int = 1,
) -> list[float]:
    """Return a copy of ``y`` with ``alpha * x`` added along the given strides.

    Every ``incx``-th element of ``x`` is used; the i-th of them is added to
    position ``i * incy`` of ``y``.
    """
    if incx <= 0 or incy <= 0:
        raise ValueError("strides must be positive")
    sources = x[::incx]
    result = list(y)
    if sources and (len(sources) - 1) * incy >= len(result):
        raise IndexError("y is too short for the requested stride")
    for position, value in zip(range(0, len(sources) * incy, incy), sources):
        result[position] += alpha * value
    return result