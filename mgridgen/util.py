"""Integer logarithms, power-of-two tests and a CPU timer."""

from __future__ import annotations

import math
import time


def ilog2(a: int) -> int:
    """Return the floor of log2(a); values below 2 give 0."""
    if a <= 1:
        return 0
    return a.bit_length() - 1


def flog2(a: float) -> float:
    """Return the base-2 logarithm of a positive number."""
    if a <= 0:
        raise ValueError(f"logarithm of a non-positive number: {a}")
    return math.log(a) / math.log(2.0)


def ispow2(a: int) -> bool:
    """Return True if ``a`` is a power of two (1 included)."""
    if a <= 0:
        raise ValueError(f"power-of-two test needs a positive integer, got {a}")
    return a & (a - 1) == 0


def seconds() -> float:
    """Return the processor time used by this process, in seconds."""
    return time.process_time()