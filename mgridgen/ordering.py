"""Descending key sorts and ascending sorts of plain numbers."""

from __future__ import annotations

from collections.abc import Iterable
from operator import attrgetter

from mgridgen.keysort import KeyValue

_by_key = attrgetter("key")


def sort_by_key_desc(items: Iterable[KeyValue]) -> list[KeyValue]:
    """Return the records in decreasing key order.

    Records with equal keys keep their relative input order.
    """
    return sorted(items, key=_by_key, reverse=True)


def sort_ints(values: Iterable[int]) -> list[int]:
    """Return the integers in increasing order."""
    return sorted(values)


def sort_floats(values: Iterable[float]) -> list[float]:
    """Return the floating-point numbers in increasing order."""
    return sorted(values)