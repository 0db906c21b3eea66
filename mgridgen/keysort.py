"""Ascending sorts of key/value records by their key."""

from __future__ import annotations

import bisect
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from itertools import pairwise
from operator import attrgetter

# Below this share of descending neighbour pairs the input counts as nearly
# sorted, and insertion sort is cheaper than a full sort.
_NEARLY_SORTED_FRACTION = 0.05

_by_key = attrgetter("key")


@dataclass(frozen=True, slots=True)
class KeyValue:
    """A sort key carrying up to three integer payloads."""

    key: float
    val: int = 0
    val1: int = 0
    val2: int = 0


def count_descents(items: Sequence[KeyValue]) -> int:
    """Return how many neighbouring pairs have a larger key before a smaller one."""
    return sum(1 for left, right in pairwise(items) if left.key > right.key)


def insertion_sort_by_key(items: Iterable[KeyValue]) -> list[KeyValue]:
    """Return the records in increasing key order, sorted by insertion.

    The first record with the smallest key is swapped to the front before
    the insertion pass; after that, records with equal keys keep the order
    they then have.
    """
    pending = list(items)
    if not pending:
        return []
    smallest = min(range(len(pending)), key=lambda index: pending[index].key)
    pending[0], pending[smallest] = pending[smallest], pending[0]

    result: list[KeyValue] = []
    for record in pending:
        bisect.insort_right(result, record, key=_by_key)
    return result


def sort_by_key(items: Iterable[KeyValue]) -> list[KeyValue]:
    """Return the records in increasing key order.

    Input that is already nearly sorted goes through insertion sort; any
    other input is sorted in one pass over the keys.
    """
    records = list(items)
    if count_descents(records) < _NEARLY_SORTED_FRACTION * len(records):
        return insertion_sort_by_key(records)
    return sorted(records, key=_by_key)