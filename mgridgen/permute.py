"""Key/value orderings, counting sort, binary search and random shuffles."""

from __future__ import annotations

import bisect
import random
from collections.abc import Iterable, Sequence
from itertools import chain
from operator import attrgetter

from mgridgen.keysort import KeyValue


def sort_key_values(items: Iterable[KeyValue]) -> list[KeyValue]:
    """Return the records in increasing key order, ties broken by ``val``."""
    return sorted(items, key=lambda record: (record.key, record.val))


def sort_key_values_desc(items: Iterable[KeyValue]) -> list[KeyValue]:
    """Return the records in decreasing key order."""
    return sorted(items, key=attrgetter("key"), reverse=True)


def bucket_sort_keys_inc(
    maxkey: int, keys: Sequence[int], tperm: Iterable[int]
) -> list[int]:
    """Order the indices in ``tperm`` by increasing ``keys[index]``.

    Keys must lie in ``0..maxkey``.  Indices with equal keys keep the order
    in which ``tperm`` lists them.
    """
    if maxkey < 0:
        raise ValueError(f"maxkey must be non-negative, got {maxkey}")
    buckets: list[list[int]] = [[] for _ in range(maxkey + 1)]
    for index in tperm:
        key = keys[index]
        if not 0 <= key <= maxkey:
            raise ValueError(f"key {key} of index {index} is outside 0..{maxkey}")
        buckets[key].append(index)
    return list(chain.from_iterable(buckets))


def binary_search(array: Sequence[int], key: int) -> int:
    """Return the index of ``key`` in the sorted ``array``.

    Raises ``KeyError`` when the key is absent.
    """
    index = bisect.bisect_left(array, key)
    if index < len(array) and array[index] == key:
        return index
    raise KeyError(f"Key {key} not found!")


def _start(p: Iterable[int], init: bool) -> list[int]:
    values = list(p)
    return list(range(len(values))) if init else values


def random_permute(
    p: Iterable[int], rng: random.Random | None = None, init: bool = False
) -> list[int]:
    """Return a random shuffle of ``p`` made of ``len(p)`` random swaps.

    With ``init`` the shuffle starts from the identity ``0..len(p)-1``
    instead of the contents of ``p``.
    """
    rng = rng if rng is not None else random.Random()
    result = _start(p, init)
    count = len(result)
    for _ in range(count):
        v = rng.randrange(count)
        u = rng.randrange(count)
        result[v], result[u] = result[u], result[v]
    return result


def fast_random_permute(
    p: Iterable[int], rng: random.Random | None = None, init: bool = False
) -> list[int]:
    """Return a coarse random shuffle of ``p`` swapping blocks of four.

    One block swap is made for every eight elements.  Non-empty input must
    hold at least four elements.
    """
    rng = rng if rng is not None else random.Random()
    result = _start(p, init)
    count = len(result)
    if 0 < count < 4:
        raise ValueError(f"need at least 4 elements to swap blocks, got {count}")
    span = count - 4
    for _ in range(0, count, 8):
        v = rng.randrange(span) if span else 0
        u = rng.randrange(span) if span else 0
        for offset in range(4):
            a, b = v + offset, u + offset
            result[a], result[b] = result[b], result[a]
    return result