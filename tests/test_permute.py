import random

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mgridgen.keysort import KeyValue
from mgridgen.permute import (
    binary_search,
    bucket_sort_keys_inc,
    fast_random_permute,
    random_permute,
    sort_key_values,
    sort_key_values_desc,
)


def test_sort_key_values_breaks_ties_by_val():
    items = [KeyValue(2, 1), KeyValue(1, 5), KeyValue(1, 3)]
    result = sort_key_values(items)
    assert [(r.key, r.val) for r in result] == [(1, 3), (1, 5), (2, 1)]


@given(st.lists(st.tuples(st.integers(-50, 50), st.integers(-50, 50))))
def test_sort_key_values_is_ordered_permutation(pairs):
    items = [KeyValue(k, v) for k, v in pairs]
    result = sort_key_values(items)
    assert sorted(pairs) == [(r.key, r.val) for r in result]


@given(st.lists(st.integers(-100, 100)))
def test_sort_key_values_desc_orders_keys_decreasing(keys):
    result = sort_key_values_desc([KeyValue(k) for k in keys])
    got = [r.key for r in result]
    assert got == sorted(keys, reverse=True)


def test_bucket_sort_keeps_tperm_order_within_keys():
    keys = [1, 0, 1, 0]
    assert bucket_sort_keys_inc(1, keys, [2, 3, 0, 1]) == [3, 1, 2, 0]


@given(st.lists(st.integers(0, 6), min_size=1), st.randoms(use_true_random=False))
def test_bucket_sort_invariants(keys, rnd):
    tperm = list(range(len(keys)))
    rnd.shuffle(tperm)
    perm = bucket_sort_keys_inc(max(keys), keys, tperm)
    assert sorted(perm) == list(range(len(keys)))
    ordered = [keys[i] for i in perm]
    assert ordered == sorted(ordered)
    for key in set(keys):
        assert [i for i in perm if keys[i] == key] == [i for i in tperm if keys[i] == key]


def test_bucket_sort_rejects_key_above_max():
    with pytest.raises(ValueError):
        bucket_sort_keys_inc(1, [0, 2], [0, 1])


def test_bucket_sort_rejects_negative_max():
    with pytest.raises(ValueError):
        bucket_sort_keys_inc(-1, [], [])


@given(st.sets(st.integers(-1000, 1000), min_size=1))
def test_binary_search_finds_every_key(values):
    array = sorted(values)
    for index, key in enumerate(array):
        assert binary_search(array, key) == index


def test_binary_search_missing_key_raises():
    with pytest.raises(KeyError):
        binary_search(list(range(0, 40, 2)), 7)


def test_binary_search_empty_raises():
    with pytest.raises(KeyError):
        binary_search([], 0)


@pytest.mark.parametrize("count", [0, 1, 2, 9, 50])
def test_random_permute_init_gives_permutation(count):
    result = random_permute([0] * count, random.Random(3), init=True)
    assert sorted(result) == list(range(count))


def test_random_permute_keeps_contents():
    values = [10, 20, 30, 40, 50]
    result = random_permute(values, random.Random(1))
    assert sorted(result) == values
    assert values == [10, 20, 30, 40, 50]


def test_random_permute_is_deterministic_for_seed():
    first = random_permute(range(30), random.Random(42), init=True)
    second = random_permute(range(30), random.Random(42), init=True)
    assert first == second


@pytest.mark.parametrize("count", [0, 4, 5, 8, 33, 100])
def test_fast_random_permute_gives_permutation(count):
    result = fast_random_permute(range(count), random.Random(7), init=True)
    assert sorted(result) == list(range(count))


def test_fast_random_permute_of_four_is_identity():
    assert fast_random_permute([3, 1, 2, 0], random.Random(0)) == [3, 1, 2, 0]


def test_fast_random_permute_too_short_raises():
    with pytest.raises(ValueError):
        fast_random_permute([1, 2, 3], random.Random(0))