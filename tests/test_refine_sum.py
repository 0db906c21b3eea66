import random
from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mgridgen.aratio import aspect_ratio
from mgridgen.graph import Ctrl, Graph
from mgridgen.refine_sum import (
    RefineError,
    check_params,
    max_aspect_ratio,
    random_kway_aratio_refine,
    random_kway_scut_refine,
    random_kway_weight_aratio_refine,
)

SIZE = 4


def grid_graph(size=SIZE):
    xadj, adjncy, adjwgt, vsurf = [0], [], [], []
    for r in range(size):
        for c in range(size):
            boundary = 0.0
            for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
                rr, cc = r + dr, c + dc
                if 0 <= rr < size and 0 <= cc < size:
                    adjncy.append(rr * size + cc)
                    adjwgt.append(1.0)
                else:
                    boundary += 1.0
            vsurf.append(boundary)
            xadj.append(len(adjncy))
    return Graph.from_csr(xadj, adjncy, adjwgt, vsurf=vsurf)


def partition(graph, where, nparts):
    graph.where = list(where)
    graph.pwgts = [0] * nparts
    graph.pvol = [0.0] * nparts
    graph.psurf = [0.0] * nparts
    for v, part in enumerate(where):
        graph.pwgts[part] += graph.vwgt[v]
        graph.pvol[part] += graph.vvol[v]
        graph.psurf[part] += graph.vsurf[v]
        for k, w in graph.neighbours(v):
            if where[k] != part:
                graph.psurf[part] += w
    return graph


def checkerboard(size=SIZE):
    return [(v // size + v % size) % 2 for v in range(size * size)]


def make_setup(seed_where=None):
    graph = grid_graph()
    partition(graph, seed_where or checkerboard(), 2)
    ctrl = Ctrl(dim=2, nparts=2, minsize=1, maxsize=SIZE * SIZE)
    return ctrl, graph


def ratio_sum(graph):
    return sum(aspect_ratio(2, s, v) for s, v in zip(graph.psurf, graph.pvol))


def weighted_sum(graph):
    return sum(
        w * aspect_ratio(2, s, v)
        for w, s, v in zip(graph.pwgts, graph.psurf, graph.pvol)
    )


REFINERS = [
    random_kway_aratio_refine,
    random_kway_weight_aratio_refine,
    random_kway_scut_refine,
]


def test_max_aspect_ratio_picks_largest():
    pmax, value = max_aspect_ratio(2, [4.0, 8.0, 8.0], [1.0, 1.0, 1.0])
    assert pmax == 1
    assert value == aspect_ratio(2, 8.0, 1.0)


def test_max_aspect_ratio_empty_raises():
    with pytest.raises(ValueError):
        max_aspect_ratio(2, [], [])


@pytest.mark.parametrize("refine", REFINERS)
def test_kept_data_matches_recomputed(refine):
    ctrl, graph = make_setup()
    nmoves = refine(ctrl, graph, 5, rng=random.Random(3))
    assert graph.nmoves == nmoves
    expected = partition(grid_graph(), graph.where, 2)
    assert graph.pwgts == expected.pwgts
    assert graph.pvol == pytest.approx(expected.pvol)
    assert graph.psurf == pytest.approx(expected.psurf)
    assert sum(graph.pwgts) == SIZE * SIZE


@pytest.mark.parametrize("refine", REFINERS)
def test_sizes_respect_limits(refine):
    ctrl, graph = make_setup()
    refine(ctrl, graph, 5, rng=random.Random(11))
    counts = Counter(graph.where)
    assert all(ctrl.minsize <= counts[p] <= ctrl.maxsize for p in range(2))


def test_aratio_refine_does_not_increase_sum():
    ctrl, graph = make_setup()
    before = ratio_sum(graph)
    random_kway_aratio_refine(ctrl, graph, 10, rng=random.Random(5))
    assert ratio_sum(graph) <= before


def test_aratio_refine_improves_checkerboard():
    ctrl, graph = make_setup()
    before = ratio_sum(graph)
    random_kway_aratio_refine(ctrl, graph, 10, rng=random.Random(5))
    assert ratio_sum(graph) < before


def test_weight_refine_does_not_increase_weighted_sum():
    ctrl, graph = make_setup()
    before = weighted_sum(graph)
    random_kway_weight_aratio_refine(ctrl, graph, 10, rng=random.Random(9))
    assert weighted_sum(graph) <= before


@settings(max_examples=20, deadline=None)
@given(seed=st.integers(min_value=0, max_value=10_000))
def test_random_seeds_keep_consistency(seed):
    ctrl, graph = make_setup()
    random_kway_aratio_refine(ctrl, graph, 3, rng=random.Random(seed))
    expected = partition(grid_graph(), graph.where, 2)
    assert graph.psurf == pytest.approx(expected.psurf)
    assert graph.pwgts == expected.pwgts


def test_same_seed_same_result():
    ctrl, first = make_setup()
    _, second = make_setup()
    random_kway_aratio_refine(ctrl, first, 5, rng=random.Random(42))
    random_kway_aratio_refine(ctrl, second, 5, rng=random.Random(42))
    assert first.where == second.where


def test_zero_passes_leave_partition_alone():
    ctrl, graph = make_setup()
    before = list(graph.where)
    assert random_kway_aratio_refine(ctrl, graph, 0, rng=random.Random(1)) == 0
    assert graph.where == before
    assert graph.nmoves == 0


def test_minsize_blocks_all_moves():
    graph = grid_graph()
    partition(graph, checkerboard(), 2)
    ctrl = Ctrl(dim=2, nparts=2, minsize=SIZE * SIZE // 2, maxsize=SIZE * SIZE)
    before = list(graph.where)
    random_kway_weight_aratio_refine(ctrl, graph, 3, rng=random.Random(2))
    assert graph.where == before


def test_objective_updates_minratio():
    ctrl, graph = make_setup()
    calls = []

    def objective(c, g):
        calls.append(len(calls))
        return float(len(calls))

    random_kway_aratio_refine(ctrl, graph, 5, objective, random.Random(7))
    assert len(calls) >= graph.nmoves
    assert graph.minratio == float(len(calls))


def test_missing_partition_raises():
    graph = grid_graph()
    ctrl = Ctrl(dim=2, nparts=2, minsize=1, maxsize=16)
    with pytest.raises(RefineError):
        random_kway_scut_refine(ctrl, graph, 1, rng=random.Random(0))


def test_negative_passes_raise():
    ctrl, graph = make_setup()
    with pytest.raises(ValueError):
        random_kway_aratio_refine(ctrl, graph, -1)


def test_check_params_reports_tampered_weights():
    ctrl, graph = make_setup()
    graph.pwgts[0] += 1
    graph.psurf[1] += 5.0
    with pytest.raises(RefineError) as info:
        check_params(ctrl, graph)
    assert len(info.value.mismatches) == 2
    assert info.value.mismatches[0].startswith("pwgts: 0")
    assert info.value.mismatches[1].startswith("psurf: 1")


def test_check_params_accepts_refined_graph():
    ctrl, graph = make_setup()
    random_kway_scut_refine(ctrl, graph, 4, rng=random.Random(4))
    check_params(ctrl, graph)
    graph.pvol[0] += 1.0
    with pytest.raises(RefineError, match="inconsistent"):
        check_params(ctrl, graph)