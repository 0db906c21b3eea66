"""Matching heuristics and the coarsening drivers built on them."""

from __future__ import annotations

import math
import random
import warnings
from collections.abc import Callable, Sequence

from mgridgen.aratio import aspect_ratio2
from mgridgen.graph import Ctrl, Graph, MatchType, create_coarse_graph
from mgridgen.keysort import KeyValue, sort_by_key
from mgridgen.permute import bucket_sort_keys_inc, random_permute

UNMATCHED = -1

_Chooser = Callable[[int, list[int]], int]


def _merged_ratio(dim: int, graph: Graph, i: int, k: int, weight: float) -> float:
    surf = (
        graph.vsurf[i]
        + graph.vsurf[k]
        + graph.adjwgtsum[i]
        + graph.adjwgtsum[k]
        - 2.0 * weight
    )
    return aspect_ratio2(dim, surf, graph.vvol[i] + graph.vvol[k])


def _affinity(dim: int, graph: Graph, i: int, k: int, weight: float) -> float:
    ratio = _merged_ratio(dim, graph, i, k, weight)
    return math.inf if ratio == 0 else 1.0 / ratio


def _contract(graph: Graph, perm: Sequence[int], choose: _Chooser) -> Graph:
    """Visit vertices in ``perm`` order, pair each free one with ``choose``."""
    nvtxs = graph.nvtxs
    match = [UNMATCHED] * nvtxs
    cmap = [UNMATCHED] * nvtxs
    cnvtxs = 0
    for i in perm:
        if match[i] != UNMATCHED:
            continue
        partner = choose(i, match)
        cmap[i] = cmap[partner] = cnvtxs
        cnvtxs += 1
        match[i] = partner
        match[partner] = i
    graph.cmap = cmap
    return create_coarse_graph(graph, cnvtxs, match, perm)


def _size_sorted_order(graph: Graph, rng: random.Random | None) -> list[int]:
    tperm = random_permute(range(graph.nvtxs), rng, init=True)
    return bucket_sort_keys_inc(max(graph.vwgt, default=0), graph.vwgt, tperm)


def _heaviest_partner(
    ctrl: Ctrl,
    graph: Graph,
    i: int,
    match: list[int],
    allowed: Callable[[int], bool] = lambda k: True,
) -> int:
    best, best_weight = i, 0.0
    for k, weight in graph.neighbours(i):
        if not allowed(k) or match[k] != UNMATCHED:
            continue
        if graph.vwgt[i] + graph.vwgt[k] > ctrl.maxsize:
            continue
        affinity = _affinity(ctrl.dim, graph, i, k, weight)
        if affinity > best_weight:
            best, best_weight = k, affinity
    return best


def match_rm(ctrl: Ctrl, graph: Graph, rng: random.Random | None = None) -> Graph:
    """Coarsen by pairing each vertex with its first free, light enough neighbour."""

    def choose(i: int, match: list[int]) -> int:
        for k, _ in graph.neighbours(i):
            if match[k] == UNMATCHED and graph.vwgt[i] + graph.vwgt[k] <= ctrl.maxsize:
                return k
        return i

    perm = random_permute(range(graph.nvtxs), rng, init=True)
    return _contract(graph, perm, choose)


def match_hem(ctrl: Ctrl, graph: Graph, rng: random.Random | None = None) -> Graph:
    """Coarsen by pairing vertices, light ones first, into the best-shaped pairs."""

    def choose(i: int, match: list[int]) -> int:
        return _heaviest_partner(ctrl, graph, i, match)

    return _contract(graph, _size_sorted_order(graph, rng), choose)


def _limited_chooser(
    ctrl: Ctrl,
    graph: Graph,
    fraction: float,
    allowed_for: Callable[[int], Callable[[int], bool]],
) -> _Chooser:
    matched = 0

    def choose(i: int, match: list[int]) -> int:
        nonlocal matched
        partner = i
        if matched < fraction * graph.nvtxs:
            partner = _heaviest_partner(ctrl, graph, i, match, allowed_for(i))
        if partner != i:
            matched += 1
        return partner

    return choose


def match_hem_slow(
    ctrl: Ctrl, graph: Graph, rng: random.Random | None = None
) -> Graph:
    """Like ``match_hem`` but stop pairing once a quarter of the vertices are paired."""
    choose = _limited_chooser(ctrl, graph, 0.25, lambda i: lambda k: True)
    return _contract(graph, _size_sorted_order(graph, rng), choose)


def match_hem_slow_restricted(
    ctrl: Ctrl, graph: Graph, rng: random.Random | None = None
) -> Graph:
    """Pair only vertices of the same domain in ``graph.where``.

    Pairing stops once 30% of the vertices have been paired.
    """
    where = graph.where
    if where is None:
        raise ValueError("restricted matching needs graph.where")
    choose = _limited_chooser(
        ctrl, graph, 0.3, lambda i: lambda k: where[i] == where[k]
    )
    perm = random_permute(range(graph.nvtxs), rng, init=True)
    return _contract(graph, perm, choose)


def match_hem_true(
    ctrl: Ctrl, graph: Graph, rng: random.Random | None = None
) -> Graph:
    """Pair edges in order of increasing merged aspect ratio.

    Pairing stops once more than a quarter as many pairs as vertices exist.
    """
    nvtxs = graph.nvtxs
    order = random_permute(range(nvtxs), rng, init=True)
    candidates = [
        KeyValue(key=_merged_ratio(ctrl.dim, graph, i, k, weight), val1=i, val2=k)
        for i in order
        for k, weight in graph.neighbours(i)
        if k <= i and graph.vwgt[i] + graph.vwgt[k] <= ctrl.maxsize
    ]

    match = [UNMATCHED] * nvtxs
    cmap = [UNMATCHED] * nvtxs
    front: list[int] = []
    back: list[int] = []
    cnvtxs = 0
    for candidate in sort_by_key(candidates):
        if cnvtxs > 0.25 * nvtxs:
            break
        i, k = candidate.val1, candidate.val2
        if match[i] == UNMATCHED and match[k] == UNMATCHED:
            front.append(i)
            back.append(k)
            cmap[i] = cmap[k] = cnvtxs
            cnvtxs += 1
            match[i] = k
            match[k] = i

    for i in range(nvtxs):
        if match[i] == UNMATCHED:
            front.append(i)
            cmap[i] = cnvtxs
            cnvtxs += 1
            match[i] = i

    graph.cmap = cmap
    return create_coarse_graph(graph, cnvtxs, match, front + back[::-1])


_MATCHERS: dict[MatchType, Callable[[Ctrl, Graph, random.Random | None], Graph]] = {
    MatchType.RM: match_rm,
    MatchType.HEM: match_hem,
    MatchType.HEM_SLOW: match_hem_slow,
    MatchType.HEM_TRUE: match_hem_true,
}


def _coarsen_with(matcher, ctrl: Ctrl, graph: Graph, rng: random.Random) -> Graph:
    cgraph = graph
    while True:
        cgraph = matcher(ctrl, cgraph, rng)
        if cgraph.nvtxs >= cgraph.finer.nvtxs:
            return cgraph


def coarsen(ctrl: Ctrl, graph: Graph, rng: random.Random | None = None) -> Graph:
    """Build coarser graphs until a level no longer shrinks; return the last."""
    matcher = _MATCHERS.get(ctrl.ctype) if isinstance(ctrl.ctype, MatchType) else None
    if matcher is None:
        raise ValueError(f"Unknown match type: {ctrl.ctype!r}")
    rng = rng if rng is not None else random.Random()
    return _coarsen_with(matcher, ctrl, graph, rng)


def coarsen_restricted(
    ctrl: Ctrl, graph: Graph, rng: random.Random | None = None
) -> Graph:
    """Coarsen inside the domains of ``graph.where``, then coarsen freely.

    Each level inherits the domains of the finer one, whose own ``where`` is
    dropped.  A warning is issued when the domains do not collapse to
    ``ctrl.nparts`` vertices, which means some of them are not contiguous.
    """
    if graph.where is None:
        raise ValueError("restricted coarsening needs graph.where")
    rng = rng if rng is not None else random.Random()

    cgraph = graph
    while True:
        finer = cgraph
        cgraph = match_hem_slow_restricted(ctrl, finer, rng)
        coarse_where = [0] * cgraph.nvtxs
        for coarse, part in zip(finer.cmap, finer.where):
            coarse_where[coarse] = part
        cgraph.where = coarse_where
        finer.where = None
        if cgraph.nvtxs >= finer.nvtxs:
            break

    if cgraph.nvtxs != ctrl.nparts:
        warnings.warn(
            "It appears that some domains are non-contiguous "
            f"[{cgraph.nvtxs} {ctrl.nparts}]",
            stacklevel=2,
        )
    cgraph.where = None

    return _coarsen_with(match_hem_slow, ctrl, cgraph, rng)