"""K-way refinement that lowers the largest aspect ratio among domains.

These variants never make a move that would push either domain involved
above the current maximum aspect ratio.  A move touching the domain with
the maximum ratio is taken at once.  Other moves are taken, depending on
the variant, for their local gain in the larger of the two ratios, for
their gain in the weight-scaled sum of ratios, or not at all.
"""

from __future__ import annotations

import random
from collections.abc import Callable

from mgridgen.graph import Ctrl, Graph
from mgridgen.permute import random_permute
from mgridgen.refine_sum import _Move, _require_partition, max_aspect_ratio

# Smallest decrease of the larger of two ratios worth a move.
_MIN_LOCAL_GAIN = 0.01
# Smallest decrease of the weight-scaled sum of two ratios worth a move.
_MIN_WEIGHTED_GAIN = 0.1

_Chooser = Callable[[Ctrl, Graph, _Move, int, float], "int | None"]


def _refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    rng: random.Random | None,
    choose: _Chooser,
) -> int:
    _require_partition(ctrl, graph)
    if npasses < 0:
        raise ValueError(f"npasses must be non-negative, got {npasses}")
    rng = rng if rng is not None else random.Random()

    pmax, maxar = max_aspect_ratio(ctrl.dim, graph.psurf, graph.pvol)
    perm = random_permute(range(graph.nvtxs), rng, init=True)
    nmoves = 0
    for _ in range(npasses):
        perm = random_permute(random_permute(perm, rng), rng)
        nmoves = 0
        for vertex in perm:
            source = graph.where[vertex]
            if graph.pwgts[source] - graph.vwgt[vertex] < ctrl.minsize:
                continue
            move = _Move(ctrl, graph, vertex)
            target = choose(ctrl, graph, move, pmax, maxar)
            if target is None:
                continue
            move.apply(graph, target)
            if pmax in (source, target):
                pmax, maxar = max_aspect_ratio(ctrl.dim, graph.psurf, graph.pvol)
                graph.minratio = maxar
            nmoves += 1
        if nmoves == 0:
            break

    graph.nmoves = nmoves
    return nmoves


def _choose_minmax_average(
    ctrl: Ctrl, graph: Graph, move: _Move, pmax: int, maxar: float
) -> int | None:
    best, chosen = _MIN_LOCAL_GAIN, None
    for target in move.degrees:
        old_from, old_to, new_from, new_to = move.ratios(ctrl.dim, graph, target)
        if new_from > maxar or new_to > maxar:
            continue
        if pmax in (target, move.source):
            return target
        gain = max(old_from, old_to) - max(new_from, new_to)
        if gain > best:
            best, chosen = gain, target
    return chosen


def _choose_minmax(
    ctrl: Ctrl, graph: Graph, move: _Move, pmax: int, maxar: float
) -> int | None:
    for target in move.degrees:
        if pmax not in (target, move.source):
            continue
        _, _, new_from, new_to = move.ratios(ctrl.dim, graph, target)
        if new_from <= maxar and new_to <= maxar:
            return target
    return None


def _multiobj_chooser(local_gain: bool) -> _Chooser:
    def choose(
        ctrl: Ctrl, graph: Graph, move: _Move, pmax: int, maxar: float
    ) -> int | None:
        best1, best2 = _MIN_LOCAL_GAIN, _MIN_WEIGHTED_GAIN
        chosen1: int | None = None
        chosen2: int | None = None
        source, weight = move.source, graph.vwgt[move.vertex]
        for target in move.degrees:
            old_from, old_to, new_from, new_to = move.ratios(ctrl.dim, graph, target)
            if new_from > maxar or new_to > maxar:
                continue
            if pmax in (target, source):
                return target
            if local_gain:
                gain = max(old_from, old_to) - max(new_from, new_to)
                if gain > best1:
                    best1, chosen1 = gain, target
            old = old_from * graph.pwgts[source] + old_to * graph.pwgts[target]
            new = new_from * (graph.pwgts[source] - weight) + new_to * (
                graph.pwgts[target] + weight
            )
            if best2 < old - new:
                best2, chosen2 = old - new, target
        return chosen1 if chosen1 is not None else chosen2

    return choose


def random_kway_minmax_average_aratio_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    rng: random.Random | None = None,
) -> int:
    """Lower the maximum aspect ratio, also evening out pairs of domains.

    Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, rng, _choose_minmax_average)


def random_kway_minmax_aratio_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    rng: random.Random | None = None,
) -> int:
    """Lower the maximum aspect ratio, moving only around the worst domain.

    Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, rng, _choose_minmax)


def random_kway_multiobj_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    rng: random.Random | None = None,
) -> int:
    """Lower the maximum aspect ratio first, the weighted sum second.

    Moves near the worst domain come first, then moves with the best local
    gain in the larger ratio, then moves lowering the weight-scaled sum.
    Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, rng, _multiobj_chooser(local_gain=True))


def random_kway_multiobj_refine2(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    rng: random.Random | None = None,
) -> int:
    """Lower the maximum aspect ratio first, the weighted sum second.

    Unlike ``random_kway_multiobj_refine`` no move is taken for its local
    gain alone.  Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, rng, _multiobj_chooser(local_gain=False))