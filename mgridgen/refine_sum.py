"""K-way refinement that moves boundary vertices between domains.

Each pass visits the vertices in random order.  A vertex may move to a
neighbouring domain when the domain it leaves stays at or above
``ctrl.minsize`` and the domain it joins stays at or below
``ctrl.maxsize``.  The variants differ in how a move is judged: by the
sum of aspect ratios, by the weight-scaled sum, or by the surface cut.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Sequence

from mgridgen.aratio import aspect_ratio
from mgridgen.graph import Ctrl, Graph
from mgridgen.permute import random_permute

Objective = Callable[[Ctrl, Graph], float]

# Smallest decrease of the objective for which a move is worth making.
_MIN_GAIN = 0.1
# Tolerance used when checking the incrementally kept partition data.
_TOLERANCE = 0.01


class RefineError(ValueError):
    """Raised when a graph's partition data is missing or inconsistent."""

    def __init__(self, message: str, mismatches: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.mismatches = list(mismatches)


def _ratio(dim: int, surf: float, vol: float) -> float:
    if vol == 0:
        return math.inf
    return aspect_ratio(dim, surf, vol)


def max_aspect_ratio(
    dim: int, psurf: Sequence[float], pvol: Sequence[float]
) -> tuple[int, float]:
    """Return the first domain with the largest aspect ratio and that ratio."""
    if not psurf:
        raise ValueError("no domains to compare")
    if len(psurf) != len(pvol):
        raise ValueError(f"length mismatch: {len(psurf)} != {len(pvol)}")
    ratios = [_ratio(dim, surf, vol) for surf, vol in zip(psurf, pvol)]
    pmax = max(range(len(ratios)), key=ratios.__getitem__)
    return pmax, ratios[pmax]


def _require_partition(ctrl: Ctrl, graph: Graph) -> None:
    if graph.where is None:
        raise RefineError("graph has no partition vector")
    if len(graph.where) != graph.nvtxs:
        raise RefineError(
            f"partition vector holds {len(graph.where)} entries, "
            f"graph has {graph.nvtxs} vertices"
        )
    for name in ("pwgts", "pvol", "psurf"):
        values = getattr(graph, name)
        if len(values) != ctrl.nparts:
            raise RefineError(
                f"{name} holds {len(values)} entries, expected {ctrl.nparts}"
            )
    if any(not 0 <= part < ctrl.nparts for part in graph.where):
        raise RefineError("partition vector refers to a domain outside 0..nparts-1")


class _Move:
    """Connectivity of one vertex towards its own and neighbouring domains."""

    __slots__ = ("vertex", "source", "internal", "external", "degrees")

    def __init__(self, ctrl: Ctrl, graph: Graph, vertex: int) -> None:
        where = graph.where
        self.vertex = vertex
        self.source = where[vertex]
        self.internal = 0.0
        self.external = 0.0
        self.degrees: dict[int, float] = {}
        weight_i = graph.vwgt[vertex]
        for neighbour, weight in graph.neighbours(vertex):
            target = where[neighbour]
            if target == self.source:
                self.internal += weight
                continue
            self.external += weight
            if graph.pwgts[target] + weight_i <= ctrl.maxsize:
                self.degrees[target] = self.degrees.get(target, 0.0) + weight

    def source_surface(self, graph: Graph) -> float:
        return (
            graph.psurf[self.source]
            + self.internal
            - self.external
            - graph.vsurf[self.vertex]
        )

    def target_surface(self, graph: Graph, target: int) -> float:
        return (
            graph.psurf[target]
            + self.internal
            + self.external
            - 2.0 * self.degrees[target]
            + graph.vsurf[self.vertex]
        )

    def ratios(self, dim: int, graph: Graph, target: int) -> tuple[float, float, float, float]:
        """Return old and new aspect ratios of the source and target domains."""
        source, vertex = self.source, self.vertex
        old_from = _ratio(dim, graph.psurf[source], graph.pvol[source])
        old_to = _ratio(dim, graph.psurf[target], graph.pvol[target])
        new_from = _ratio(
            dim, self.source_surface(graph), graph.pvol[source] - graph.vvol[vertex]
        )
        new_to = _ratio(
            dim,
            self.target_surface(graph, target),
            graph.pvol[target] + graph.vvol[vertex],
        )
        return old_from, old_to, new_from, new_to

    def apply(self, graph: Graph, target: int) -> None:
        source, vertex = self.source, self.vertex
        new_from = self.source_surface(graph)
        new_to = self.target_surface(graph, target)
        graph.where[vertex] = target
        graph.pwgts[target] += graph.vwgt[vertex]
        graph.pwgts[source] -= graph.vwgt[vertex]
        graph.pvol[target] += graph.vvol[vertex]
        graph.pvol[source] -= graph.vvol[vertex]
        graph.psurf[source] = new_from
        graph.psurf[target] = new_to


_Chooser = Callable[[Ctrl, Graph, _Move], "int | None"]


def _refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    objective: Objective | None,
    rng: random.Random | None,
    choose: _Chooser,
) -> int:
    _require_partition(ctrl, graph)
    if npasses < 0:
        raise ValueError(f"npasses must be non-negative, got {npasses}")
    rng = rng if rng is not None else random.Random()

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
            target = choose(ctrl, graph, move)
            if target is None:
                continue
            move.apply(graph, target)
            if objective is not None:
                graph.minratio = objective(ctrl, graph)
            nmoves += 1
        if nmoves == 0:
            break

    graph.nmoves = nmoves
    return nmoves


def _choose_aratio(ctrl: Ctrl, graph: Graph, move: _Move) -> int | None:
    best, chosen = _MIN_GAIN, None
    for target in move.degrees:
        old_from, old_to, new_from, new_to = move.ratios(ctrl.dim, graph, target)
        gain = (old_from + old_to) - (new_from + new_to)
        if best < gain:
            best, chosen = gain, target
    return chosen


def _choose_weight_aratio(ctrl: Ctrl, graph: Graph, move: _Move) -> int | None:
    best, chosen = _MIN_GAIN, None
    source, weight = move.source, graph.vwgt[move.vertex]
    for target in move.degrees:
        old_from, old_to, new_from, new_to = move.ratios(ctrl.dim, graph, target)
        old = graph.pwgts[source] * old_from + graph.pwgts[target] * old_to
        new = (graph.pwgts[source] - weight) * new_from + (
            graph.pwgts[target] + weight
        ) * new_to
        gain = old - new
        if best < gain:
            best, chosen = gain, target
    return chosen


def _choose_scut(ctrl: Ctrl, graph: Graph, move: _Move) -> int | None:
    chosen = None
    for target, degree in move.degrees.items():
        if chosen is None or degree > move.degrees[chosen]:
            chosen = target
    if chosen is None or move.degrees[chosen] < move.internal:
        return None
    old_from, old_to, new_from, new_to = move.ratios(ctrl.dim, graph, chosen)
    gain = (old_from + old_to) - (new_from + new_to)
    if gain >= 0.0 or move.degrees[chosen] - move.internal + gain > 0.0:
        return chosen
    return None


def random_kway_aratio_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    objective: Objective | None = None,
    rng: random.Random | None = None,
) -> int:
    """Refine to lower the sum of the domains' aspect ratios.

    ``objective``, when given, is evaluated after every move and stored in
    ``graph.minratio``.  Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, objective, rng, _choose_aratio)


def random_kway_weight_aratio_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    objective: Objective | None = None,
    rng: random.Random | None = None,
) -> int:
    """Refine to lower the sum of aspect ratios scaled by domain weight.

    Returns the number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, objective, rng, _choose_weight_aratio)


def random_kway_scut_refine(
    ctrl: Ctrl,
    graph: Graph,
    npasses: int,
    objective: Objective | None = None,
    rng: random.Random | None = None,
) -> int:
    """Refine to lower the surface cut between domains.

    Each vertex goes towards the domain it shares the most surface with,
    provided that cut gain outweighs any loss in aspect ratio.  Returns the
    number of moves of the last pass.
    """
    return _refine(ctrl, graph, npasses, objective, rng, _choose_scut)


def check_params(ctrl: Ctrl, graph: Graph) -> None:
    """Recompute domain weights, volumes and surfaces and compare them.

    Raises ``RefineError`` listing every domain whose kept values differ
    from the recomputed ones.
    """
    _require_partition(ctrl, graph)
    nparts = ctrl.nparts
    pwgts = [0] * nparts
    pvol = [0.0] * nparts
    psurf = [0.0] * nparts
    where = graph.where
    for vertex, part in enumerate(where):
        pwgts[part] += graph.vwgt[vertex]
        pvol[part] += graph.vvol[vertex]
        psurf[part] += graph.vsurf[vertex]
        for neighbour, weight in graph.neighbours(vertex):
            if where[neighbour] != part:
                psurf[part] += weight

    mismatches: list[str] = []
    for part in range(nparts):
        if pwgts[part] != graph.pwgts[part]:
            mismatches.append(f"pwgts: {part} {pwgts[part]} {graph.pwgts[part]}")
        if abs(pvol[part] - graph.pvol[part]) > _TOLERANCE:
            mismatches.append(f"pvol: {part} {pvol[part]:e} {graph.pvol[part]:e}")
        if abs(psurf[part] - graph.psurf[part]) > _TOLERANCE:
            mismatches.append(f"psurf: {part} {psurf[part]:e} {graph.psurf[part]:e}")
    if mismatches:
        raise RefineError("inconsistent partition data", mismatches)