"""Weighted dual graphs of a mesh and their contraction into coarser graphs."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field


class MatchType(enum.Enum):
    """Matching heuristic used to build each coarser graph."""

    RM = 1
    HEM = 2
    HEM_SLOW = 3
    HEM_TRUE = 4


@dataclass
class Ctrl:
    """Parameters that steer coarsening and refinement."""

    dim: int = 2
    nparts: int = 1
    minsize: int = 0
    maxsize: int = 1
    ctype: MatchType = MatchType.HEM_SLOW

    def __post_init__(self) -> None:
        if self.dim not in (2, 3):
            raise ValueError(f"dimension must be 2 or 3, got {self.dim}")
        if self.nparts < 1:
            raise ValueError(f"nparts must be positive, got {self.nparts}")


@dataclass(eq=False)
class Graph:
    """A graph in compressed-row form with volume and surface data per vertex."""

    nvtxs: int = 0
    xadj: list[int] = field(default_factory=lambda: [0])
    adjncy: list[int] = field(default_factory=list)
    adjwgt: list[float] = field(default_factory=list)
    vwgt: list[int] = field(default_factory=list)
    vvol: list[float] = field(default_factory=list)
    vsurf: list[float] = field(default_factory=list)
    adjwgtsum: list[float] = field(default_factory=list)
    cmap: list[int] | None = None
    where: list[int] | None = None
    pwgts: list[int] = field(default_factory=list)
    pvol: list[float] = field(default_factory=list)
    psurf: list[float] = field(default_factory=list)
    minratio: float = 0.0
    nmoves: int = 0
    coarser: Graph | None = field(default=None, repr=False)
    finer: Graph | None = field(default=None, repr=False)

    @classmethod
    def from_csr(
        cls,
        xadj: Sequence[int],
        adjncy: Sequence[int],
        adjwgt: Sequence[float],
        vwgt: Sequence[int] | None = None,
        vvol: Sequence[float] | None = None,
        vsurf: Sequence[float] | None = None,
    ) -> Graph:
        """Build a graph from CSR arrays.

        Missing vertex weights default to 1, volumes to 1.0 and boundary
        surfaces to 0.0.
        """
        xadj = [int(x) for x in xadj]
        if not xadj or xadj[0] != 0:
            raise ValueError("xadj must start with 0")
        if any(b < a for a, b in zip(xadj, xadj[1:])):
            raise ValueError("xadj must be non-decreasing")
        nvtxs = len(xadj) - 1
        adjncy = [int(v) for v in adjncy]
        adjwgt = [float(w) for w in adjwgt]
        if len(adjncy) != xadj[-1] or len(adjwgt) != xadj[-1]:
            raise ValueError("adjncy and adjwgt must hold xadj[-1] entries")
        if any(not 0 <= v < nvtxs for v in adjncy):
            raise ValueError("adjncy refers to a vertex outside the graph")

        vwgt = [1] * nvtxs if vwgt is None else [int(w) for w in vwgt]
        vvol = [1.0] * nvtxs if vvol is None else [float(v) for v in vvol]
        vsurf = [0.0] * nvtxs if vsurf is None else [float(s) for s in vsurf]
        for name, values in (("vwgt", vwgt), ("vvol", vvol), ("vsurf", vsurf)):
            if len(values) != nvtxs:
                raise ValueError(f"{name} must hold {nvtxs} entries, got {len(values)}")

        adjwgtsum = [sum(adjwgt[start:end]) for start, end in zip(xadj, xadj[1:])]
        return cls(
            nvtxs=nvtxs,
            xadj=xadj,
            adjncy=adjncy,
            adjwgt=adjwgt,
            vwgt=vwgt,
            vvol=vvol,
            vsurf=vsurf,
            adjwgtsum=adjwgtsum,
        )

    @property
    def nedges(self) -> int:
        """Number of directed adjacency entries."""
        return len(self.adjncy)

    def neighbours(self, vertex: int) -> Iterator[tuple[int, float]]:
        """Yield ``(neighbour, edge weight)`` pairs of ``vertex``."""
        start, end = self.xadj[vertex], self.xadj[vertex + 1]
        yield from zip(self.adjncy[start:end], self.adjwgt[start:end])


def setup_coarse_graph(graph: Graph, cnvtxs: int) -> Graph:
    """Create an empty graph of ``cnvtxs`` vertices linked below ``graph``."""
    cgraph = Graph(nvtxs=cnvtxs, finer=graph)
    graph.coarser = cgraph
    return cgraph


def create_coarse_graph(
    graph: Graph, cnvtxs: int, match: Sequence[int], perm: Sequence[int]
) -> Graph:
    """Contract matched vertex pairs of ``graph`` into a coarser graph.

    ``graph.cmap`` gives the coarse vertex of each fine vertex, ``match`` the
    partner of each fine vertex (itself when unmatched) and ``perm`` the
    order in which coarse vertices are numbered.
    """
    cmap = graph.cmap
    if cmap is None:
        raise ValueError("graph has no coarsening map")
    cgraph = setup_coarse_graph(graph, cnvtxs)

    next_id = 0
    for v in perm:
        if cmap[v] != next_id:
            continue
        u = match[v]
        members = (v,) if u == v else (v, u)

        adjacent: list[int] = []
        weights: list[float] = []
        slot: dict[int, int] = {}
        for member in members:
            for neighbour, weight in graph.neighbours(member):
                target = cmap[neighbour]
                if target in slot:
                    weights[slot[target]] += weight
                else:
                    slot[target] = len(adjacent)
                    adjacent.append(target)
                    weights.append(weight)

        weight_sum = sum(graph.adjwgtsum[m] for m in members)
        if u != v and next_id in slot:
            position = slot.pop(next_id)
            weight_sum -= weights[position]
            last_target = adjacent.pop()
            last_weight = weights.pop()
            if position < len(adjacent):
                adjacent[position] = last_target
                weights[position] = last_weight

        cgraph.vwgt.append(sum(graph.vwgt[m] for m in members))
        cgraph.vvol.append(sum(graph.vvol[m] for m in members))
        cgraph.vsurf.append(sum(graph.vsurf[m] for m in members))
        cgraph.adjwgtsum.append(weight_sum)
        cgraph.adjncy.extend(adjacent)
        cgraph.adjwgt.extend(weights)
        cgraph.xadj.append(len(cgraph.adjncy))
        next_id += 1

    if next_id != cnvtxs:
        raise ValueError(f"expected {cnvtxs} coarse vertices, built {next_id}")
    return cgraph