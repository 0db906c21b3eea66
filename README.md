# mgridgen

Building blocks for multilevel coarse-grid generation. A fine mesh, given as
a graph of control volumes, is agglomerated into coarser cells whose aspect
ratios are kept low, and a partition of the cells into domains can be
improved by moving vertices between domains.

## Modules

- `mgridgen.aratio` – aspect-ratio measures for 2-D (perimeter/area) and
  3-D (surface/volume) cells (`aratio_2d`, `aratio1_2d`, `aratio2_2d`,
  `aratio_3d`, `aratio1_3d`, `aratio2_3d`), and the dispatchers
  `aspect_ratio(dim, surf, vol)` and `aspect_ratio2(dim, surf, vol)`, which
  raise `ValueError` for a dimension other than 2 or 3.
- `mgridgen.graph` – `Graph`, a graph in CSR form with per-vertex weights,
  volumes and boundary surfaces (`Graph.from_csr`); `Ctrl`, the settings
  (`dim`, `nparts`, `minsize`, `maxsize`, `ctype`); the `MatchType` enum;
  `setup_coarse_graph` and `create_coarse_graph`, which contract a matching
  into a coarser graph linked through `coarser` / `finer`.
- `mgridgen.match` – matching heuristics `match_rm`, `match_hem`,
  `match_hem_slow`, `match_hem_slow_restricted` and `match_hem_true`, each
  returning the next coarser graph, and the drivers `coarsen` (repeats the
  matching chosen by `ctrl.ctype` until a level no longer shrinks) and
  `coarsen_restricted` (first coarsens inside the domains of `graph.where`,
  warning when they do not collapse to `ctrl.nparts` vertices).
- `mgridgen.refine_sum` – randomized k-way refinement that lowers the sum of
  aspect ratios (`random_kway_aratio_refine`), the weight-scaled sum
  (`random_kway_weight_aratio_refine`) or the surface cut
  (`random_kway_scut_refine`); `max_aspect_ratio`; `check_params`, which
  recomputes the per-domain weights, volumes and surfaces and raises
  `RefineError` listing any mismatch.
- `mgridgen.refine_minmax` – refinement that lowers the largest aspect ratio:
  `random_kway_minmax_average_aratio_refine`,
  `random_kway_minmax_aratio_refine`, `random_kway_multiobj_refine` and
  `random_kway_multiobj_refine2`.
- Helpers: `mgridgen.blas` (`argmax`, `argmin`, `strided_sum`, `scale`,
  `norm2`, `dot`, `saxpy`), `mgridgen.util` (`ilog2`, `flog2`, `ispow2`,
  `seconds`), `mgridgen.keysort` (`KeyValue`, `sort_by_key`,
  `insertion_sort_by_key`, `count_descents`), `mgridgen.ordering`
  (`sort_by_key_desc`, `sort_ints`, `sort_floats`) and `mgridgen.permute`
  (`sort_key_values`, `sort_key_values_desc`, `bucket_sort_keys_inc`,
  `binary_search`, `random_permute`, `fast_random_permute`).

## Example

```python
import random

from mgridgen.graph import Ctrl, Graph, MatchType
from mgridgen.match import coarsen

# Four unit squares in a row; edge weights are shared face lengths,
# vsurf holds each cell's boundary length on the domain edge.
graph = Graph.from_csr(
    xadj=[0, 1, 3, 5, 6],
    adjncy=[1, 0, 2, 1, 3, 2],
    adjwgt=[1.0] * 6,
    vwgt=[1, 1, 1, 1],
    vvol=[1.0] * 4,
    vsurf=[3.0, 2.0, 2.0, 3.0],
)
ctrl = Ctrl(dim=2, nparts=2, minsize=1, maxsize=2, ctype=MatchType.HEM)
coarsest = coarsen(ctrl, graph, random.Random(0))
print(coarsest.nvtxs)
```

The refinement functions work on a graph whose `where`, `pwgts`, `pvol` and
`psurf` have already been filled in by the caller; they update these in
place, store the move count of the last pass in `graph.nmoves` and return it.

Every randomized routine takes an optional `random.Random`; pass a seeded one
for reproducible results.

## What it does not do

The package has no command-line program and reads or writes no mesh files.
It does not compute an initial partition or project a partition from a
coarse graph back to the fine one; it offers the coarsening and refinement
steps for a caller to combine.

## Running the tests

```
pip install -e .[test]
pytest
```