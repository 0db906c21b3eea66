"""Aspect-ratio measures for 2-D and 3-D control volumes.

In 2-D the measures relate a circumference to an area, in 3-D a surface
to a volume.  ``aspect_ratio`` is the measure used by refinement and
``aspect_ratio2`` the one used to rank matchings.
"""

from __future__ import annotations

import math


def aratio1_2d(circumf: float, surf: float) -> float:
    """Circumference squared over area, computed with a power."""
    return math.pow(circumf, 2) / surf


def aratio_2d(circumf: float, surf: float) -> float:
    """Circumference squared over area."""
    return (circumf * circumf) / surf


def aratio2_2d(circumf: float, surf: float) -> float:
    """Circumference to the fourth over area squared."""
    return (circumf * circumf * circumf * circumf) / (surf * surf)


def aratio1_3d(surf: float, vol: float) -> float:
    """Surface to the power 1.5 over volume, computed with a power."""
    return math.pow(surf, 1.5) / vol


def aratio_3d(surf: float, vol: float) -> float:
    """Square root of surface cubed over volume."""
    return math.sqrt(surf * surf * surf) / vol


def aratio2_3d(surf: float, vol: float) -> float:
    """Surface cubed over volume squared."""
    return (surf * surf * surf) / (vol * vol)


def _check_dim(dim: int) -> None:
    if dim not in (2, 3):
        raise ValueError(f"dimension must be 2 or 3, got {dim}")


def aspect_ratio(dim: int, surf: float, vol: float) -> float:
    """Return the aspect ratio used for refinement in ``dim`` dimensions."""
    _check_dim(dim)
    return aratio_2d(surf, vol) if dim == 2 else aratio_3d(surf, vol)


def aspect_ratio2(dim: int, surf: float, vol: float) -> float:
    """Return the squared aspect ratio used for matching in ``dim`` dimensions."""
    _check_dim(dim)
    return aratio2_2d(surf, vol) if dim == 2 else aratio2_3d(surf, vol)