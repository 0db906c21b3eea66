"""Graph coarsening and aspect-ratio-driven refinement for building coarse grids."""

__version__ = "0.1.0"