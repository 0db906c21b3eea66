[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mgridgen"
version = "0.1.0"
description = "Multilevel agglomeration of control-volume graphs into coarse grids with good aspect ratios"
requires-python = ">=3.10"
dependencies = []
keywords = ["multigrid", "graph", "coarsening", "partitioning", "aspect ratio", "agglomeration"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["mgridgen"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
