[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kannolo"
version = "0.3.1"
description = "Dense and sparse vector datasets with exhaustive top-k search, vector file readers and exact ground-truth computation."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "nearest-neighbour",
    "ann",
    "vector-search",
    "sparse-vectors",
    "ground-truth",
    "fvecs",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
kannolo-groundtruth = "kannolo.groundtruth:main"

[tool.hatch.build.targets.wheel]
packages = ["kannolo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
