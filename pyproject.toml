[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "locfitcore"
version = "0.1.0"
description = "Numerical building blocks for local regression and local likelihood: densities, families, residuals, bases, integrals and evaluation-structure geometry."
requires-python = ">=3.10"
dependencies = [
    "scipy",
]
keywords = [
    "local regression",
    "local likelihood",
    "smoothing",
    "density estimation",
    "kernel",
    "numerical integration",
]
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
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["locfitcore"]

[tool.hatch.build.targets.sdist]
include = ["locfitcore", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
