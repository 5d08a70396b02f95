"""Numerical building blocks for local regression and local likelihood smoothing."""

__version__ = "0.1.0"

__all__ = [
    "densities",
    "family",
    "residuals",
    "orderstats",
    "basis",
    "intlimits",
    "onedint",
    "trees",
]