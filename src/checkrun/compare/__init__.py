"""Comparators for concrete value domains.

Importing this package registers the comparators that apply
automatically: fuzzy comparison for floating-point scalars and
element-wise comparison for numpy arrays. ``Container`` and ``File`` are
used explicitly through ``compare_as`` / ``compare_with``.
"""
import numpy as np

from checkrun.core.comparator import comparators

from .container import ArrayComparator, Container
from .file import File
from .floating_point import FloatingPointComparator, epsilon_for, fuzzy_equal

__all__ = [
    "ArrayComparator",
    "Container",
    "File",
    "FloatingPointComparator",
    "epsilon_for",
    "fuzzy_equal",
    "load_builtins",
]


def load_builtins() -> None:
    comparators.register(float, FloatingPointComparator)
    comparators.register(np.floating, FloatingPointComparator)
    comparators.register(np.ndarray, ArrayComparator)


load_builtins()
