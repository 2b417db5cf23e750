"""Fuzzy comparison of floating-point scalars."""
from __future__ import annotations

from typing import Any, Optional

import numpy as np

from checkrun.core.comparator import Comparator
from checkrun.reporting.output import OutputLine

# Relative epsilons, also used as the absolute bound around zero
EPSILONS = {
    np.dtype(np.float16): 1.0e-3,
    np.dtype(np.float32): 1.0e-5,
    np.dtype(np.float64): 1.0e-14,
    np.dtype(np.longdouble): 1.0e-17,
}


def epsilon_for(as_type: Any) -> float:
    """Comparison epsilon for a floating-point type or dtype."""

    try:
        dtype = np.dtype(as_type)
    except TypeError:
        dtype = np.dtype(np.float64)
    return EPSILONS.get(dtype, EPSILONS[np.dtype(np.float64)])


def fuzzy_equal(actual: Any, expected: Any, epsilon: float) -> bool:
    """Compare two scalars with ``epsilon`` tolerance; NaN equals NaN."""

    return bool(np.isclose(actual, expected, rtol=epsilon, atol=epsilon, equal_nan=True))


class FloatingPointComparator(Comparator):
    """Comparator for float scalars using a type-dependent epsilon."""

    def __init__(self, as_type: Any = float, epsilon: Optional[float] = None) -> None:
        self.as_type = as_type
        self.epsilon = epsilon if epsilon is not None else epsilon_for(as_type)
        self._actual: Any = None
        self._expected: Any = None

    def __call__(self, actual: Any, expected: Any) -> bool:
        self._actual = actual
        self._expected = expected
        return fuzzy_equal(actual, expected, self.epsilon)

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        delta = self._actual - self._expected
        out.write("Floating-point values", actual_label, "and", expected_label, "are not the same, actual")
        out.value(self._actual).write("but").value(self._expected)
        out.write("expected (delta").value(delta).write(").", nospace=True)
