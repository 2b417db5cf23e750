"""Element-wise comparison of sequences and numpy arrays."""
from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

import numpy as np

from checkrun.core.comparator import Comparator, resolve
from checkrun.reporting.output import OutputLine

from .floating_point import epsilon_for


class Container(Comparator):
    """Compares two sequences element by element.

    Elements are compared with whatever comparator applies to them, so
    floats inside a list are compared fuzzily. Used explicitly::

        self.compare_as(values, [1.0, 2.0, 3.0], Container)
    """

    def __init__(self) -> None:
        self._actual: Sequence[Any] = ()
        self._expected: Sequence[Any] = ()
        self._first_difference: Optional[int] = None

    def __call__(self, actual: Sequence[Any], expected: Sequence[Any]) -> bool:
        self._actual = actual
        self._expected = expected
        self._first_difference = None
        for index, (got, want) in enumerate(zip(actual, expected)):
            if not resolve(got, want).evaluate(got, want).equal:
                self._first_difference = index
                return False
        if len(actual) != len(expected):
            self._first_difference = min(len(actual), len(expected))
            return False
        return True

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        index = self._first_difference
        if len(self._actual) != len(self._expected):
            out.write("Containers", actual_label, "and", expected_label, "have different size, actual")
            out.write(len(self._actual), "but", len(self._expected), "expected.")
            if index is None:
                return
            if index < len(self._actual) and index < len(self._expected):
                self._print_position(out, index)
            elif index < len(self._actual):
                out.write("Actual has").value(self._actual[index]).write("on position", f"{index}.")
            else:
                out.write("Expected has").value(self._expected[index]).write("on position", f"{index}.")
            return
        out.write("Containers", actual_label, "and", expected_label, "have different contents.")
        if index is not None:
            self._print_position(out, index)

    def _print_position(self, out: OutputLine, index: int) -> None:
        out.write("Actual").value(self._actual[index]).write("but").value(self._expected[index])
        out.write("expected on position", f"{index}.")


class ArrayComparator(Comparator):
    """Compares numpy arrays by shape, then element-wise.

    Floating-point arrays use the epsilon of the wider of the two dtypes.
    """

    def __init__(self, as_type: Any = np.ndarray) -> None:
        self.as_type = as_type
        self._actual: Any = None
        self._expected: Any = None
        self._mismatched = 0
        self._index: Optional[Tuple[int, ...]] = None

    def __call__(self, actual: Any, expected: Any) -> bool:
        self._actual = actual = np.asarray(actual)
        self._expected = expected = np.asarray(expected)
        self._mismatched = 0
        self._index = None
        if actual.shape != expected.shape:
            return False
        dtype = np.result_type(actual, expected)
        if np.issubdtype(dtype, np.inexact):
            epsilon = epsilon_for(dtype)
            close = np.isclose(actual, expected, rtol=epsilon, atol=epsilon, equal_nan=True)
        else:
            close = np.asarray(actual == expected)
        if close.all():
            return True
        self._mismatched = int(close.size - np.count_nonzero(close))
        self._index = tuple(int(i) for i in np.argwhere(~close)[0])
        return False

    def print_error_message(self, out: OutputLine, actual_label: str, expected_label: str) -> None:
        actual = self._actual
        expected = self._expected
        if actual.shape != expected.shape:
            out.write("Arrays", actual_label, "and", expected_label, "have different shape, actual")
            out.write(actual.shape, "but", expected.shape, "expected.")
            return
        out.write("Arrays", actual_label, "and", expected_label, "differ in")
        out.write(f"{self._mismatched} of {actual.size} elements.")
        if self._index is not None:
            out.write("Actual").value(actual[self._index]).write("but").value(expected[self._index])
            out.write("expected at index", f"{self._index}.")
