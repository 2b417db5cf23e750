import math

from checkrun.core.comparator import Comparator


class Angle(float):
    """Angle in radians."""


class AngleComparator(Comparator):
    """Treats angles that differ by a full turn as equal."""

    def __init__(self, as_type=Angle, epsilon=1.0e-9):
        self.as_type = as_type
        self.epsilon = epsilon
        self._delta = 0.0

    def __call__(self, actual, expected):
        self._delta = math.remainder(actual - expected, math.tau)
        return abs(self._delta) <= self.epsilon

    def print_error_message(self, out, actual_label, expected_label):
        out.write("Angles", actual_label, "and", expected_label, "differ by").value(self._delta)
        out.write("radians.")
