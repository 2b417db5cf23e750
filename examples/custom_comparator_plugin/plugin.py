from checkrun.core.comparator import register_comparator

from angles import Angle, AngleComparator


def register() -> None:
    register_comparator(Angle, AngleComparator)
