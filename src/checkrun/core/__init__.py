"""Core models and the Tester base class exposed at the package level."""
from .models import ExitStatus, Outcome, Selection, TestCase, TestCaseGroup
from .errors import CheckFailure, SkipCase, UsageError
from .comparator import (
    Comparator,
    ComparisonOutcome,
    EqualityComparator,
    common_type,
    comparators,
    register_comparator,
    resolve,
)
from .expected_failure import ExpectedFailure
from .tester import Tester, TesterConfiguration

__all__ = [
    "CheckFailure",
    "Comparator",
    "ComparisonOutcome",
    "EqualityComparator",
    "ExitStatus",
    "ExpectedFailure",
    "Outcome",
    "Selection",
    "SkipCase",
    "TestCase",
    "TestCaseGroup",
    "Tester",
    "TesterConfiguration",
    "UsageError",
    "common_type",
    "comparators",
    "register_comparator",
    "resolve",
]
