"""Core dataclasses shared across checkrun subsystems."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, FrozenSet, List, Optional, Tuple

from .errors import UsageError

if TYPE_CHECKING:
    from .expected_failure import ExpectedFailure

CaseFunction = Callable[[], None]


class ExitStatus(enum.IntEnum):
    """Process exit codes returned by ``Tester.exec``."""

    SUCCESS = 0
    FAILURE = 1
    NO_TESTS = 2


class Outcome(str, enum.Enum):
    """Terminal state of a single test case."""

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"
    EMPTY = "empty"


@dataclass(frozen=True)
class TestCaseGroup:
    """Setup/teardown pair shared by a contiguous run of test cases."""

    __test__ = False

    setup: Optional[CaseFunction] = None
    teardown: Optional[CaseFunction] = None


@dataclass(frozen=True)
class TestCase:
    """A registered, independently invocable check procedure."""

    __test__ = False

    id: int
    function: CaseFunction
    name: str
    group: TestCaseGroup = field(default_factory=TestCaseGroup)

    @property
    def setup(self) -> Optional[CaseFunction]:
        return self.group.setup

    @property
    def teardown(self) -> Optional[CaseFunction]:
        return self.group.teardown


@dataclass(frozen=True)
class Selection:
    """Case ordinals chosen from the command line.

    ``only`` being ``None`` means every registered case.
    """

    only: Optional[Tuple[int, ...]] = None
    skip: FrozenSet[int] = frozenset()

    def apply(self, cases: List[TestCase]) -> List[TestCase]:
        """Selected cases in registration order."""

        count = len(cases)
        requested = set(self.only or ()) | set(self.skip)
        invalid = sorted(number for number in requested if not 1 <= number <= count)
        if invalid:
            listed = " ".join(str(number) for number in invalid)
            raise UsageError(f"Test case id(s) {listed} out of range, the suite has {count} test cases")
        wanted = set(self.only) if self.only is not None else None
        return [
            case
            for case in cases
            if (wanted is None or case.id in wanted) and case.id not in self.skip
        ]


@dataclass
class RunState:
    """Mutable bookkeeping for the suite run in progress."""

    test_case_id: int = 0
    test_case_name: str = ""
    test_case_line: int = 0
    check_count: int = 0
    error_count: int = 0
    expected_failure: Optional["ExpectedFailure"] = None
    case_messages: List[str] = field(default_factory=list)

    def begin_case(self, case: TestCase) -> None:
        self.test_case_id = case.id
        self.test_case_name = case.name
        self.test_case_line = 0
        self.expected_failure = None
        self.case_messages = []
