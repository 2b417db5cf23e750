"""Base class for test suites: case registry, check primitives and run loop."""
from __future__ import annotations

import inspect
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from typing import IO, Any, Callable, Iterable, List, Optional, Sequence, Tuple, Type

import click
from colorama import just_fix_windows_console

from checkrun.cli.options import RunOptions, parse_arguments
from checkrun.reporting.base import ReportManager
from checkrun.reporting.json_reporter import JsonReporter
from checkrun.reporting.output import OutputLine, format_value
from checkrun.reporting.terminal import TerminalReporter

from .comparator import Comparator, ResolvedComparison, resolve
from .errors import CheckFailure, SkipCase, UsageError
from .expected_failure import ExpectedFailure
from .models import CaseFunction, ExitStatus, Outcome, RunState, TestCase, TestCaseGroup
from .results import CaseResult, CheckEvent, RunSummary
from .source import CallSite, call_site

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TesterConfiguration:
    """Settings fixed when the suite is constructed.

    ``skipped_argument_prefixes`` lists option prefixes (without the leading
    dashes) that the command line accepts and ignores, e.g. ``("gl",)``
    lets ``--gl-version 4.5`` through; the suite reads it back from
    ``Tester.skipped_arguments``.
    """

    skipped_argument_prefixes: Tuple[str, ...] = ()


def _case_name(function: Callable[..., Any]) -> str:
    return getattr(function, "__name__", None) or type(function).__name__


def _source_path(cls: Type[Any]) -> Optional[str]:
    try:
        return inspect.getsourcefile(cls)
    except TypeError:
        return None


class Tester:
    """Base class for unit test suites.

    Subclasses register bound methods in their constructor and perform
    checks with ``verify``, ``compare``, ``compare_as`` and
    ``compare_with``::

        class MathTest(Tester):
            def __init__(self):
                super().__init__()
                self.add_tests([self.addition, self.division])

            def addition(self):
                self.compare(2 + 2, 4)

            def division(self):
                with self.expect_fail("Integer division is not exact."):
                    self.compare(7 // 2, 3.5)

    A failing check ends the current case; the remaining cases still run.
    """

    __test__ = False

    def __init__(self, configuration: Optional[TesterConfiguration] = None) -> None:
        self._configuration = configuration or TesterConfiguration()
        self._test_cases: List[TestCase] = []
        self._source_path = _source_path(type(self))
        self._test_filename = os.path.basename(self._source_path) if self._source_path else "<unknown>"
        self._test_name = type(self).__qualname__
        self._state = RunState()
        self._reports: Optional[ReportManager] = None
        self._finalized = False
        self._skipped_arguments: Tuple[str, ...] = ()

    @property
    def configuration(self) -> TesterConfiguration:
        return self._configuration

    @property
    def test_cases(self) -> Tuple[TestCase, ...]:
        return tuple(self._test_cases)

    @property
    def test_name(self) -> str:
        return self._test_name

    @property
    def test_filename(self) -> str:
        return self._test_filename

    @property
    def test_case_id(self) -> int:
        """1-based ordinal of the case being executed."""

        return self._state.test_case_id

    @property
    def test_case_name(self) -> str:
        return self._state.test_case_name

    @property
    def skipped_arguments(self) -> Tuple[str, ...]:
        """Prefixed options of the current run, with their values."""

        return self._skipped_arguments

    def register_test(self, filename: str, name: str) -> None:
        """Override the file and suite name shown in the output."""

        self._test_filename = filename
        self._test_name = name

    def add_tests(
        self,
        tests: Iterable[CaseFunction],
        setup: Optional[CaseFunction] = None,
        teardown: Optional[CaseFunction] = None,
    ) -> None:
        """Append ``tests`` to the registry, sharing ``setup``/``teardown``.

        Setup and teardown run around every one of the cases, teardown also
        when setup or the case itself failed or skipped.
        """

        if self._finalized:
            raise UsageError("Test cases cannot be added once the suite started running")
        functions = list(tests)
        if not functions:
            raise UsageError("add_tests() needs at least one test case")
        group = TestCaseGroup(setup=setup, teardown=teardown)
        for function in functions:
            if not callable(function):
                raise TypeError(f"Test case {function!r} is not callable")
            self._test_cases.append(
                TestCase(
                    id=len(self._test_cases) + 1,
                    function=function,
                    name=_case_name(function),
                    group=group,
                )
            )

    # -- check primitives ------------------------------------------------

    def verify(self, value: Any, expression: Optional[str] = None) -> None:
        """Check that ``value`` is true."""

        site = call_site(sys._getframe(1), "verify")
        if expression is None:
            expression = site.argument(0) or format_value(value)
        self._begin_check(site)
        passed = bool(value)
        scope = self._state.expected_failure
        if scope is None:
            if passed:
                return
            self._fail("FAIL", site, OutputLine().write("Expression", expression, "failed."))
        if not passed:
            detail = self._scope_message(scope).write("Expression", expression, "failed.")
            self._report("XFAIL", site, detail)
            return
        self._fail("XPASS", site, OutputLine().write("Expression", expression, "was expected to fail."))

    def compare(
        self,
        actual: Any,
        expected: Any,
        *,
        actual_label: Optional[str] = None,
        expected_label: Optional[str] = None,
    ) -> None:
        """Check that ``actual`` equals ``expected`` under their common type."""

        site = call_site(sys._getframe(1), "compare")
        self._check(resolve(actual, expected), site, actual, expected, actual_label, expected_label)

    def compare_as(
        self,
        actual: Any,
        expected: Any,
        as_type: type,
        *,
        actual_label: Optional[str] = None,
        expected_label: Optional[str] = None,
    ) -> None:
        """Compare both values as ``as_type`` instead of their common type.

        ``as_type`` is either a type whose registered comparator is used, or
        a ``Comparator`` subclass that gets default-constructed.
        """

        site = call_site(sys._getframe(1), "compare_as")
        resolved = resolve(actual, expected, as_type=as_type)
        self._check(resolved, site, actual, expected, actual_label, expected_label)

    def compare_with(
        self,
        actual: Any,
        expected: Any,
        comparator: Comparator,
        *,
        actual_label: Optional[str] = None,
        expected_label: Optional[str] = None,
    ) -> None:
        """Compare the values with an explicitly configured ``comparator``."""

        site = call_site(sys._getframe(1), "compare_with")
        resolved = resolve(actual, expected, comparator=comparator)
        self._check(resolved, site, actual, expected, actual_label, expected_label)

    def skip(self, message: str) -> None:
        """End the current case, reporting it as skipped with ``message``."""

        site = call_site(sys._getframe(1), "skip")
        self._state.test_case_line = site.line
        raise SkipCase(message)

    def expect_fail(self, message: str, condition: Any = True) -> ExpectedFailure:
        """Scope in which failing checks are expected, if ``condition`` holds."""

        return ExpectedFailure(self._state, message, condition)

    # -- execution -------------------------------------------------------

    def exec(
        self,
        argv: Optional[Sequence[str]] = None,
        log_output: Optional[IO[str]] = None,
        error_output: Optional[IO[str]] = None,
    ) -> int:
        """Parse ``argv`` (defaults to ``sys.argv[1:]``) and run the suite.

        Returns 0 when no case failed, 1 otherwise and 2 when the suite has
        no test cases. Command line errors also return 2.
        """

        try:
            options = parse_arguments(argv, self._configuration, prog_name=self._test_name)
            return self.run(options, log_output=log_output, error_output=error_output)
        except UsageError as exc:
            error = click.UsageError(str(exc))
            error.show(file=error_output)
            return error.exit_code
        except click.exceptions.Exit as exc:
            return exc.exit_code
        except click.ClickException as exc:
            exc.show(file=error_output)
            return exc.exit_code

    def run(
        self,
        options: Optional[RunOptions] = None,
        *,
        log_output: Optional[IO[str]] = None,
        error_output: Optional[IO[str]] = None,
    ) -> int:
        options = options or RunOptions()
        if options.verbose:
            logging.basicConfig(level=logging.DEBUG)
        just_fix_windows_console()
        terminal = TerminalReporter(log_output, error_output, color=options.color)
        if not self._test_cases:
            terminal.no_tests(self._test_name)
            return int(ExitStatus.NO_TESTS)

        selected = options.selection.apply(self._test_cases)
        logger.debug("selected cases %s of %d", [case.id for case in selected], len(self._test_cases))
        reports = ReportManager([terminal])
        if options.json_report:
            reports.add(JsonReporter(options.json_report))
        self._finalized = True
        self._state = RunState()
        self._skipped_arguments = options.extra_args
        self._reports = reports
        try:
            reports.start(self._test_name, selected)
            results = []
            for case in selected:
                result = self._run_case(case)
                results.append(result)
                reports.handle_result(result)
            state = self._state
            status = ExitStatus.FAILURE if state.error_count else ExitStatus.SUCCESS
            summary = RunSummary(
                suite=self._test_name,
                checks=state.check_count,
                errors=state.error_count,
                results=results,
                exit_status=status,
            )
            reports.complete(summary)
        finally:
            self._reports = None
        return int(status)

    def _run_case(self, case: TestCase) -> CaseResult:
        state = self._state
        state.begin_case(case)
        checks_before = state.check_count
        logger.debug("case %d %s: start", case.id, case.name)

        outcome: Optional[Outcome] = None
        skip_message: Optional[str] = None
        teardown_outcome: Optional[Outcome] = None
        teardown_message: Optional[str] = None
        try:
            for stage in (case.setup, case.function):
                if stage is None:
                    continue
                outcome, skip_message = self._invoke(stage)
                if outcome is not None:
                    break
        finally:
            # also runs while a UsageError propagates out of the case
            if case.teardown is not None:
                teardown_outcome, teardown_message = self._invoke(case.teardown)
        if outcome is None or teardown_outcome is Outcome.FAILED:
            outcome, skip_message = teardown_outcome, teardown_message

        checks = state.check_count - checks_before
        if outcome is None:
            outcome = Outcome.OK if checks else Outcome.EMPTY
        logger.debug("case %d %s: %s after %d checks", case.id, case.name, outcome.value, checks)
        result = CaseResult(
            case=case,
            outcome=outcome,
            checks=checks,
            messages=list(state.case_messages),
            skip_message=skip_message,
        )
        if result.failed:
            state.error_count += 1
        return result

    def _invoke(self, function: CaseFunction) -> Tuple[Optional[Outcome], Optional[str]]:
        try:
            function()
        except CheckFailure:
            return Outcome.FAILED, None
        except SkipCase as skip:
            return Outcome.SKIPPED, skip.message
        except UsageError:
            raise
        except Exception as exc:
            self._report_exception(exc)
            return Outcome.FAILED, None
        finally:
            self._state.expected_failure = None
        return None, None

    def _report_exception(self, exc: Exception) -> None:
        line = self._state.test_case_line
        if self._source_path:
            for frame in traceback.extract_tb(exc.__traceback__):
                if os.path.abspath(frame.filename) == os.path.abspath(self._source_path):
                    line = frame.lineno or line
        detail = OutputLine().write("Unexpected exception", f"{type(exc).__name__}:", str(exc))
        self._report("FAIL", CallSite(self._test_filename, line), detail)

    # -- check bookkeeping -----------------------------------------------

    def _begin_check(self, site: CallSite) -> None:
        if self._reports is None:
            raise UsageError("Checks can only be performed while the suite is running")
        self._state.test_case_line = site.line
        self._state.check_count += 1

    def _check(
        self,
        resolved: ResolvedComparison,
        site: CallSite,
        actual: Any,
        expected: Any,
        actual_label: Optional[str],
        expected_label: Optional[str],
    ) -> None:
        if actual_label is None:
            actual_label = site.argument(0) or format_value(actual)
        if expected_label is None:
            expected_label = site.argument(1) or format_value(expected)
        self._begin_check(site)
        outcome = resolved.evaluate(actual, expected)
        scope = self._state.expected_failure
        if scope is None:
            if outcome.equal:
                return
            detail = OutputLine()
            outcome.render(detail, actual_label, expected_label)
            self._fail("FAIL", site, detail)
        if not outcome.equal:
            detail = self._scope_message(scope).write(actual_label, "and", expected_label, "are not equal.")
            self._report("XFAIL", site, detail)
            return
        detail = OutputLine().write(actual_label, "and", expected_label, "are not expected to be equal.")
        self._fail("XPASS", site, detail)

    @staticmethod
    def _scope_message(scope: ExpectedFailure) -> OutputLine:
        line = OutputLine()
        if scope.message:
            line.write(scope.message)
        return line

    def _report(self, kind: str, site: CallSite, detail: OutputLine) -> None:
        assert self._reports is not None
        state = self._state
        state.case_messages.append(f"{kind}: {detail.render()}")
        self._reports.check(
            CheckEvent(
                kind=kind,
                case_id=state.test_case_id,
                case_name=state.test_case_name,
                filename=self._test_filename,
                line=site.line,
                detail=detail,
            )
        )

    def _fail(self, kind: str, site: CallSite, detail: OutputLine) -> None:
        self._report(kind, site, detail)
        raise CheckFailure(detail.render())
