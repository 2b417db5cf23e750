from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import numpy as np
import pytest

from checkrun import Tester, TesterConfiguration
from checkrun.core import ExitStatus, Outcome, UsageError

from conftest import NO_COLOR, marker_line
from suites import Basic, Empty, Sample


def _line(number: int) -> int:
    return marker_line(f"check {number}")


def test_full_run_output(out: io.StringIO) -> None:
    suite = Sample(out)
    suite.register_test("here.py", "TesterTest::Test")
    result = suite.exec(NO_COLOR, out, out)

    assert result == 1
    expected = (
        "Starting TesterTest::Test with 18 test cases...\n"
        "     ? [ 1] <unknown>()\n"
        "    OK [ 2] true_expression()\n"
        f"  FAIL [ 3] false_expression() at here.py on line {_line(2)} \n"
        "        Expression 5 != 5 failed.\n"
        "    OK [ 4] equal()\n"
        f"  FAIL [ 5] non_equal() at here.py on line {_line(4)} \n"
        "        Values a and b are not the same, actual is 5 but expected 3\n"
        f" XFAIL [ 6] expect_fail_scope() at here.py on line {_line(5)} \n"
        "        The world is not mad yet. 2 + 2 and 5 are not equal.\n"
        f" XFAIL [ 6] expect_fail_scope() at here.py on line {_line(6)} \n"
        "        The world is not mad yet. Expression False == True failed.\n"
        "    OK [ 6] expect_fail_scope()\n"
        f" XPASS [ 7] unexpected_pass_expression() at here.py on line {_line(9)} \n"
        "        Expression True == True was expected to fail.\n"
        f" XPASS [ 8] unexpected_pass_equal() at here.py on line {_line(10)} \n"
        "        2 + 2 and 4 are not expected to be equal.\n"
        "    OK [ 9] compare_as_length()\n"
        f"  FAIL [10] compare_as_length_fail() at here.py on line {_line(12)} \n"
        "        Length of actual \"meh\" doesn't match length of expected \"hello\" with epsilon 0\n"
        "    OK [11] compare_with_length()\n"
        f"  FAIL [12] compare_with_length_fail() at here.py on line {_line(14)} \n"
        "        Length of actual \"You rather GTFO\" doesn't match length of expected \"hello\" with epsilon 9\n"
        f"  FAIL [13] compare_implicit_conversion_fail() at here.py on line {_line(15)} \n"
        "        Values \"holla\" and hello are not the same, actual is 'holla' but expected 'hello'\n"
        "  SKIP [14] skipped() \n"
        "        This testcase is skipped.\n"
        "       [15] setting up...\n"
        "       [15] tearing down...\n"
        "    OK [15] setup_teardown()\n"
        "       [16] setting up...\n"
        "       [16] tearing down...\n"
        "     ? [16] <unknown>()\n"
        "       [17] setting up...\n"
        f"  FAIL [17] setup_teardown_error() at here.py on line {_line(17)} \n"
        "        Expression False failed.\n"
        "       [17] tearing down...\n"
        "       [18] setting up...\n"
        "       [18] tearing down...\n"
        "  SKIP [18] setup_teardown_skip() \n"
        "        Skipped.\n"
        "Finished TesterTest::Test with 8 errors out of 17 checks. "
        "2 test cases didn't contain any checks!\n"
    )
    assert out.getvalue() == expected


def test_empty_suite(out: io.StringIO) -> None:
    suite = Empty()
    suite.register_test("here.py", "TesterTest::EmptyTest")
    result = suite.exec(NO_COLOR, out, out)

    assert result == ExitStatus.NO_TESTS == 2
    assert out.getvalue() == "No tests to run in TesterTest::EmptyTest!\n"


def test_only_and_skip_keep_registration_order(out: io.StringIO) -> None:
    suite = Sample(out)
    suite.register_test("here.py", "TesterTest::Test")
    result = suite.exec(NO_COLOR + ["--only", "11 14 4 9", "--skip", "14"], out, out)

    assert result == 0
    assert out.getvalue() == (
        "Starting TesterTest::Test with 3 test cases...\n"
        "    OK [ 4] equal()\n"
        "    OK [ 9] compare_as_length()\n"
        "    OK [11] compare_with_length()\n"
        "Finished TesterTest::Test with 0 errors out of 3 checks.\n"
    )


def test_only_runs_in_registration_order(out: io.StringIO) -> None:
    suite = Basic()
    suite.register_test("basic.py", "Basic")
    suite.exec(NO_COLOR + ["--only", "3 1"], out, out)

    lines = out.getvalue().splitlines()
    assert lines[0] == "Starting Basic with 2 test cases..."
    assert lines[1] == "    OK [1] passing()"
    assert lines[2] == "  SKIP [3] skipping() "


def test_skip_never_adds_cases(out: io.StringIO) -> None:
    suite = Basic()
    suite.register_test("basic.py", "Basic")
    result = suite.exec(NO_COLOR + ["--only", "1", "--skip", "2 3"], out, out)

    assert result == 0
    assert out.getvalue() == (
        "Starting Basic with 1 test cases...\n"
        "    OK [1] passing()\n"
        "Finished Basic with 0 errors out of 1 checks.\n"
    )


def test_padding_follows_highest_selected_id(out: io.StringIO) -> None:
    suite = Sample(out)
    suite.register_test("here.py", "TesterTest::Test")
    suite.exec(NO_COLOR + ["--only", "2 4"], out, out)

    assert "    OK [2] true_expression()\n    OK [4] equal()\n" in out.getvalue()


def test_pass_fail_skip_scenario(out: io.StringIO) -> None:
    suite = Basic()
    suite.register_test("basic.py", "Basic")
    result = suite.exec(NO_COLOR, out, out)

    assert result == 1
    assert out.getvalue() == (
        "Starting Basic with 3 test cases...\n"
        "    OK [1] passing()\n"
        f"  FAIL [2] failing() at basic.py on line {marker_line('check basic')} \n"
        "        Expression False failed.\n"
        "  SKIP [3] skipping() \n"
        "        reason\n"
        "Finished Basic with 1 errors out of 2 checks.\n"
    )


def test_failures_go_to_error_output() -> None:
    log, error = io.StringIO(), io.StringIO()
    suite = Basic()
    suite.exec(NO_COLOR, log, error)

    assert "OK [1]" in log.getvalue()
    assert "SKIP [3]" in log.getvalue()
    assert "FAIL [2]" in error.getvalue()
    assert error.getvalue().splitlines()[-1].startswith("Finished Basic with 1 errors")
    assert "FAIL" not in log.getvalue()


def test_default_names_come_from_the_class(out: io.StringIO) -> None:
    suite = Basic()
    suite.exec(NO_COLOR + ["--only", "2"], out, out)

    assert "Starting Basic with 1 test cases..." in out.getvalue()
    assert "failing() at suites.py on line" in out.getvalue()


class Counting(Tester):
    def __init__(self) -> None:
        super().__init__()
        self.add_tests([self.three_checks, self.expected_failures, self.expected_pass, self.after])
        self.reached_after_xfail = False
        self.reached_after_xpass = False

    def three_checks(self) -> None:
        self.verify(1)
        self.compare("a", "a")
        self.compare_as(3, 3.0, float)

    def expected_failures(self) -> None:
        with self.expect_fail("Known bug."):
            self.verify(False)
            self.compare(1, 2)
        self.reached_after_xfail = True

    def expected_pass(self) -> None:
        with self.expect_fail("Known bug."):
            self.compare(1, 1)
            self.reached_after_xpass = True

    def after(self) -> None:
        self.verify(True)


def test_check_count_and_expected_failure_inversion(out: io.StringIO) -> None:
    suite = Counting()
    result = suite.exec(NO_COLOR, out, out)
    text = out.getvalue()

    assert result == 1
    assert suite.reached_after_xfail
    assert not suite.reached_after_xpass
    assert "    OK [1] three_checks()" in text
    assert text.count(" XFAIL [2] expected_failures()") == 2
    assert "    OK [2] expected_failures()" in text
    assert " XPASS [3] expected_pass()" in text
    assert "1 and 1 are not expected to be equal." in text
    assert "    OK [4] after()" in text
    assert text.endswith("Finished Counting with 1 errors out of 7 checks.\n")


class Misbehaving(Tester):
    def __init__(self) -> None:
        super().__init__()
        self.add_tests([self.nested_scopes, self.raises, self.swallows_signal, self.disabled_scopes])

    def nested_scopes(self) -> None:
        with self.expect_fail("outer"):
            with self.expect_fail("inner"):
                self.verify(False)

    def raises(self) -> None:
        self.verify(True)
        {}["missing"]  # raises here

    def swallows_signal(self) -> None:
        try:
            self.verify(False)
        except Exception:
            pass
        self.verify(True)

    def disabled_scopes(self) -> None:
        with self.expect_fail("off", False):
            with self.expect_fail("also off", 0):
                self.verify(True)


def test_nested_expected_failure_is_a_usage_error(out: io.StringIO) -> None:
    suite = Misbehaving()
    result = suite.exec(NO_COLOR + ["--only", "1"], out, out)

    assert result == 2
    assert "cannot be nested" in out.getvalue()


def test_unexpected_exception_fails_the_case(out: io.StringIO) -> None:
    suite = Misbehaving()
    result = suite.exec(NO_COLOR + ["--only", "2 3 4"], out, out)
    text = out.getvalue()

    assert result == 1
    assert "  FAIL [2] raises() at test_tester.py on line" in text
    assert "Unexpected exception KeyError: 'missing'" in text
    assert "  FAIL [3] swallows_signal()" in text
    assert "    OK [3] swallows_signal()" not in text
    assert "    OK [4] disabled_scopes()" in text
    assert text.endswith("with 2 errors out of 3 checks.\n")


def test_unexpected_exception_points_at_raising_line(out: io.StringIO) -> None:
    suite = Misbehaving()
    suite.exec(NO_COLOR + ["--only", "2"], out, out)

    line = marker_line("raises here", path=Path(__file__))
    assert f"on line {line} \n" in out.getvalue()


def test_add_tests_rejects_empty_group() -> None:
    suite = Empty()
    with pytest.raises(UsageError):
        suite.add_tests([])


def test_add_tests_rejected_after_run(out: io.StringIO) -> None:
    suite = Basic()
    suite.exec(NO_COLOR, out, out)
    with pytest.raises(UsageError):
        suite.add_tests([suite.passing])


def test_checks_outside_a_run_are_rejected() -> None:
    suite = Basic()
    with pytest.raises(UsageError):
        suite.verify(True)


def test_case_ids_follow_registration_order() -> None:
    suite = Sample(io.StringIO())
    cases = suite.test_cases

    assert [case.id for case in cases] == list(range(1, 19))
    assert cases[0].name == "no_checks"
    assert cases[14].setup == suite.setup
    assert cases[13].setup is None


def test_out_of_range_selection_is_a_usage_error(out: io.StringIO) -> None:
    suite = Basic()
    result = suite.exec(NO_COLOR + ["--only", "1 7"], out, out)

    assert result == 2
    assert "out of range" in out.getvalue()
    assert "Starting" not in out.getvalue()


def test_unknown_option_is_rejected(out: io.StringIO) -> None:
    suite = Basic()
    result = suite.exec(NO_COLOR + ["--gl-version", "4.5"], out, out)

    assert result == 2
    assert "--gl-version" in out.getvalue()


def test_skipped_argument_prefixes_are_ignored(out: io.StringIO) -> None:
    suite = Basic(TesterConfiguration(("gl",)))
    result = suite.exec(NO_COLOR + ["--gl-version", "4.5", "--only", "1"], out, out)

    assert result == 0
    assert "OK [1] passing()" in out.getvalue()


def test_run_results_expose_outcomes(out: io.StringIO, tmp_path) -> None:
    report = tmp_path / "report.json"
    suite = Basic()
    suite.exec(NO_COLOR + ["--json-report", str(report)], out, out)

    payload = json.loads(report.read_text(encoding="utf-8"))
    statuses = [case["status"] for case in payload["cases"]]
    assert statuses == [Outcome.OK.value, Outcome.FAILED.value, Outcome.SKIPPED.value]
    assert payload["summary"]["exit_code"] == 1
    assert payload["cases"][2]["skip_message"] == "reason"


class Mixed(Tester):
    def __init__(self) -> None:
        super().__init__(TesterConfiguration(("gl",)))
        self.add_tests([self.array_against_list, self.shared_line, self.arguments])
        self.add_tests([self.nested_with_teardown], self.prepare, self.cleanup)
        self.cleaned_up = False
        self.seen_arguments = None

    def array_against_list(self) -> None:
        self.compare(np.array([1.0, 2.0]), [1.0, 2.0])
        self.compare([1.0, 2.0], np.array([1.0, 2.0]))

    def shared_line(self) -> None:
        x, y = 1, 2
        self.compare(x, x); self.compare(y, x)  # noqa: E702

    def arguments(self) -> None:
        self.seen_arguments = self.skipped_arguments

    def prepare(self) -> None:
        self.cleaned_up = False

    def cleanup(self) -> None:
        self.cleaned_up = True

    def nested_with_teardown(self) -> None:
        with self.expect_fail("outer"):
            with self.expect_fail("inner"):
                self.verify(False)


def test_array_compares_against_list_in_both_orders(out: io.StringIO) -> None:
    suite = Mixed()
    result = suite.exec(NO_COLOR + ["--only", "1"], out, out)

    assert result == 0
    assert "    OK [1] array_against_list()" in out.getvalue()
    assert out.getvalue().endswith("with 0 errors out of 2 checks.\n")


def test_second_check_on_a_shared_line_is_labelled_by_its_own_arguments(out: io.StringIO) -> None:
    suite = Mixed()
    result = suite.exec(NO_COLOR + ["--only", "2"], out, out)
    text = out.getvalue()

    assert result == 1
    assert "Values x and x" not in text
    if sys.version_info >= (3, 11):
        assert "Values y and x are not the same, actual is 2 but expected 1" in text
    else:
        assert "Values 2 and 1 are not the same, actual is 2 but expected 1" in text


def test_skipped_arguments_reach_the_suite(out: io.StringIO) -> None:
    suite = Mixed()
    result = suite.exec(NO_COLOR + ["--gl-version", "4.5", "--only", "3"], out, out)

    assert result == 0
    assert suite.seen_arguments == ("--gl-version", "4.5")


def test_teardown_runs_when_a_case_misuses_the_harness(out: io.StringIO) -> None:
    suite = Mixed()
    result = suite.exec(NO_COLOR + ["--only", "4"], out, out)

    assert result == 2
    assert "cannot be nested" in out.getvalue()
    assert suite.cleaned_up
