"""Tests for the validation command runner."""

import shlex
import sys

from deadwood.deletion import CommandValidator, NullValidator, run_validation
from deadwood.deletion.models import CheckOutcome, ValidationRecord


def _python(code):
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


class TestCommandValidator:
    def test_empty_command_is_not_performed(self):
        outcome = CommandValidator().run_type_check()
        assert outcome == CheckOutcome()

    def test_zero_exit_passes(self):
        outcome = CommandValidator(test_cmd=_python("print('ok')")).run_tests()
        assert outcome.performed
        assert outcome.passed
        assert "ok" in outcome.output

    def test_non_zero_exit_fails(self):
        outcome = CommandValidator(type_check_cmd=_python("raise SystemExit(3)")).run_type_check()
        assert outcome.performed
        assert not outcome.passed

    def test_missing_executable_is_not_performed(self):
        outcome = CommandValidator(test_cmd="definitely-not-a-real-binary-xyz").run_tests()
        assert not outcome.performed
        assert not outcome.passed

    def test_timeout_is_not_performed(self):
        validator = CommandValidator(
            test_cmd=_python("import time; time.sleep(5)"), timeout_seconds=1
        )
        outcome = validator.run_tests()
        assert not outcome.performed
        assert outcome.output == "timed out"

    def test_unbalanced_quotes_are_not_performed(self):
        outcome = CommandValidator(test_cmd="pytest 'unterminated").run_tests()
        assert not outcome.performed

    def test_runs_in_cwd(self, tmp_path):
        (tmp_path / "marker.txt").write_text("here")
        validator = CommandValidator(
            test_cmd=_python("import os; print(os.listdir('.'))"), cwd=tmp_path
        )
        assert "marker.txt" in validator.run_tests().output


class TestValidationRecord:
    def test_null_validator_performs_nothing(self):
        record = run_validation(NullValidator())
        assert not record.performed
        assert record.to_dict() == {
            "performed": False,
            "type_check_passed": None,
            "tests_passed": None,
        }

    def test_new_failure_is_a_regression(self):
        baseline = ValidationRecord(tests=CheckOutcome(passed=True, performed=True))
        after = ValidationRecord(tests=CheckOutcome(passed=False, performed=True))
        assert after.regressed_from(baseline) == ["tests"]

    def test_failure_already_at_baseline_is_not_a_regression(self):
        failing = ValidationRecord(type_check=CheckOutcome(passed=False, performed=True))
        assert failing.regressed_from(failing) == []

    def test_check_that_did_not_run_is_not_a_regression(self):
        baseline = ValidationRecord(tests=CheckOutcome(passed=True, performed=True))
        after = ValidationRecord(tests=CheckOutcome(performed=False))
        assert after.regressed_from(baseline) == []
