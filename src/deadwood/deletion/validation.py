"""Validation port: type check and test commands run around each batch."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Optional, Protocol, Union

from ..exceptions import ProcessError
from ..logging_config import get_logger
from .models import CheckOutcome, ValidationRecord

logger = get_logger(__name__)

# Keep only the tail of command output; test runners can be chatty
MAX_OUTPUT_CHARS = 4000


class ValidationPort(Protocol):
    def run_type_check(self) -> CheckOutcome: ...

    def run_tests(self) -> CheckOutcome: ...


class NullValidator:
    """Performs no checks. Every outcome is "not performed"."""

    def run_type_check(self) -> CheckOutcome:
        return CheckOutcome()

    def run_tests(self) -> CheckOutcome:
        return CheckOutcome()


class CommandValidator:
    """Run shell commands as the type check and test suite.

    A non-zero exit status is a failed check. A command that cannot be
    launched or does not finish within ``timeout_seconds`` is reported as
    not performed.
    """

    def __init__(
        self,
        type_check_cmd: str = "",
        test_cmd: str = "",
        cwd: Optional[Union[str, Path]] = None,
        timeout_seconds: int = 600,
    ):
        self.type_check_cmd = type_check_cmd
        self.test_cmd = test_cmd
        self.cwd = str(cwd) if cwd is not None else None
        self.timeout_seconds = timeout_seconds

    def run_type_check(self) -> CheckOutcome:
        return self._run(self.type_check_cmd)

    def run_tests(self) -> CheckOutcome:
        return self._run(self.test_cmd)

    def _run(self, command: str) -> CheckOutcome:
        if not command.strip():
            return CheckOutcome()

        try:
            result = subprocess.run(
                shlex.split(command),
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            error = ProcessError(command, "timed out", timeout=self.timeout_seconds)
        except OSError as e:
            error = ProcessError(command, str(e))
        except ValueError as e:
            # shlex could not split the command line
            error = ProcessError(command, str(e))
        else:
            output = (result.stdout + result.stderr)[-MAX_OUTPUT_CHARS:]
            logger.debug(f"{command} exited with {result.returncode}")
            return CheckOutcome(passed=result.returncode == 0, performed=True, output=output)

        logger.warning(str(error))
        return CheckOutcome(passed=False, performed=False, output=error.reason)


def run_validation(port: ValidationPort) -> ValidationRecord:
    """Run both checks through ``port``."""
    return ValidationRecord(type_check=port.run_type_check(), tests=port.run_tests())
