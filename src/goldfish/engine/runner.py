"""
Execution of rendered command lines through the system shell.
"""

import os
import signal
import subprocess
import time
from typing import List, Optional

from ..core.exceptions import CommandTimeoutError, NonZeroExitError, SpawnError
from ..core.types import ExecutionOutcome, ExecutionStatus, Platform
from ..platform import detect_platform
from ..utils.logger import get_logger

DEFAULT_TIMEOUT = 30.0
TERMINATE_GRACE_PERIOD = 5.0

logger = get_logger(__name__)


def shell_command(command_line: str, platform: str) -> List[str]:
    """Argument vector that runs ``command_line`` in the platform's shell."""
    if str(platform) == Platform.WINDOWS.value:
        return ["cmd", "/c", command_line]
    return ["sh", "-c", command_line]


class ProcessRunner:
    """Runs one shell command line with inherited stdio and a deadline."""

    def __init__(
        self,
        default_timeout: float = DEFAULT_TIMEOUT,
        grace_period: float = TERMINATE_GRACE_PERIOD,
    ):
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        self.default_timeout = default_timeout
        self.grace_period = grace_period

    def effective_timeout(self, timeout: Optional[float]) -> float:
        """Zero or no timeout means the runner default, never unbounded."""
        if not timeout or timeout <= 0:
            return self.default_timeout
        return timeout

    def _signal_group(self, process: subprocess.Popen, sig: int) -> None:
        try:
            os.killpg(process.pid, sig)
        except (ProcessLookupError, PermissionError):
            # Group already gone
            pass

    def _stop(self, process: subprocess.Popen) -> None:
        """Stop the process and everything the shell started.

        On POSIX the shell leads its own process group, so pipeline stages
        and background jobs are signalled together with it. Whatever is
        still in the group after the grace period is killed.
        """
        if os.name != "posix":
            process.terminate()
            try:
                process.wait(timeout=self.grace_period)
            except subprocess.TimeoutExpired:
                logger.warning("Process %s ignored terminate, killing", process.pid)
                process.kill()
                process.wait()
            return

        self._signal_group(process, signal.SIGTERM)
        try:
            process.wait(timeout=self.grace_period)
        except subprocess.TimeoutExpired:
            logger.warning("Process group %s ignored SIGTERM, killing", process.pid)
        self._signal_group(process, signal.SIGKILL)
        process.wait()

    def run(
        self,
        command_line: str,
        timeout: Optional[float] = None,
        platform: Optional[str] = None,
    ) -> ExecutionOutcome:
        """Execute ``command_line`` and report how it ended.

        Standard input, output and error are connected to this process's
        own streams. The outcome carries the child's exit code verbatim.

        Args:
            command_line: Fully rendered command text
            timeout: Seconds before the process is stopped; 0 or None for
                the runner default
            platform: Platform whose shell runs the command; defaults to
                the detected host platform

        Returns:
            ExecutionOutcome describing success, non-zero exit, timeout or
            spawn failure
        """
        timeout = self.effective_timeout(timeout)
        platform = platform or detect_platform()
        argv = shell_command(command_line, platform)

        outcome = ExecutionOutcome(
            status=ExecutionStatus.SUCCEEDED,
            command=command_line,
            start_time=time.time(),
        )

        logger.debug("Running %s (timeout %ss)", argv, timeout)
        try:
            # New session so a timeout can reach the whole process tree
            process = subprocess.Popen(argv, start_new_session=os.name == "posix")
        except OSError as e:
            logger.error("Failed to start shell for %r: %s", command_line, e)
            outcome.status = ExecutionStatus.SPAWN_FAILED
            outcome.error = SpawnError(command_line, e)
            outcome.exit_code = outcome.error.exit_code
            outcome.end_time = time.time()
            return outcome

        try:
            returncode = process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self._stop(process)
            outcome.end_time = time.time()
            logger.error("Command timed out after %ss: %s", timeout, command_line)
            outcome.status = ExecutionStatus.TIMED_OUT
            outcome.error = CommandTimeoutError(command_line, timeout)
            outcome.exit_code = outcome.error.exit_code
            return outcome
        except BaseException:
            # Interrupted while waiting; don't leave the child behind.
            self._stop(process)
            raise

        outcome.end_time = time.time()
        if returncode < 0:
            returncode = 128 - returncode
        outcome.exit_code = returncode

        if returncode != 0:
            logger.info("Command exited with code %d: %s", returncode, command_line)
            outcome.status = ExecutionStatus.FAILED
            outcome.error = NonZeroExitError(command_line, returncode)
        else:
            logger.debug("Command finished in %.3fs", outcome.duration)

        return outcome
