"""Tests for running rendered commands through the shell."""

# Standard library imports
import os
import subprocess
import sys
import time

# Third-party imports
import pytest

# Local/package imports
from goldfish.core.exceptions import (
    CommandTimeoutError,
    NonZeroExitError,
    SpawnError,
)
from goldfish.core.types import ExecutionStatus
from goldfish.engine.runner import ProcessRunner, shell_command

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX sh")


@pytest.fixture
def runner():
    return ProcessRunner(default_timeout=10.0, grace_period=1.0)


def test_shell_command_per_platform():
    assert shell_command("ls | wc -l", "linux") == ["sh", "-c", "ls | wc -l"]
    assert shell_command("ls", "darwin") == ["sh", "-c", "ls"]
    assert shell_command("dir", "windows") == ["cmd", "/c", "dir"]


def test_default_timeout_must_be_positive():
    with pytest.raises(ValueError):
        ProcessRunner(default_timeout=0)


@pytest.mark.parametrize("timeout,expected", [(None, 10.0), (0, 10.0), (-1, 10.0), (2.5, 2.5)])
def test_effective_timeout(runner, timeout, expected):
    assert runner.effective_timeout(timeout) == expected


@posix_only
def test_successful_command(runner):
    outcome = runner.run("true", platform="linux")
    assert outcome.ok
    assert outcome.status is ExecutionStatus.SUCCEEDED
    assert outcome.exit_code == 0
    assert outcome.error is None
    assert outcome.command == "true"
    assert outcome.duration is not None and outcome.duration >= 0
    outcome.raise_for_status()


@posix_only
@pytest.mark.parametrize("code", [1, 2, 42, 127, 255])
def test_exit_code_is_preserved(runner, code):
    outcome = runner.run(f"exit {code}", platform="linux")
    assert outcome.status is ExecutionStatus.FAILED
    assert outcome.exit_code == code
    assert isinstance(outcome.error, NonZeroExitError)
    assert outcome.error.exit_code == code
    with pytest.raises(NonZeroExitError):
        outcome.raise_for_status()


@posix_only
def test_shell_syntax_is_passed_through(runner, tmp_path):
    target = tmp_path / "out.txt"
    outcome = runner.run(f"echo hello | tr a-z A-Z > '{target}'", platform="linux")
    assert outcome.ok
    assert target.read_text().strip() == "HELLO"


@posix_only
def test_timeout_stops_the_process(runner, tmp_path):
    pid_file = tmp_path / "pid"
    start = time.monotonic()
    outcome = runner.run(f"echo $$ > '{pid_file}'; exec sleep 30", timeout=0.5, platform="linux")
    elapsed = time.monotonic() - start

    assert outcome.status is ExecutionStatus.TIMED_OUT
    assert isinstance(outcome.error, CommandTimeoutError)
    assert outcome.error.timeout == 0.5
    assert outcome.error.command == f"echo $$ > '{pid_file}'; exec sleep 30"
    assert outcome.exit_code == 124
    assert elapsed < 10

    pid = int(pid_file.read_text().strip())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@posix_only
def test_zero_timeout_uses_default():
    runner = ProcessRunner(default_timeout=0.3, grace_period=1.0)
    outcome = runner.run("sleep 30", timeout=0, platform="linux")
    assert outcome.status is ExecutionStatus.TIMED_OUT
    assert outcome.error.timeout == 0.3


@posix_only
def test_signal_death_maps_to_shell_convention(runner):
    outcome = runner.run("kill -TERM $$", platform="linux")
    assert outcome.status is ExecutionStatus.FAILED
    assert outcome.exit_code == 128 + 15


@posix_only
def test_missing_shell_is_a_spawn_failure(runner):
    # No cmd.exe on POSIX hosts
    outcome = runner.run("dir", platform="windows")
    assert outcome.status is ExecutionStatus.SPAWN_FAILED
    assert isinstance(outcome.error, SpawnError)
    assert outcome.exit_code == 127


def test_spawn_failure_from_popen(runner, monkeypatch):
    def fail(*args, **kwargs):
        raise PermissionError("not allowed")

    monkeypatch.setattr(subprocess, "Popen", fail)
    outcome = runner.run("anything", platform="linux")
    assert outcome.status is ExecutionStatus.SPAWN_FAILED
    assert isinstance(outcome.error.cause, PermissionError)
    assert outcome.to_dict()["status"] == "spawn_failed"


@posix_only
def test_command_not_found_is_a_shell_exit_code(runner):
    outcome = runner.run("definitely-not-a-real-command-xyz 2>/dev/null", platform="linux")
    assert outcome.status is ExecutionStatus.FAILED
    assert outcome.exit_code == 127


def _is_running(pid):
    """True while ``pid`` exists and is not a zombie awaiting its reaper."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    try:
        with open(f"/proc/{pid}/stat") as f:
            state = f.read().rsplit(")", 1)[1].split()[0]
    except OSError:
        return True
    return state != "Z"


def _wait_until_gone(pid, deadline=5.0):
    end = time.monotonic() + deadline
    while time.monotonic() < end:
        if not _is_running(pid):
            return True
        time.sleep(0.05)
    return False


@posix_only
def test_timeout_stops_every_pipeline_stage(runner, tmp_path):
    pid_file = tmp_path / "pid"
    outcome = runner.run(
        f"sh -c 'echo $$ > \"{pid_file}\"; sleep 30' | cat", timeout=0.5, platform="linux"
    )
    assert outcome.status is ExecutionStatus.TIMED_OUT
    pid = int(pid_file.read_text().strip())
    assert _wait_until_gone(pid)


@posix_only
def test_timeout_stops_background_jobs(runner, tmp_path):
    pid_file = tmp_path / "pid"
    outcome = runner.run(
        f"sleep 30 & echo $! > '{pid_file}'; wait", timeout=0.5, platform="linux"
    )
    assert outcome.status is ExecutionStatus.TIMED_OUT
    pid = int(pid_file.read_text().strip())
    assert _wait_until_gone(pid)


@posix_only
def test_stubborn_group_members_are_killed(tmp_path):
    runner = ProcessRunner(default_timeout=0.5, grace_period=0.5)
    pid_file = tmp_path / "pid"
    outcome = runner.run(
        f"sh -c 'trap \"\" TERM; echo $$ > \"{pid_file}\"; while :; do sleep 1; done' | cat",
        platform="linux",
    )
    assert outcome.status is ExecutionStatus.TIMED_OUT
    pid = int(pid_file.read_text().strip())
    assert _wait_until_gone(pid)
