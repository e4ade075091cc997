"""Tests for the goldfish command line interface."""

# Standard library imports
import sys
import textwrap

# Third-party imports
import pytest
from click.testing import CliRunner

# Local/package imports
from goldfish import cli as cli_module
from goldfish.cli import cli, generate_examples
from goldfish.config import load_commands
from goldfish.core.types import Platform

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX sh")

CUSTOM_COMMANDS = """
commands:
  - name: fail
    description: Exit with a status
    base_command: exit
    params:
      - name: code
        type: int
        required: true
    platforms:
      linux:
        template: "{{.base_command}} {{.params.code}}"
  - name: nap
    base_command: sleep
    platforms:
      linux:
        template: "exec {{.base_command}} 30"
  - name: repeat
    base_command: seq
    params:
      - name: count
        type: int
        flag: --count
      - name: step
        type: float
        flag: --step
    platforms:
      linux:
        template: "{{.base_command}}{{if .params.step}} {{.params.step}}{{end}}{{if .params.count}} {{.params.count}}{{end}}"
  - name: only-windows
    base_command: dir
    platforms:
      windows:
        template: "{{.base_command}}"
"""


@pytest.fixture(autouse=True)
def linux_host(monkeypatch):
    monkeypatch.setattr(cli_module, "detect_platform", lambda: Platform.LINUX)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "commands.yml"
    path.write_text(textwrap.dedent(CUSTOM_COMMANDS))
    return path


class TestDryRun:
    def test_replace_in_place(self, runner):
        result = runner.invoke(cli, ["--dry-run", "replace", "--in-place", "s/a/b/", "notes.txt"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "sed -i 's/a/b/' notes.txt"

    def test_replace_without_flag(self, runner):
        result = runner.invoke(cli, ["--dry-run", "replace-in-file", "s/a/b/", "notes.txt"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "sed  's/a/b/' notes.txt"

    def test_find_uses_default_path(self, runner):
        result = runner.invoke(cli, ["--dry-run", "find", "--name", "*.py"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "find .  -name '*.py'"

    def test_archive_flags(self, runner):
        result = runner.invoke(cli, ["--dry-run", "tar", "--compress", "out.tgz", "src"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "tar -czf out.tgz src"

    def test_typed_options(self, runner, config_file):
        result = runner.invoke(
            cli,
            ["--config", str(config_file), "--dry-run", "repeat", "--count", "3", "--step", "0.5"],
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "seq 0.5 3"

    def test_bad_option_value_is_a_usage_error(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "repeat", "--count", "many"])
        assert result.exit_code == 2


class TestErrors:
    def test_missing_required_parameter(self, runner):
        result = runner.invoke(cli, ["--dry-run", "replace", "s/a/b/"])
        assert result.exit_code == 1
        assert "MISSING_REQUIRED_PARAMETER" in result.output
        assert "file" in result.output

    def test_conversion_failure(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "fail", "three"])
        assert result.exit_code == 1
        assert "CONVERSION_ERROR" in result.output

    def test_unknown_command(self, runner):
        result = runner.invoke(cli, ["no-such-command"])
        assert result.exit_code == 2

    def test_command_for_other_platform_is_hidden(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "only-windows"])
        assert result.exit_code == 2

    def test_missing_config_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["--config", str(tmp_path / "missing.yml"), "list"])
        assert result.exit_code == 1
        assert "CONFIG_ERROR" in result.output

    def test_commands_file_from_environment(self, runner, config_file, monkeypatch):
        monkeypatch.setenv("GOLDFISH_COMMANDS_FILE", str(config_file))
        result = runner.invoke(cli, ["--dry-run", "fail", "4"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "exit 4"


@posix_only
class TestExecution:
    @pytest.mark.parametrize("code", [0, 3, 42])
    def test_exit_code_is_propagated(self, runner, config_file, code):
        result = runner.invoke(cli, ["--config", str(config_file), "fail", str(code)])
        assert result.exit_code == code

    def test_non_zero_exit_is_reported(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "fail", "3"])
        assert result.exit_code == 3
        assert "fail: command failed with exit code 3" in result.output

    def test_success_is_quiet(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "fail", "0"])
        assert result.exit_code == 0
        assert "command failed" not in result.output

    def test_timeout(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "--timeout", "0.3", "nap"])
        assert result.exit_code == 124
        assert "TIMED_OUT" in result.output

    def test_default_timeout_from_environment(self, runner, config_file, monkeypatch):
        monkeypatch.setenv("GOLDFISH_DEFAULT_TIMEOUT", "0.3")
        result = runner.invoke(cli, ["--config", str(config_file), "nap"])
        assert result.exit_code == 124


class TestBuiltins:
    def test_list(self, runner):
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "replace-in-file (replace):" in result.stdout
        assert "in-place --in-place (bool, optional)" in result.stdout

    def test_list_marks_unavailable_commands(self, runner, config_file):
        result = runner.invoke(cli, ["--config", str(config_file), "list"])
        assert result.exit_code == 0
        assert "only-windows [not available on linux]" in result.stdout

    def test_help_lists_generated_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("replace-in-file", "find-files", "archive-create", "list"):
            assert name in result.stdout

    def test_command_help(self, runner):
        result = runner.invoke(cli, ["replace", "--help"])
        assert result.exit_code == 0
        assert "--in-place" in result.stdout
        assert "goldfish replace-in-file <expression> <file>" in result.stdout

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "goldfish" in result.stdout

    def test_log_file(self, runner, tmp_path):
        log_file = tmp_path / "logs" / "goldfish.log"
        result = runner.invoke(
            cli,
            ["--log-file", str(log_file), "--debug", "--dry-run", "tar", "a.tar", "b"],
        )
        assert result.exit_code == 0
        assert "Rendered archive-create" in log_file.read_text()


def test_generate_examples():
    replace = load_commands().find("replace")
    examples = generate_examples(replace)
    assert "goldfish replace-in-file <expression> <file>" in examples
    assert "goldfish replace <expression> <file>" in examples
