"""Tests for the subprocess runner and git helpers."""

import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from gitbridge.commands import (
    NON_INTERACTIVE_ENV,
    CommandOptions,
    CommandRunner,
    SubprocessRunner,
    create_runner,
    find_repository_root,
    is_versioned_directory,
    read_version,
    resolve_revision,
)
from gitbridge.console import ConsoleStyle
from gitbridge.errors import RepositoryNotFoundError, ToolInvocationError

from .conftest import RecordingSink, StubRunner

PYTHON = sys.executable


class TestSubprocessRunner:
    """Run real child processes through the Python interpreter."""

    def test_satisfies_protocol(self):
        assert isinstance(SubprocessRunner(), CommandRunner)

    def test_captures_trimmed_stdout(self):
        runner = SubprocessRunner()

        result = runner.run(PYTHON, ["-c", "print('  hello  ')"], CommandOptions(silent=True))

        assert result.stdout == "hello"
        assert result.exit_code == 0
        assert result.success
        assert result.duration_ms is not None

    def test_echoes_command_unless_silent(self, sink: RecordingSink):
        runner = SubprocessRunner(sink=sink)

        runner.run(PYTHON, ["-c", "pass"])
        runner.run(PYTHON, ["-c", "pass"], CommandOptions(silent=True))

        assert len(sink.writes) == 1
        text, style = sink.writes[0]
        assert style == ConsoleStyle.SYSTEM_OUTPUT
        assert "-c pass" in text

    def test_non_zero_exit_raises(self):
        runner = SubprocessRunner()
        script = "import sys; sys.stderr.write('boom'); sys.exit(3)"

        with pytest.raises(ToolInvocationError) as exc_info:
            runner.run(PYTHON, ["-c", script], CommandOptions(silent=True))

        error = exc_info.value
        assert error.exit_code == 3
        assert error.stderr == "boom"
        assert error.timeout is False
        assert error.reason == "boom"

    def test_missing_executable_raises(self, tmp_path: Path):
        runner = SubprocessRunner()
        missing = str(tmp_path / "no-such-git")

        with pytest.raises(ToolInvocationError) as exc_info:
            runner.run(missing, ["--version"], CommandOptions(silent=True))

        error = exc_info.value
        assert error.exit_code is None
        assert isinstance(error.cause, FileNotFoundError)
        assert error.tool_name == missing

    def test_timeout_kills_process(self):
        runner = SubprocessRunner()

        with pytest.raises(ToolInvocationError) as exc_info:
            runner.run(
                PYTHON,
                ["-c", "import time; time.sleep(10)"],
                CommandOptions(silent=True, timeout=0.5),
            )

        assert exc_info.value.timeout is True

    def test_working_directory(self, tmp_path: Path):
        runner = SubprocessRunner()

        result = runner.run(
            PYTHON,
            ["-c", "import os; print(os.getcwd())"],
            CommandOptions(silent=True, working_directory=tmp_path),
        )

        assert Path(result.stdout).resolve() == tmp_path.resolve()

    def test_no_interactive_auth_sets_env(self):
        runner = SubprocessRunner()
        script = "import os; print(os.environ['GIT_TERMINAL_PROMPT'], os.environ['GIT_SSH_COMMAND'])"

        result = runner.run(
            PYTHON, ["-c", script], CommandOptions(silent=True, no_interactive_auth=True)
        )

        assert result.stdout == "0 ssh -o BatchMode=yes"

    def test_extra_env(self):
        runner = SubprocessRunner()

        result = runner.run(
            PYTHON,
            ["-c", "import os; print(os.environ['GITBRIDGE_TEST'])"],
            CommandOptions(silent=True, env={"GITBRIDGE_TEST": "yes"}),
        )

        assert result.stdout == "yes"

    def test_inherits_env_by_default(self):
        runner = SubprocessRunner()

        with patch("gitbridge.commands.runner.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "ok\n", "")
            runner.run("git", ["status"], CommandOptions(silent=True))

        assert mock_run.call_args.kwargs["env"] is None
        assert mock_run.call_args.kwargs["stdin"] == subprocess.DEVNULL

    def test_default_timeout_applied(self):
        runner = create_runner(timeout=12)

        with patch("gitbridge.commands.runner.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(["git"], 0, "", "")
            runner.run("git", ["status"], CommandOptions(silent=True))
            runner.run("git", ["status"], CommandOptions(silent=True, timeout=3))

        assert [call.kwargs["timeout"] for call in mock_run.call_args_list] == [12, 3]
        assert runner.default_timeout == 12

    def test_non_interactive_env_contents(self):
        assert NON_INTERACTIVE_ENV["GIT_TERMINAL_PROMPT"] == "0"
        assert NON_INTERACTIVE_ENV["GIT_ASKPASS"] == ""


class TestReadVersion:
    def test_returns_raw_output(self, stub_runner: StubRunner):
        assert read_version(stub_runner, "git") == "git version 2.43.0"

    def test_propagates_invocation_error(self):
        runner = StubRunner({"--version": ToolInvocationError("nope", exit_code=1)})

        with pytest.raises(ToolInvocationError):
            read_version(runner, "git")


class TestRepositoryRoot:
    def test_finds_root_from_nested_file(self, tmp_path: Path):
        (tmp_path / ".git").mkdir()
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        file_path = nested / "module.py"
        file_path.write_text("")

        assert find_repository_root(file_path) == tmp_path.resolve()
        assert find_repository_root(nested) == tmp_path.resolve()

    def test_worktree_git_file_counts(self, tmp_path: Path):
        (tmp_path / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n")

        assert find_repository_root(tmp_path) == tmp_path.resolve()

    def test_raises_outside_repository(self, tmp_path: Path):
        with patch.object(Path, "exists", return_value=False):
            with pytest.raises(RepositoryNotFoundError) as exc_info:
                find_repository_root(tmp_path)

        assert exc_info.value.path == tmp_path

    def test_is_versioned_directory(self, tmp_path: Path):
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        file_path = repo / "README"
        file_path.write_text("")

        assert is_versioned_directory(repo)
        assert not is_versioned_directory(file_path)


class TestResolveRevision:
    HASH = "0123456789abcdef0123456789abcdef01234567"

    def test_builds_revision_with_timestamp(self, tmp_path: Path):
        runner = StubRunner({"log": f"{self.HASH}\n1231236000"})

        revision = resolve_revision(runner, "git", tmp_path, "HEAD~1")

        assert revision.raw == "HEAD~1"
        assert revision.hash == self.HASH
        assert revision.timestamp == datetime(2009, 1, 6, 10, 0, tzinfo=timezone.utc)

        command, args, options = runner.calls[0]
        assert command == "git"
        assert args == ["log", "-n1", "--pretty=format:%H%n%ct", "HEAD~1", "--"]
        assert options.working_directory == tmp_path
        assert options.silent is True
        assert options.no_interactive_auth is True

    @pytest.mark.parametrize("output", ["", "only-a-hash", f"{HASH}\nnot-a-number"])
    def test_unexpected_output_raises(self, tmp_path: Path, output):
        runner = StubRunner({"log": output})

        with pytest.raises(ToolInvocationError):
            resolve_revision(runner, "git", tmp_path, "HEAD")
