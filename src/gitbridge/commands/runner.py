"""Blocking subprocess runner for the external version-control tool."""

import logging
import os
import shlex
import subprocess
import time

from gitbridge.console import ConsoleSink, ConsoleStyle
from gitbridge.errors import ToolInvocationError

from .base import CommandOptions, CommandResult

logger = logging.getLogger(__name__)

# Default timeout for tool commands
DEFAULT_TIMEOUT = 30  # seconds

# Environment that makes git and ssh fail instead of prompting for credentials
NON_INTERACTIVE_ENV: dict[str, str] = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_ASKPASS": "",
    "SSH_ASKPASS": "",
    "GIT_SSH_COMMAND": "ssh -o BatchMode=yes",
}


class SubprocessRunner:
    """Runs the external tool via subprocess and captures its output.

    Each call spawns its own process and shares no mutable state, so one
    runner can serve any number of worker threads.
    """

    def __init__(
        self,
        sink: ConsoleSink | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the runner.

        Args:
            sink: Console sink that receives command lines of non-silent runs
            default_timeout: Timeout in seconds when options don't specify one
        """
        self._sink = sink
        self._default_timeout = default_timeout

    @property
    def default_timeout(self) -> float:
        """Timeout in seconds used when options don't specify one."""
        return self._default_timeout

    def run(
        self,
        command: str,
        args: list[str],
        options: CommandOptions | None = None,
    ) -> CommandResult:
        """Run a command with the given arguments.

        Args:
            command: Executable to launch
            args: Arguments to pass to the executable
            options: Invocation options

        Returns:
            CommandResult with trimmed stdout

        Raises:
            ToolInvocationError: If the process cannot start, exits non-zero
                or exceeds the timeout
        """
        options = options or CommandOptions()
        cmd = [command, *args]
        cmd_str = shlex.join(cmd)
        timeout = options.timeout if options.timeout is not None else self._default_timeout

        if not options.silent and self._sink is not None:
            self._sink.write(cmd_str, ConsoleStyle.SYSTEM_OUTPUT)
        logger.debug("Running %s (cwd=%s)", cmd_str, options.working_directory)

        start_time = time.perf_counter()
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                stdin=subprocess.DEVNULL,
                cwd=options.working_directory,
                env=self._get_env(options),
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            # subprocess.run kills the child before re-raising
            raise ToolInvocationError(
                f"Command timed out after {timeout}s: {cmd_str}",
                tool_name=command,
                timeout=True,
            ) from None
        except OSError as e:
            # FileNotFoundError, PermissionError and friends
            raise ToolInvocationError(
                f"Failed to execute '{command}': {e}",
                tool_name=command,
                cause=e,
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if completed.returncode != 0:
            raise ToolInvocationError(
                f"{cmd_str} exited with code {completed.returncode}: {completed.stderr.strip()}",
                tool_name=command,
                exit_code=completed.returncode,
                stderr=completed.stderr,
            )

        return CommandResult(
            stdout=completed.stdout.strip(),
            stderr=completed.stderr,
            exit_code=completed.returncode,
            command=cmd_str,
            duration_ms=duration_ms,
        )

    def _get_env(self, options: CommandOptions) -> dict[str, str] | None:
        """Get environment variables for the subprocess.

        Returns None (inherit) when no overrides are needed.
        """
        if not options.env and not options.no_interactive_auth:
            return None

        env = os.environ.copy()
        if options.env:
            env.update(options.env)
        if options.no_interactive_auth:
            env.update(NON_INTERACTIVE_ENV)
        return env


def create_runner(
    sink: ConsoleSink | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> SubprocessRunner:
    """Factory function to create a subprocess runner.

    Args:
        sink: Console sink for command echo
        timeout: Default command timeout in seconds

    Returns:
        Configured SubprocessRunner instance
    """
    return SubprocessRunner(sink=sink, default_timeout=timeout)
