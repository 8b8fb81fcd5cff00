"""Base runner protocol and result types for external tool invocation."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass
class CommandOptions:
    """Options controlling a single tool invocation.

    Attributes:
        silent: Suppress echoing the command line to the console sink
        no_interactive_auth: Disable every prompt-capable authentication path
        working_directory: Directory to run the command from
        timeout: Seconds before the process is killed (None = runner default)
        env: Extra environment variables for the child process
    """

    silent: bool = False
    no_interactive_auth: bool = False
    working_directory: Path | None = None
    timeout: float | None = None
    env: dict[str, str] | None = None


@dataclass
class CommandResult:
    """Captured output of a successful invocation.

    Attributes:
        stdout: Standard output, trimmed
        stderr: Standard error output
        exit_code: Process exit code (always 0 for returned results)
        command: The command line as displayed to the user
        duration_ms: How long the command took in milliseconds
    """

    stdout: str
    stderr: str
    exit_code: int
    command: str
    duration_ms: float | None = None

    @property
    def success(self) -> bool:
        """Whether the command succeeded (exit code 0)."""
        return self.exit_code == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for anything that can invoke the external tool.

    Implementations must be safe to call from several threads at once.
    """

    def run(
        self,
        command: str,
        args: list[str],
        options: CommandOptions | None = None,
    ) -> CommandResult:
        """Run a command and capture its output.

        Args:
            command: Executable to launch
            args: Arguments passed to the executable
            options: Invocation options (defaults apply when None)

        Returns:
            CommandResult with trimmed stdout

        Raises:
            ToolInvocationError: On launch failure, non-zero exit or timeout
        """
        ...
