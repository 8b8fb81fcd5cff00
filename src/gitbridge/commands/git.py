"""Git-specific invocations built on a CommandRunner."""

from datetime import datetime, timezone
from pathlib import Path

from gitbridge.errors import RepositoryNotFoundError, ToolInvocationError
from gitbridge.revision import RevisionId

from .base import CommandOptions, CommandRunner


def read_version(runner: CommandRunner, executable: str) -> str:
    """Ask the executable for its self-reported version.

    Runs silently with interactive authentication disabled so a version
    check never echoes to the console or blocks on a prompt.

    Args:
        runner: Runner used to launch the tool
        executable: Path or name of the git executable

    Returns:
        Raw version string, e.g. "git version 2.43.0"

    Raises:
        ToolInvocationError: If git cannot be run
    """
    result = runner.run(
        executable,
        ["--version"],
        CommandOptions(silent=True, no_interactive_auth=True, working_directory=Path(".")),
    )
    return result.stdout.strip()


def find_repository_root(path: Path) -> Path:
    """Find the root of the working tree containing a path.

    Args:
        path: A file or directory inside the working tree

    Returns:
        The nearest ancestor directory (inclusive) containing .git

    Raises:
        RepositoryNotFoundError: If no ancestor contains .git
    """
    start = path.resolve()
    if not start.is_dir():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate

    raise RepositoryNotFoundError(f"Not inside a git working tree: {path}", path=path)


def is_versioned_directory(path: Path) -> bool:
    """Check if a directory lies inside a git working tree."""
    if not path.is_dir():
        return False
    try:
        find_repository_root(path)
    except RepositoryNotFoundError:
        return False
    return True


def resolve_revision(
    runner: CommandRunner,
    executable: str,
    root: Path,
    revision: str,
) -> RevisionId:
    """Resolve a revision expression to a full hash and commit time.

    Args:
        runner: Runner used to launch the tool
        executable: Path or name of the git executable
        root: Root of the working tree
        revision: Any revision expression git understands (hash prefix, ref, ...)

    Returns:
        RevisionId with the full commit hash and commit timestamp

    Raises:
        ToolInvocationError: If git fails or prints unexpected output
    """
    result = runner.run(
        executable,
        ["log", "-n1", "--pretty=format:%H%n%ct", revision, "--"],
        CommandOptions(silent=True, no_interactive_auth=True, working_directory=root),
    )

    lines = result.stdout.splitlines()
    if len(lines) < 2:
        raise ToolInvocationError(
            f"Unexpected output resolving revision {revision!r}: {result.stdout!r}",
            tool_name=executable,
        )

    try:
        timestamp = datetime.fromtimestamp(int(lines[1].strip()), tz=timezone.utc)
    except ValueError:
        raise ToolInvocationError(
            f"Unexpected commit time resolving revision {revision!r}: {lines[1]!r}",
            tool_name=executable,
        ) from None

    return RevisionId(raw=revision, hash=lines[0].strip(), timestamp=timestamp)
