"""Command execution for the external git executable.

This module provides the infrastructure for invoking git and capturing
its output. It includes:

- Runner protocol and types (CommandRunner, CommandOptions, CommandResult)
- Blocking subprocess implementation (SubprocessRunner)
- Git helpers (read_version, resolve_revision, find_repository_root)

Example:
    from gitbridge.commands import CommandOptions, create_runner

    runner = create_runner()
    result = runner.run("git", ["status", "--short"], CommandOptions(silent=True))
    print(result.stdout)
"""

from gitbridge.errors import (
    BridgeError,
    RepositoryNotFoundError,
    ToolInvocationError,
)

from .base import CommandOptions, CommandResult, CommandRunner
from .git import (
    find_repository_root,
    is_versioned_directory,
    read_version,
    resolve_revision,
)
from .runner import DEFAULT_TIMEOUT, NON_INTERACTIVE_ENV, SubprocessRunner, create_runner

__all__ = [
    # Base types
    "CommandRunner",
    "CommandOptions",
    "CommandResult",
    # Exceptions
    "BridgeError",
    "ToolInvocationError",
    "RepositoryNotFoundError",
    # Subprocess runner
    "SubprocessRunner",
    "create_runner",
    "DEFAULT_TIMEOUT",
    "NON_INTERACTIVE_ENV",
    # Git helpers
    "read_version",
    "resolve_revision",
    "find_repository_root",
    "is_versioned_directory",
]
