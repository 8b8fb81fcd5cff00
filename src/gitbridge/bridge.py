"""The VcsBridge façade exposed to the host application."""

import dataclasses
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from gitbridge.cache import VersionCache
from gitbridge.commands.base import CommandOptions, CommandResult, CommandRunner
from gitbridge.commands.git import find_repository_root, is_versioned_directory, resolve_revision
from gitbridge.commands.runner import create_runner
from gitbridge.config import BridgeConfig
from gitbridge.console import ConsoleSink, ConsoleStyle
from gitbridge.revision import FULL_HASH_PATTERN, RevisionId, parse_revision
from gitbridge.version import ToolVersion

logger = logging.getLogger(__name__)

# Name under which the bridge registers with the host
VCS_NAME = "Git"


def _single_line(error: BaseException) -> str:
    """Fold a possibly multi-line error message onto one line."""
    return "; ".join(line.strip() for line in str(error).splitlines() if line.strip())


@dataclass(frozen=True)
class CapabilityProviders:
    """Externally supplied capability objects held by the bridge.

    The bridge hands these back to the host unchanged and never looks
    inside them.
    """

    change: Any = None
    diff: Any = None
    history: Any = None
    merge: Any = None
    rollback: Any = None
    checkin: Any = None
    annotation: Any = None
    update: Any = None
    configuration: Any = None
    revision_selector: Any = None


@runtime_checkable
class ListenerHandle(Protocol):
    """An attached file-system change listener."""

    def dispose(self) -> None:
        """Detach the listener and release its resources."""
        ...


@runtime_checkable
class ListenerFactory(Protocol):
    """Creates file-system change listeners bound to a bridge."""

    def attach(self, host_context: Any, bridge: "VcsBridge") -> ListenerHandle:
        """Create and attach a listener for the host context."""
        ...


class VcsBridge:
    """Façade letting a host drive the git executable safely.

    Owns the version cache, parses revisions, runs commands and funnels
    every user-visible error or message into the host's console sink.
    """

    def __init__(
        self,
        config: BridgeConfig,
        providers: CapabilityProviders,
        sink: ConsoleSink,
        runner: CommandRunner | None = None,
        listener_factory: ListenerFactory | None = None,
        host_context: Any = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            config: Bridge configuration
            providers: Capability providers to expose to the host
            sink: Host-owned console sink
            runner: Command runner (defaults to create_runner())
            listener_factory: Factory for the file-system listener
            host_context: Opaque host object passed to the listener factory
        """
        self._config = config
        self._providers = providers
        self._sink = sink
        self._runner = runner or create_runner(
            sink=sink if config.echo_commands else None,
            timeout=config.timeout,
        )
        self._listener_factory = listener_factory
        self._host_context = host_context
        self._listener: ListenerHandle | None = None
        self._version_cache = VersionCache(self._runner, sink, minimum=config.minimum)

    @property
    def name(self) -> str:
        return VCS_NAME

    @property
    def display_name(self) -> str:
        return VCS_NAME

    @property
    def revision_pattern(self) -> str:
        """Regular expression matching full revision identifiers."""
        return FULL_HASH_PATTERN

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @property
    def version_cache(self) -> VersionCache:
        return self._version_cache

    @property
    def is_active(self) -> bool:
        """Whether the file-system listener is attached."""
        return self._listener is not None

    # Capability providers

    @property
    def change_provider(self) -> Any:
        return self._providers.change

    @property
    def diff_provider(self) -> Any:
        return self._providers.diff

    @property
    def history_provider(self) -> Any:
        return self._providers.history

    @property
    def merge_provider(self) -> Any:
        return self._providers.merge

    @property
    def rollback_environment(self) -> Any:
        return self._providers.rollback

    @property
    def checkin_environment(self) -> Any:
        return self._providers.checkin

    @property
    def annotation_provider(self) -> Any:
        return self._providers.annotation

    @property
    def update_environment(self) -> Any:
        return self._providers.update

    @property
    def status_environment(self) -> Any:
        return self._providers.update

    @property
    def integrate_environment(self) -> Any:
        return self._providers.update

    @property
    def configurable(self) -> Any:
        return self._providers.configuration

    @property
    def revision_selector(self) -> Any:
        return self._providers.revision_selector

    # Version detection

    def version(self) -> ToolVersion:
        """Get the configured git version, detecting it only when stale."""
        return self._version_cache.ensure_version(self._config.executable)

    def check_version(self) -> None:
        """Detect the git version and report problems to the console."""
        self.version()

    # Revisions and commands

    def parse_revision(self, revision: str | None, path: Path | None = None) -> RevisionId | None:
        """Parse a revision string.

        Args:
            revision: Revision text (hash, ref, or "date[hash" encoding)
            path: Optional path inside the repository, enabling resolution
                through git

        Returns:
            RevisionId, or None for empty input

        Raises:
            MalformedRevisionError: If a combined date+hash encoding is malformed
        """
        return parse_revision(revision, path, self._resolve_revision)

    def run(self, args: list[str], options: CommandOptions | None = None) -> CommandResult:
        """Run the configured git executable.

        The configured timeout and working directory fill in whatever the
        options leave unset.

        Raises:
            ToolInvocationError: If git fails
        """
        options = options or CommandOptions()
        options = dataclasses.replace(
            options,
            timeout=options.timeout if options.timeout is not None else self._config.timeout,
            working_directory=options.working_directory or self._config.working_path,
        )
        return self._runner.run(self._config.executable, args, options)

    def is_versioned_directory(self, path: Path) -> bool:
        """Check if a directory lies inside a git working tree."""
        return is_versioned_directory(path)

    def _resolve_revision(self, path: Path, revision: str) -> RevisionId:
        root = find_repository_root(path)
        return resolve_revision(self._runner, self._config.executable, root, revision)

    # Lifecycle

    def activate(self) -> None:
        """Attach the file-system listener if it is not attached yet. Never raises."""
        if self._listener is not None or self._listener_factory is None:
            return
        try:
            self._listener = self._listener_factory.attach(self._host_context, self)
        except Exception as e:
            logger.exception("Failed to attach git file listener")
            self.show_error_line(f"Failed to attach git file listener: {e}")

    def deactivate(self) -> None:
        """Dispose the file-system listener if present. Never raises."""
        listener, self._listener = self._listener, None
        if listener is None:
            return
        try:
            listener.dispose()
        except Exception as e:
            logger.exception("Failed to dispose git file listener")
            self.show_error_line(f"Failed to dispose git file listener: {e}")

    # Reporting

    def report_errors(self, errors: Sequence[BaseException], action: str) -> None:
        """Report a batch of errors as one error-styled console message.

        Args:
            errors: Errors collected while performing the action
            action: Label of the action, e.g. "checkin"
        """
        if not errors:
            return
        lines = [f"Errors occurred during {action}:"]
        lines.extend(_single_line(error) for error in errors)
        self._sink.write("\n".join(lines), ConsoleStyle.ERROR)

    def report_message(self, text: str, style: ConsoleStyle = ConsoleStyle.NORMAL) -> None:
        """Write a single styled message; empty text is ignored."""
        if not text:
            return
        self._sink.write(text, style)

    def show_command_line(self, text: str) -> None:
        self.report_message(text, ConsoleStyle.SYSTEM_OUTPUT)

    def show_error_line(self, text: str) -> None:
        self.report_message(text, ConsoleStyle.ERROR)
