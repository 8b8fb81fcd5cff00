"""Shared pytest fixtures, a recording console sink and a stub runner."""

import threading
from collections.abc import Callable
from typing import ClassVar

import pytest

from gitbridge.bridge import CapabilityProviders, VcsBridge
from gitbridge.commands.base import CommandOptions, CommandResult
from gitbridge.config import BridgeConfig
from gitbridge.console import ConsoleStyle
from gitbridge.errors import ToolInvocationError


class RecordingSink:
    """Console sink that records every write for assertions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.writes: list[tuple[str, ConsoleStyle]] = []

    def write(self, text: str, style: ConsoleStyle) -> None:
        with self._lock:
            self.writes.append((text, style))

    def styles(self) -> list[ConsoleStyle]:
        return [style for _, style in self.writes]

    def texts(self) -> list[str]:
        return [text for text, _ in self.writes]


class StubRunner:
    """Command runner that never spawns processes.

    Responses are looked up by the first argument ("--version", "log", ...).
    A response may be a string (stdout), an exception to raise, or a
    callable taking (command, args, options) and returning either.
    """

    default_responses: ClassVar[dict[str, str]] = {"--version": "git version 2.43.0"}

    def __init__(
        self,
        responses: dict[str, str | Exception | Callable] | None = None,
    ) -> None:
        self.responses: dict[str, str | Exception | Callable] = dict(self.default_responses)
        if responses:
            self.responses.update(responses)
        self.calls: list[tuple[str, list[str], CommandOptions | None]] = []

    def run(
        self,
        command: str,
        args: list[str],
        options: CommandOptions | None = None,
    ) -> CommandResult:
        self.calls.append((command, list(args), options))

        key = args[0] if args else ""
        if key not in self.responses:
            raise ToolInvocationError(
                f"{command} {key}: unknown command", tool_name=command, exit_code=1
            )

        response = self.responses[key]
        if callable(response) and not isinstance(response, Exception):
            response = response(command, args, options)
        if isinstance(response, Exception):
            raise response

        return CommandResult(
            stdout=response.strip(),
            stderr="",
            exit_code=0,
            command=" ".join([command, *args]),
        )

    def calls_for(self, first_arg: str) -> list[tuple[str, list[str], CommandOptions | None]]:
        return [call for call in self.calls if call[1][:1] == [first_arg]]


def missing_executable_error(command: str = "git") -> ToolInvocationError:
    """Build the error a runner raises for an executable that isn't installed."""
    cause = FileNotFoundError(2, "No such file or directory", command)
    return ToolInvocationError(
        f"Failed to execute '{command}': {cause}", tool_name=command, cause=cause
    )


class FakeListener:
    """File-system listener handle that records disposal."""

    def __init__(self) -> None:
        self.disposed = 0

    def dispose(self) -> None:
        self.disposed += 1


class FakeListenerFactory:
    """Listener factory recording every attach call."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.attached: list[tuple[object, VcsBridge]] = []
        self.listeners: list[FakeListener] = []

    def attach(self, host_context: object, bridge: VcsBridge) -> FakeListener:
        if self.fail:
            raise RuntimeError("listener service unavailable")
        self.attached.append((host_context, bridge))
        listener = FakeListener()
        self.listeners.append(listener)
        return listener


# --- Pytest Fixtures ---


@pytest.fixture
def sink() -> RecordingSink:
    """Provide an empty recording sink."""
    return RecordingSink()


@pytest.fixture
def stub_runner() -> StubRunner:
    """Provide a stub runner reporting git 2.43.0."""
    return StubRunner()


@pytest.fixture
def providers() -> CapabilityProviders:
    """Provide a provider set with a distinct marker object per capability."""
    return CapabilityProviders(
        change=object(),
        diff=object(),
        history=object(),
        merge=object(),
        rollback=object(),
        checkin=object(),
        annotation=object(),
        update=object(),
        configuration=object(),
        revision_selector=object(),
    )


@pytest.fixture
def make_bridge(sink: RecordingSink, stub_runner: StubRunner, providers: CapabilityProviders):
    """Provide a factory for bridges wired to the recording sink and stub runner."""

    def factory(**kwargs) -> VcsBridge:
        config = kwargs.pop("config", None) or BridgeConfig()
        kwargs.setdefault("runner", stub_runner)
        kwargs.setdefault("providers", providers)
        return VcsBridge(config, sink=sink, **kwargs)

    return factory
