"""Console sink protocol and the Rich-backed default sink."""

from enum import Enum
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.text import Text


class ConsoleStyle(str, Enum):
    """How a console line should be rendered."""

    NORMAL = "normal"
    ERROR = "error"
    SYSTEM_OUTPUT = "system"  # Command lines and tool diagnostics


@runtime_checkable
class ConsoleSink(Protocol):
    """Host-owned destination for user-visible text.

    The bridge never renders UI itself; every message goes through write().
    """

    def write(self, text: str, style: ConsoleStyle) -> None:
        """Write a (possibly multi-line) message with the given style."""
        ...


_RICH_STYLES: dict[ConsoleStyle, str] = {
    ConsoleStyle.NORMAL: "",
    ConsoleStyle.ERROR: "red",
    ConsoleStyle.SYSTEM_OUTPUT: "dim",
}


class RichConsoleSink:
    """Console sink that prints through a rich Console.

    Text is wrapped in rich.text.Text so tool output containing square
    brackets is never interpreted as markup.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """The underlying rich console."""
        return self._console

    def write(self, text: str, style: ConsoleStyle) -> None:
        self._console.print(Text(text, style=_RICH_STYLES[style]))
