"""CLI interface for gitbridge."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from gitbridge import __version__
from gitbridge.bridge import CapabilityProviders, VcsBridge
from gitbridge.commands.base import CommandOptions
from gitbridge.config import BridgeConfig, load_config, load_default_config
from gitbridge.console import RichConsoleSink
from gitbridge.errors import MalformedRevisionError, ToolInvocationError

app = typer.Typer(
    name="gitbridge",
    help="Drive the git executable through a version-checked bridge.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to a gitbridge config TOML file"),
]
ExecutableOption = Annotated[
    str | None,
    typer.Option("--executable", "-x", help="git executable to use (overrides config)"),
]


def _load_bridge_config(config: Path | None, executable: str | None) -> BridgeConfig:
    """Load config from a file or the default location, applying CLI overrides."""
    try:
        bridge_config = load_config(config) if config else load_default_config()
        if executable:
            bridge_config = BridgeConfig.model_validate(
                {**bridge_config.model_dump(), "executable": executable}
            )
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        raise typer.Exit(1) from None
    except Exception as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        raise typer.Exit(1) from None
    return bridge_config


def create_bridge(config: Path | None = None, executable: str | None = None) -> VcsBridge:
    """Create a bridge printing to this CLI's console.

    The CLI holds no capability providers; only the core operations are used.
    """
    bridge_config = _load_bridge_config(config, executable)
    return VcsBridge(bridge_config, CapabilityProviders(), RichConsoleSink(console))


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"gitbridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """gitbridge: version-gated access to the git executable."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


@app.command("version")
def show_version(
    config: ConfigOption = None,
    executable: ExecutableOption = None,
) -> None:
    """Detect the git version and check it is supported."""
    bridge = create_bridge(config, executable)
    detected = bridge.version()

    if not detected.is_checked:
        console.print(f"[red]Could not detect git version ({bridge.config.executable})[/red]")
        raise typer.Exit(1)

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Executable", bridge.config.executable)
    table.add_row("Version", str(detected))
    table.add_row("Minimum", bridge.config.minimum_version)
    supported = detected.is_supported(bridge.config.minimum)
    table.add_row("Supported", "[green]yes[/green]" if supported else "[yellow]no[/yellow]")
    console.print(table)


@app.command()
def parse(
    revision: Annotated[str, typer.Argument(help="Revision text to parse")],
    path: Annotated[
        Path | None,
        typer.Option("--path", "-p", help="Path inside the repository, to resolve via git"),
    ] = None,
    config: ConfigOption = None,
    executable: ExecutableOption = None,
) -> None:
    """Parse a revision string into a hash and optional timestamp."""
    bridge = create_bridge(config, executable)
    try:
        parsed = bridge.parse_revision(revision, path)
    except MalformedRevisionError as e:
        bridge.report_errors([e], "revision parsing")
        raise typer.Exit(1) from None

    if parsed is None:
        console.print("[yellow]No revision given[/yellow]")
        raise typer.Exit(1)

    console.print(f"hash: {parsed.hash}", markup=False)
    if parsed.timestamp is not None:
        console.print(f"timestamp: {parsed.timestamp.isoformat()}")


@app.command(
    "exec",
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    },
)
def exec_command(
    args: Annotated[list[str], typer.Argument(help="Arguments passed to git")],
    silent: Annotated[
        bool,
        typer.Option("--silent", "-s", help="Don't echo the command line"),
    ] = False,
    no_auth: Annotated[
        bool,
        typer.Option("--no-auth", help="Fail instead of prompting for credentials"),
    ] = False,
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Working directory for git"),
    ] = None,
    config: ConfigOption = None,
    executable: ExecutableOption = None,
) -> None:
    """Run git with the given arguments and print its output.

    Options for this command must come before the first git argument;
    everything after it is passed to git unchanged.
    """
    bridge = create_bridge(config, executable)
    options = CommandOptions(silent=silent, no_interactive_auth=no_auth, working_directory=cwd)
    try:
        result = bridge.run(args, options)
    except ToolInvocationError as e:
        bridge.report_errors([e], "git " + " ".join(args))
        raise typer.Exit(1) from None

    if result.stdout:
        console.print(result.stdout, markup=False, highlight=False)


if __name__ == "__main__":
    app()
