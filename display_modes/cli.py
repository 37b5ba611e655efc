"""
display-modes CLI

Usage:
    display-modes daemon [--config PATH] [--log-level LEVEL]
    display-modes run MODE
    display-modes work|home|meeting|eod|walk|lunch
    display-modes displays [--json]
    display-modes state [--json]
    display-modes launchers [--dir PATH]
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__, configure_logging
from .client import DaemonClient
from .launcher import MODE_COMMANDS, write_desktop_entries
from .models import Mode

console = Console()


def _client(ctx: click.Context) -> DaemonClient:
    return DaemonClient(socket_path=ctx.obj.get("socket"))


def display_mode_result(result: Dict[str, Any]) -> None:
    mode = result.get("mode", "?")
    if result.get("completed"):
        console.print(f"[green]✓[/green] {mode}: {result.get('message', '')}")
        if result.get("failed"):
            console.print(f"  [yellow]{result['failed']} window(s) failed to move[/yellow]")
    else:
        console.print(f"[red]✗[/red] {mode}: {result.get('message', '')}")


def display_displays(data: Dict[str, Any]) -> None:
    table = Table(title=f"Displays ({data.get('count', 0)})")
    table.add_column("Rank", justify="right", style="cyan")
    table.add_column("Output", style="bold")
    table.add_column("Geometry")
    table.add_column("Working area")
    table.add_column("DPMS")

    for d in data.get("displays", []):
        table.add_row(
            str(d["rank"]),
            d["name"] + (" (primary)" if d.get("primary") else ""),
            f"{d['width']}x{d['height']}+{d['x']}+{d['y']}",
            f"{d['work_width']}x{d['work_height']}+{d['work_x']}+{d['work_y']}",
            "[green]on[/green]" if d.get("dpms", True) else "[dim]off[/dim]",
        )
    console.print(table)


def _invoke_mode(ctx: click.Context, mode: Mode) -> None:
    try:
        result = _client(ctx).call(mode.value)
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(2)

    display_mode_result(result)
    sys.exit(0 if result.get("completed") else 1)


@click.group()
@click.version_option(__version__, prog_name="display-modes")
@click.option("--socket", "socket_path", type=click.Path(path_type=Path), default=None,
              help="Daemon socket path")
@click.pass_context
def cli(ctx: click.Context, socket_path: Optional[Path]):
    """Arrange windows across displays and switch Slack status by mode."""
    ctx.ensure_object(dict)
    ctx.obj["socket"] = socket_path


@cli.command()
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Config file (default: ~/.config/display-modes/config.toml)")
@click.option("--log-level", default="INFO",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Log level")
def daemon(config_path: Optional[Path], log_level: str):
    """Run the daemon in the foreground."""
    from .daemon import main

    configure_logging(log_level)
    asyncio.run(main(config_path=config_path))


@cli.command()
@click.argument("mode", type=click.Choice([m.value for m in Mode], case_sensitive=False))
@click.pass_context
def run(ctx: click.Context, mode: str):
    """Run MODE through the daemon."""
    _invoke_mode(ctx, Mode.from_str(mode))


def _register_shortcut(command) -> None:
    @cli.command(name=command.mode.value, help=f"{command.title}: {command.description}")
    @click.pass_context
    def shortcut(ctx: click.Context):
        _invoke_mode(ctx, command.mode)


for _command in MODE_COMMANDS:
    _register_shortcut(_command)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output JSON instead of a table")
@click.pass_context
def displays(ctx: click.Context, output_json: bool):
    """List displays in rank order."""
    try:
        data = _client(ctx).call("displays")
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(2)

    if output_json:
        click.echo(json.dumps(data, indent=2))
    else:
        display_displays(data)


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output JSON")
@click.pass_context
def state(ctx: click.Context, output_json: bool):
    """Show daemon state."""
    try:
        data = _client(ctx).call("state")
    except RuntimeError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(2)

    if output_json:
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title="display-modes daemon", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


@cli.command()
@click.option("--dir", "directory", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Target directory (default: ~/.local/share/applications)")
def launchers(directory: Optional[Path]):
    """Write launcher desktop entries for every mode."""
    written = write_desktop_entries(directory)
    for path in written:
        console.print(f"[green]✓[/green] {path}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
