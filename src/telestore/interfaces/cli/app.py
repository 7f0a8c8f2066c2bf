"""CLI application for telestore using Rich and Typer."""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from telestore.core.errors import StoreError
from telestore.core.fs import ChannelFS, close_filesystem, open_filesystem
from telestore.core.types import Directory

T = TypeVar("T")

app = typer.Typer(
    name="telestore",
    help="telestore CLI - a file store kept in a Telegram channel",
    no_args_is_help=True,
)

console = Console()


def _format_size(size: int) -> str:
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if value < 1024 or unit == "GiB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _parse_mod_time(value: Optional[int]) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def _run(action: Callable[[ChannelFS], Awaitable[T]]) -> T:
    """Run an action against the configured filesystem, reporting errors."""

    async def _go() -> T:
        fs = await open_filesystem()
        try:
            return await action(fs)
        finally:
            await close_filesystem()

    try:
        return asyncio.run(_go())
    except StoreError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)


@app.command("ls")
def list_dir(directory: str = typer.Argument("", help="Directory to list")):
    """List files and directories."""
    entries = _run(lambda fs: fs.list(directory))

    if not entries:
        console.print("[dim]No entries.[/dim]")
        return

    table = Table(title=directory or "/", show_header=True)
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for entry in entries:
        if isinstance(entry, Directory):
            table.add_row(f"[bold blue]{entry.name}/[/bold blue]", "", "")
        else:
            table.add_row(
                entry.name,
                _format_size(entry.size),
                entry.mod_time.strftime("%Y-%m-%d %H:%M:%S"),
            )

    console.print(table)


@app.command()
def stat(path: str = typer.Argument(..., help="File path")):
    """Show file metadata."""
    obj = _run(lambda fs: fs.stat(path))

    table = Table(title=obj.remote, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Size", f"{obj.size} ({_format_size(obj.size)})")
    table.add_row("Modified", obj.mod_time.isoformat())
    table.add_row("Key", obj.key)
    console.print(table)


@app.command()
def cat(path: str = typer.Argument(..., help="File path")):
    """Write file content to stdout."""
    data = _run(lambda fs: fs.read(path))
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


@app.command()
def get(
    path: str = typer.Argument(..., help="File path"),
    dest: Path = typer.Argument(..., help="Local destination file"),
):
    """Download a file."""

    async def _download(fs: ChannelFS) -> int:
        written = 0
        async with fs.open(path) as chunks:
            with open(dest, "wb") as f:
                async for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
        return written

    written = _run(_download)
    console.print(f"[green]Downloaded {path} ({_format_size(written)})[/green]")


@app.command()
def put(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local file"),
    path: str = typer.Argument(..., help="Destination path"),
    mod_time: Optional[int] = typer.Option(
        None, "--mod-time", "-m", help="Modification time (unix seconds)"
    ),
):
    """Upload a file, replacing any file already at path."""
    data = source.read_bytes()
    obj = _run(lambda fs: fs.put(path, data, size=len(data), mod_time=_parse_mod_time(mod_time)))
    console.print(f"[green]Stored {obj.remote} ({_format_size(obj.size)})[/green]")


@app.command()
def rm(path: str = typer.Argument(..., help="File path")):
    """Delete a file."""
    _run(lambda fs: fs.remove(path))
    console.print(f"[green]Removed {path}[/green]")


@app.command()
def touch(
    path: str = typer.Argument(..., help="File path"),
    mod_time: Optional[int] = typer.Option(
        None, "--mod-time", "-m", help="Modification time (unix seconds, default now)"
    ),
):
    """Set the modification time of an existing file."""
    moment = _parse_mod_time(mod_time) or datetime.now(UTC)
    obj = _run(lambda fs: fs.set_mod_time(path, moment))
    console.print(f"[green]{obj.remote} modified at {obj.mod_time.isoformat()}[/green]")


@app.callback()
def main(
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
):
    """telestore CLI - a file store kept in a Telegram channel."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )


def run_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run_cli()
