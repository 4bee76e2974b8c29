"""CLI commands for delugerpc.

Every command opens one session, logs in, runs its calls and closes the
session again.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from delugerpc import __logo__, __version__
from delugerpc.cli.logging_utils import configure_logging
from delugerpc.client import DelugeClient
from delugerpc.config.loader import load_config
from delugerpc.config.schema import ClientSettings
from delugerpc.utils.exceptions import DelugeRpcError, RemoteError

T = TypeVar("T")

app = typer.Typer(
    name="delugerpc",
    help=f"{__logo__} delugerpc - Deluge daemon RPC client",
    no_args_is_help=True,
)

console = Console()


def _format_error(exc: DelugeRpcError) -> str:
    if isinstance(exc, RemoteError):
        return f"daemon rejected the call: {exc.exception_type}: {exc.exception_message}"
    return f"{exc.code}: {exc.message}"


def _parse_option(text: str) -> tuple[str, Any]:
    """Parse ``key=value``; booleans and integers are converted."""
    key, sep, raw = text.partition("=")
    if not sep or not key.strip():
        raise typer.BadParameter(f"expected key=value, got {text!r}")
    lowered = raw.strip().lower()
    value: Any
    if lowered in ("true", "false"):
        value = lowered == "true"
    else:
        try:
            value = int(raw.strip())
        except ValueError:
            value = raw
    return key.strip(), value


def _with_client(ctx: typer.Context, action: Callable[[DelugeClient], T]) -> T:
    settings: ClientSettings = ctx.obj
    try:
        with DelugeClient(settings) as client:
            return action(client)
    except DelugeRpcError as exc:
        console.print(f"[red]{_format_error(exc)}[/red]")
        raise typer.Exit(1) from exc


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} delugerpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file (default ~/.delugerpc/config.json)"),
    host: Optional[str] = typer.Option(None, "--host", "-H", help="Daemon hostname"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Daemon port"),
    login: Optional[str] = typer.Option(None, "--login", "-u", help="Daemon username"),
    password: Optional[str] = typer.Option(None, "--password", help="Daemon password"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-call read/write timeout in seconds"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log wire-level detail"),
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
) -> None:
    """Talk to a Deluge daemon over its RPC protocol."""
    try:
        settings = load_config(
            config,
            hostname=host,
            port=port,
            login=login,
            password=password,
            timeout_seconds=timeout,
            verify_certificate=False if insecure else None,
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    configure_logging(settings.log_level, settings.log_file, verbose=verbose)
    ctx.obj = settings


@app.command()
def info(ctx: typer.Context) -> None:
    """Show daemon version and login class."""
    version, class_id = _with_client(ctx, lambda client: (client.daemon_version(), client.class_id))
    settings: ClientSettings = ctx.obj
    console.print(f"{__logo__} Deluge daemon at {settings.address}")
    console.print(f"Version: [cyan]{version}[/cyan]")
    console.print(f"Login class: {class_id}")


@app.command()
def methods(ctx: typer.Context) -> None:
    """List the RPC methods the daemon exposes."""
    names = _with_client(ctx, lambda client: client.methods_list())
    for name in sorted(names):
        console.print(name)


@app.command()
def session(ctx: typer.Context) -> None:
    """List torrent ids in the daemon session."""
    ids = _with_client(ctx, lambda client: client.get_session_state())
    if not ids:
        console.print("No torrents.")
        return
    for torrent_id in ids:
        console.print(torrent_id)
    console.print(f"[dim]{len(ids)} torrent(s)[/dim]")


@app.command()
def status(
    ctx: typer.Context,
    torrent_id: str = typer.Argument(..., help="Torrent id (info hash)"),
    key: Optional[list[str]] = typer.Option(None, "--key", "-k", help="Status field to fetch (repeatable)"),
) -> None:
    """Show status fields of one torrent."""
    fields = _with_client(ctx, lambda client: client.get_torrent_status(torrent_id, key or []))
    if not fields:
        console.print(f"[yellow]No status for {torrent_id}[/yellow]")
        return
    table = Table(title=f"Torrent {torrent_id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name in sorted(fields):
        table.add_row(name, str(fields[name]))
    console.print(table)


@app.command()
def add(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Magnet URI or torrent URL"),
    option: Optional[list[str]] = typer.Option(None, "--option", "-o", help="Add option key=value (repeatable)"),
) -> None:
    """Add a torrent by magnet URI or URL."""
    options = dict(_parse_option(item) for item in option or [])
    if source.startswith("magnet:"):
        torrent_hash = _with_client(ctx, lambda client: client.add_torrent_magnet(source, options))
    else:
        torrent_hash = _with_client(ctx, lambda client: client.add_torrent_url(source, options))
    if torrent_hash:
        console.print(f"[green]✓[/green] Added {torrent_hash}")
    else:
        console.print("[yellow]Torrent already present[/yellow]")


@app.command()
def remove(
    ctx: typer.Context,
    torrent_id: str = typer.Argument(..., help="Torrent id (info hash)"),
    remove_data: bool = typer.Option(False, "--remove-data", help="Also delete downloaded data"),
) -> None:
    """Remove a torrent from the session."""
    removed = _with_client(ctx, lambda client: client.remove_torrent(torrent_id, remove_data))
    if removed:
        console.print(f"[green]✓[/green] Removed {torrent_id}")
    else:
        console.print(f"[yellow]Daemon did not remove {torrent_id}[/yellow]")


@app.command()
def move(
    ctx: typer.Context,
    torrent_ids: list[str] = typer.Argument(..., help="Torrent ids to move"),
    dest: str = typer.Option(..., "--dest", "-d", help="Destination directory on the daemon host"),
) -> None:
    """Move torrent storage to another directory."""
    _with_client(ctx, lambda client: client.move_storage(torrent_ids, dest))
    console.print(f"[green]✓[/green] Moving {len(torrent_ids)} torrent(s) to {dest}")
