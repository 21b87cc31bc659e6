"""CLI entrypoint using typer."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from memgroup_client.facade import CacheFacade
from memgroup_client.observability import configure_logging, configure_tracing
from memgroup_core.config.settings import Settings
from memgroup_core.exceptions import MemgroupError

app = typer.Typer(
    name="memgroup",
    help="Inspect and invalidate a group-scoped memcached cache",
)
console = Console()
logger = structlog.get_logger()

_VERBOSE = typer.Option(False, "-v", "--verbose", help="Enable debug logging")


@contextmanager
def _open_cache(verbose: bool) -> Iterator[CacheFacade]:
    """Build settings, configure observability and yield an owned facade."""
    try:
        settings = Settings()
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] invalid configuration\n{escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if verbose:
        settings.log_level = "DEBUG"

    configure_logging(settings)
    configure_tracing(settings)

    try:
        with CacheFacade.from_settings(settings) as cache:
            yield cache
    except MemgroupError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command()
def get(
    key: str = typer.Argument(..., help="Cache key"),
    verbose: bool = _VERBOSE,
) -> None:
    """Print the value cached under KEY."""
    with _open_cache(verbose) as cache:
        value = cache.get(key)
    if value is None:
        console.print(f"[yellow]miss[/yellow] {key}")
        raise typer.Exit(code=1)
    console.print(repr(value))


@app.command()
def put(
    key: str = typer.Argument(..., help="Cache key"),
    value: str = typer.Argument(..., help="String value to store"),
    group: str = typer.Option(..., "--group", "-g", help="Group id the entry belongs to"),
    verbose: bool = _VERBOSE,
) -> None:
    """Store VALUE under KEY as a member of GROUP."""
    with _open_cache(verbose) as cache:
        cache.put(key, value, group)
    console.print(f"[green]stored[/green] {key} in group {group}")


@app.command()
def remove(
    key: str = typer.Argument(..., help="Cache key"),
    verbose: bool = _VERBOSE,
) -> None:
    """Delete KEY and print the value it held."""
    with _open_cache(verbose) as cache:
        previous = cache.remove(key)
    if previous is None:
        console.print(f"[yellow]miss[/yellow] {key}")
        return
    console.print(f"[green]removed[/green] {key} = {previous!r}")


@app.command("remove-group")
def remove_group(
    group: str = typer.Argument(..., help="Group id"),
    verbose: bool = _VERBOSE,
) -> None:
    """Delete every entry of GROUP and the group index."""
    with _open_cache(verbose) as cache:
        deleted = cache.remove_group(group)
    console.print(f"[green]removed group[/green] {group} ({deleted} entries deleted)")


@app.command()
def members(
    group: str = typer.Argument(..., help="Group id"),
    verbose: bool = _VERBOSE,
) -> None:
    """List the store keys currently indexed under GROUP."""
    with _open_cache(verbose) as cache:
        keys = cache.members(group)

    if not keys:
        console.print(f"[yellow]group {group} is empty[/yellow]")
        return

    table = Table(title=f"group {group}")
    table.add_column("store key")
    for store_key in sorted(keys):
        table.add_row(store_key)
    console.print(table)


@app.command()
def version() -> None:
    """Show version."""
    console.print("memgroup v0.1.0")


if __name__ == "__main__":
    app()
