"""CLI for ObjectTier.

Meant to be called from cron, one command per schedule entry.

Commands:
    init-db     - Create database tables
    delete      - Remove local copies of old DUPLICATED objects
    pull        - Copy small REMOTE objects back to local storage
    recover     - Re-probe objects in ERROR
    run         - delete, pull and recover in sequence
    status      - Object counts and sizes per location
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from object_tier.config import settings
from object_tier.db import async_session_factory, init_db
from object_tier.manipulators import run_manipulator
from object_tier.models import ManipulatorKind
from object_tier.reporting import RunStats, display_size
from object_tier.storage import ObjectFileSystem, RemoteUnavailableError, build_filesystem
from object_tier.store import LocationStore

app = typer.Typer(
    name="object-tier",
    help="ObjectTier — move content-addressed objects between local and remote storage",
    no_args_is_help=True,
)
console = Console()

VerboseOption = Annotated[
    bool, typer.Option("--verbose", "-v", help="Show per-object log output")
]


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


async def run_kinds(
    kinds: list[ManipulatorKind], filesystem: ObjectFileSystem
) -> list[RunStats]:
    """Run manipulators one after another against one session."""
    results: list[RunStats] = []
    async with async_session_factory() as session:
        store = LocationStore(session)
        for kind in kinds:
            results.append(await run_manipulator(kind, store, filesystem, settings))
    return results


def print_run_stats(results: list[RunStats]) -> None:
    table = Table(title="Manipulator runs")
    table.add_column("Action", style="cyan")
    table.add_column("Candidates", justify="right")
    table.add_column("Processed", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Conflicts", justify="right")
    table.add_column("Duration", justify="right")
    for stats in results:
        table.add_row(
            stats.action,
            str(stats.candidate_count),
            str(stats.processed_count),
            display_size(stats.total_bytes),
            str(stats.conflicts),
            f"{stats.duration:.2f}s",
        )
    console.print(table)


def execute_kinds(kinds: list[ManipulatorKind], verbose: bool) -> None:
    configure_logging(verbose)
    try:
        filesystem = build_filesystem(settings)
    except ValueError as e:
        console.print(f"[red]Error:[/red] invalid storage settings: {e}")
        raise typer.Exit(1) from e

    try:
        results = run_async(run_kinds(kinds, filesystem))
    except (RemoteUnavailableError, SQLAlchemyError) as e:
        console.print(f"[red]Error:[/red] run aborted: {e}")
        raise typer.Exit(1) from e
    print_run_stats(results)


@app.command("init-db")
def init_db_command():
    """Create the database tables."""
    run_async(init_db())
    console.print("[green]Database initialized[/green]")


@app.command()
def delete(verbose: VerboseOption = False):
    """Delete local copies of objects duplicated longer than the consistency delay."""
    execute_kinds([ManipulatorKind.DELETER], verbose)


@app.command()
def pull(verbose: VerboseOption = False):
    """Pull REMOTE objects at or under the size threshold back to local storage."""
    execute_kinds([ManipulatorKind.PULLER], verbose)


@app.command()
def recover(verbose: VerboseOption = False):
    """Probe objects in ERROR and record where they actually are."""
    execute_kinds([ManipulatorKind.RECOVERER], verbose)


@app.command()
def run(verbose: VerboseOption = False):
    """Run delete, pull and recover in sequence, each with its own deadline."""
    execute_kinds(
        [ManipulatorKind.DELETER, ManipulatorKind.PULLER, ManipulatorKind.RECOVERER],
        verbose,
    )


@app.command()
def status():
    """Show object counts and total size per location."""
    async def _status():
        async with async_session_factory() as session:
            return await LocationStore(session).count_by_location()

    try:
        summary = run_async(_status())
    except SQLAlchemyError as e:
        console.print(f"[red]Error:[/red] cannot read object records: {e}")
        raise typer.Exit(1) from e

    table = Table(title="Object locations")
    table.add_column("Location", style="cyan")
    table.add_column("Objects", justify="right")
    table.add_column("Size", justify="right")
    for location, entry in summary.items():
        table.add_row(location.value, str(entry.count), display_size(entry.total_bytes))
    console.print(table)

    if not settings.delete_local:
        console.print("[yellow]delete_local is disabled; the deleter will not run.[/yellow]")


if __name__ == "__main__":
    app()
