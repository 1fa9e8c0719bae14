"""Sync CLI commands: import from an export file or pull from the server."""

import sys
from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from cli.utils import get_components
from keep.api import JsonFileSource, KeepApiClient
from keep.errors import AppError, to_user_message
from keep.sync import SyncCallbacks, SyncReport
from shared_types import SyncAction

console = Console()
logger = structlog.get_logger()


def _print_report(report: SyncReport) -> None:
    table = Table(title=f"Synced {report.total} notes")
    table.add_column("Action")
    table.add_column("Notes", justify="right")
    for action in SyncAction:
        count = report.count(action)
        if count:
            table.add_row(action.value.replace("_", " "), str(count))
    console.print(table)
    if report.attachments:
        console.print(f"Downloaded {report.attachments} attachments")

    conflicts = [o for o in report.outcomes if o.action == SyncAction.CONFLICT_COPY]
    for outcome in conflicts:
        console.print(f"[yellow]Conflict:[/] {outcome.title} -> {outcome.path}")


def _run(c: dict, fetch_page) -> None:
    page_size = c["config"].sync.page_size
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Syncing notes", total=None)
        callbacks = SyncCallbacks(
            set_total_notes=lambda total: progress.update(task, total=total),
            report_progress=lambda: progress.advance(task),
        )
        try:
            report = c["syncer"].import_notes(fetch_page, page_size=page_size, callbacks=callbacks)
        except AppError as e:
            progress.stop()
            console.print(f"[red]Sync failed:[/] {to_user_message(e)}")
            sys.exit(1)

    _print_report(report)


@click.command("import")
@click.argument("export_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--vault",
    "vault_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Vault directory (overrides config)",
)
@click.pass_context
def import_notes(ctx: click.Context, export_file: Path, vault_dir: Path):
    """Sync notes from a JSON export file into the vault."""
    c = get_components(ctx.obj.get("config_path"), vault_dir)
    source = JsonFileSource(export_file)
    _run(c, source.fetch_notes)


@click.command("pull")
@click.option(
    "--vault",
    "vault_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Vault directory (overrides config)",
)
@click.pass_context
def pull(ctx: click.Context, vault_dir: Path):
    """Sync notes from the configured sync server."""
    c = get_components(ctx.obj.get("config_path"), vault_dir)
    server = c["config"].server
    if not server.email or not server.token:
        console.print("[red]Config error:[/] server.email and server.token are required")
        sys.exit(1)

    retry = c["config"].retry
    with KeepApiClient(
        server.url,
        server.email,
        server.token,
        timeout=server.timeout,
        max_attempts=retry.max_attempts,
        min_wait=retry.min_wait,
        max_wait=retry.max_wait,
    ) as client:
        if c["config"].sync.download_attachments:
            c["syncer"].fetch_blob = client.fetch_blob
            c["syncer"].blob_base_url = server.url
        _run(c, client.fetch_notes)
