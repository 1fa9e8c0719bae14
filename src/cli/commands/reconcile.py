"""Inspect how two copies of a note would be reconciled."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from keep.compare import IncomingFileInfo, decide as decide_note, resolve_dates
from keep.constants import (
    FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY,
    FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY,
)
from keep.errors import AppError, to_user_message
from keep.merge import merge_note_bodies
from keep.note import extract_frontmatter, normalize_date
from vault import NoteVault

console = Console()

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _read(path: Path) -> str:
    return NoteVault(path.parent).read(path.name)


def _body(path: Path) -> str:
    return extract_frontmatter(_read(path))[1]


def _fail(err: Exception) -> None:
    console.print(f"[red]Error:[/] {to_user_message(err)}")
    sys.exit(1)


def _incoming_info(path: Path) -> IncomingFileInfo:
    _, body, fields = extract_frontmatter(_read(path))
    return IncomingFileInfo(
        content=body,
        created_date=normalize_date(fields.get(FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY)),
        updated_date=normalize_date(fields.get(FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY)),
    )


def _fmt(value) -> str:
    return value.isoformat() if value else "[dim]-[/]"


@click.command()
@click.argument("existing", type=_FILE)
@click.argument("incoming", type=_FILE)
@click.option("--now", "now_str", help="Fixed ISO time used when incoming dates are missing")
def decide(existing: Path, incoming: Path, now_str: Optional[str]):
    """Show the decision for an EXISTING note and an INCOMING copy."""
    now = normalize_date(now_str) if now_str else None
    if now_str and now is None:
        raise click.BadParameter(f"Not an ISO date: {now_str}", param_hint="--now")
    clock = (lambda: now) if now else None

    try:
        existing_info = NoteVault(existing.parent).existing_file_info(existing.name)
        incoming_info = _incoming_info(incoming)
    except (AppError, ValueError) as e:
        _fail(e)

    dates = resolve_dates(incoming_info, existing_info, clock)
    table = Table(title="Resolved dates")
    table.add_column("Reference")
    table.add_column("Value")
    table.add_row("incoming updated", _fmt(dates.incoming_updated))
    table.add_row("existing updated", _fmt(dates.existing_updated))
    table.add_row("last synced", _fmt(dates.last_synced))
    console.print(table)

    result = decide_note(incoming_info, existing_info, clock)
    console.print(f"Decision: [bold]{result.value}[/]")


@click.command()
@click.argument("existing", type=_FILE)
@click.argument("incoming", type=_FILE)
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write merged body here")
def merge(existing: Path, incoming: Path, output: Optional[Path]):
    """Merge the bodies of EXISTING and INCOMING line by line.

    Exits with status 1 when conflict blocks remain.
    """
    try:
        result = merge_note_bodies(_body(existing), _body(incoming))
        if output:
            NoteVault(output.parent).write(output.name, result.merged)
    except (AppError, ValueError) as e:
        _fail(e)

    if output:
        console.print(f"[green]Wrote merged body to {output}[/]")
    else:
        click.echo(result.merged)

    if result.has_conflict:
        console.print("[yellow]Conflicts found; resolve the marked blocks manually.[/]")
        sys.exit(1)
