"""Vault maintenance commands."""

import sys
from pathlib import Path

import click
from rich.console import Console

from cli.utils import get_components
from keep.migrations import fix_frontmatter_casing

console = Console()


@click.command("fix-frontmatter")
@click.option(
    "--vault",
    "vault_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Vault directory (overrides config)",
)
@click.pass_context
def fix_frontmatter(ctx: click.Context, vault_dir: Path):
    """Rename legacy hyphenated frontmatter keys to PascalCase."""
    c = get_components(ctx.obj.get("config_path"), vault_dir)

    with console.status("Scanning notes..."):
        result = fix_frontmatter_casing(c["vault"])

    console.print(f"Scanned {result.scanned} notes, updated [green]{len(result.updated)}[/]")
    for path in result.failed:
        console.print(f"[red]Failed:[/] {path}")
    if not result.ok:
        sys.exit(1)
