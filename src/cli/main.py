"""keepsync command line entry point."""

from pathlib import Path

import click

from cli.commands import decide, fix_frontmatter, import_notes, merge, pull
from cli.config import load_config_model
from cli.logging_config import setup_logging
from cli.utils import console


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: ./keepsync.yaml or ~/.keepsync/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, json_logs: bool, config_path: Path):
    """keepsync - reconcile Google Keep notes with a markdown vault."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    try:
        log_cfg = load_config_model(config_path).logging
        level, json_mode, log_file = log_cfg.level, log_cfg.json_mode, log_cfg.log_file
    except ValueError as e:
        console.print(f"[yellow]Ignoring logging config:[/] {e}")
        level, json_mode, log_file = "INFO", False, None

    setup_logging(
        json_mode=json_logs or json_mode,
        level="DEBUG" if verbose else level,
        log_file=log_file,
    )


cli.add_command(import_notes)
cli.add_command(pull)
cli.add_command(decide)
cli.add_command(merge)
cli.add_command(fix_frontmatter)


if __name__ == "__main__":
    cli()
