"""Shared CLI utilities."""

import sys
from pathlib import Path
from typing import Optional

import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def get_components(config_path: Optional[Path] = None, vault_dir: Optional[Path] = None) -> dict:
    """Initialize vault, sync log and syncer from config.

    Args:
        config_path: Explicit config file (defaults to the standard locations)
        vault_dir: Overrides ``sync.vault_dir`` from config
    """
    from cli.config import load_config_model
    from keep.sync import NoteSyncer
    from vault import NoteVault, SyncLog

    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)

    vault = NoteVault(vault_dir or config.sync.vault_dir)
    sync_log = SyncLog(vault)
    syncer = NoteSyncer(vault, sync_log=sync_log, strategy=config.sync.strategy)

    return {
        "config": config,
        "vault": vault,
        "sync_log": sync_log,
        "syncer": syncer,
    }
