"""Per-day markdown log of sync activity, kept inside the vault."""

from pathlib import Path
from typing import Optional

import structlog

from keep.compare import Clock, utc_now
from keep.constants import SYNC_LOG_FOLDER_NAME
from keep.errors import AppError

from .storage import NoteVault

logger = structlog.get_logger()


class SyncLog:
    """Appends ``- HH:MM message`` lines to ``_KeepSidianLogs/YYYY-MM-DD.md``."""

    def __init__(self, vault: NoteVault, clock: Optional[Clock] = None):
        self.vault = vault
        self.clock = clock or utc_now

    def log_path(self) -> Path:
        day = self.clock().strftime("%Y-%m-%d")
        return self.vault.resolve(Path(SYNC_LOG_FOLDER_NAME) / f"{day}.md")

    def write(self, message: str) -> None:
        """Record one line. Failures are logged, never raised."""
        now = self.clock()
        line = f"{now.strftime('%H:%M')} {message}"
        if not line.lstrip().startswith("-"):
            line = f"- {line}"
        try:
            self.vault.append(self.log_path(), f"{line}\n")
        except (AppError, ValueError) as e:
            logger.error("sync_log_write_failed", error=str(e))
