"""Rewrite legacy hyphenated frontmatter keys to their PascalCase names."""

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from vault.storage import NoteVault

from .constants import LEGACY_FRONTMATTER_KEYS, MEDIA_FOLDER_NAME, SYNC_LOG_FOLDER_NAME
from .errors import AppError

logger = structlog.get_logger()

_FRONTMATTER_BLOCK = re.compile(r"^---\r?\n([\s\S]*?)\r?\n---")
_KEY_PATTERNS = [
    (re.compile(rf"(^|\r?\n)(\s*){re.escape(legacy)}(\s*:)"), pascal)
    for legacy, pascal in LEGACY_FRONTMATTER_KEYS.items()
]


@dataclass
class MigrationResult:
    scanned: int = 0
    updated: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def replace_legacy_keys(frontmatter: str) -> tuple[str, bool]:
    """Rename legacy keys in a frontmatter block. Returns (text, changed)."""
    updated = frontmatter
    for pattern, pascal in _KEY_PATTERNS:
        updated = pattern.sub(lambda m, p=pascal: f"{m.group(1)}{m.group(2)}{p}{m.group(3)}", updated)
    return updated, updated != frontmatter


def fix_note_text(content: str) -> str:
    """Return ``content`` with its leading frontmatter keys fixed, or unchanged."""
    match = _FRONTMATTER_BLOCK.match(content)
    if not match:
        return content

    block = match.group(1)
    if not any(legacy in block for legacy in LEGACY_FRONTMATTER_KEYS):
        return content

    updated, changed = replace_legacy_keys(block)
    if not changed:
        return content

    newline = "\r\n" if "\r\n" in match.group(0) else "\n"
    return f"---{newline}{updated}{newline}---{content[match.end():]}"


def fix_frontmatter_casing(vault: NoteVault) -> MigrationResult:
    """Fix legacy keys in every note of the vault, skipping media and sync logs."""
    result = MigrationResult()
    for path in vault.list_markdown(skip_folders=(MEDIA_FOLDER_NAME, SYNC_LOG_FOLDER_NAME)):
        result.scanned += 1
        try:
            content = vault.read(path)
            fixed = fix_note_text(content)
            if fixed != content:
                vault.write(path, fixed)
                result.updated.append(path)
        except AppError as e:
            logger.error("frontmatter_fix_failed", path=str(path), error=str(e))
            result.failed.append(path)

    logger.info(
        "frontmatter_fix_finished",
        scanned=result.scanned,
        updated=len(result.updated),
        failed=len(result.failed),
    )
    return result
