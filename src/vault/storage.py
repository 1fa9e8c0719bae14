"""Markdown note vault on the local filesystem."""

import os
import re
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Optional

from keep.compare import ExistingFileInfo
from keep.constants import (
    CONFLICT_FILE_SUFFIX,
    MEDIA_FOLDER_NAME,
    FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY,
    FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY,
    FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY,
)
from keep.errors import VaultIOError
from keep.note import extract_frontmatter, normalize_date

CONFLICT_STAMP_FORMAT = "%Y%m%dT%H%M%S"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_UNSAFE_TITLE_CHARS = re.compile(r"[\\/\x00]")


def _sanitize_title(title: str) -> str:
    """Make a note title usable as a single filename component."""
    name = _UNSAFE_TITLE_CHARS.sub("-", title).strip()
    return name.lstrip(".") or "untitled"


def _from_timestamp(ts: Optional[float]) -> Optional[datetime]:
    if not ts:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def _from_ns(ns: int) -> datetime:
    return _EPOCH + timedelta(microseconds=ns // 1000)


def _to_ns(stamp: datetime) -> int:
    """Exact nanoseconds since the epoch; float timestamps lose the last microsecond."""
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    delta = stamp - _EPOCH
    return ((delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds) * 1000


class NoteVault:
    """Reads, writes and inspects markdown notes under one root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _validate_path(self, filepath: Path) -> Path:
        """Ensure resolved path is inside the vault root."""
        resolved = filepath.resolve()
        if not resolved.is_relative_to(self.root):
            raise ValueError(f"Path escapes vault directory: {filepath}")
        return resolved

    def resolve(self, path: str | Path) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return self._validate_path(path)

    def note_path(self, title: str) -> Path:
        return self._validate_path(self.root / f"{_sanitize_title(title)}.md")

    def conflict_path(self, path: str | Path, stamp: datetime) -> Path:
        """Non-colliding sibling path for a conflict copy of ``path``."""
        path = self.resolve(path)
        base = f"{path.stem}{CONFLICT_FILE_SUFFIX}{stamp.strftime(CONFLICT_STAMP_FORMAT)}"
        candidate = path.with_name(f"{base}.md")
        counter = 1
        while candidate.exists():
            candidate = path.with_name(f"{base}_{counter}.md")
            counter += 1
        return self._validate_path(candidate)

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).exists()

    def read(self, path: str | Path) -> str:
        filepath = self.resolve(path)
        try:
            return filepath.read_text(encoding="utf-8")
        except OSError as e:
            raise VaultIOError(f"Cannot read {filepath}", str(filepath), e) from e

    def write(self, path: str | Path, content: str, stamp: Optional[datetime] = None) -> Path:
        """Write ``content`` to ``path``, creating parent folders.

        With ``stamp``, the file's access and modification times are set to it,
        so a note written at sync time does not look edited after that sync.
        """
        filepath = self.resolve(path)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(content, encoding="utf-8")
            if stamp is not None:
                ns = _to_ns(stamp)
                os.utime(filepath, ns=(ns, ns))
        except OSError as e:
            raise VaultIOError(f"Cannot write {filepath}", str(filepath), e) from e
        return filepath

    def media_path(self, file_name: str) -> Path:
        return self.resolve(Path(MEDIA_FOLDER_NAME) / file_name)

    def read_bytes(self, path: str | Path) -> bytes:
        filepath = self.resolve(path)
        try:
            return filepath.read_bytes()
        except OSError as e:
            raise VaultIOError(f"Cannot read {filepath}", str(filepath), e) from e

    def write_bytes(self, path: str | Path, data: bytes) -> Path:
        filepath = self.resolve(path)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as e:
            raise VaultIOError(f"Cannot write {filepath}", str(filepath), e) from e
        return filepath

    def append(self, path: str | Path, content: str) -> Path:
        filepath = self.resolve(path)
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, "a", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise VaultIOError(f"Cannot append to {filepath}", str(filepath), e) from e
        return filepath

    def stat(self, path: str | Path) -> tuple[Optional[datetime], Optional[datetime]]:
        """(created, modified) times from the filesystem."""
        filepath = self.resolve(path)
        try:
            st = os.stat(filepath)
        except OSError as e:
            raise VaultIOError(f"Cannot stat {filepath}", str(filepath), e) from e
        created = getattr(st, "st_birthtime", None) or st.st_ctime
        return _from_timestamp(created), _from_ns(st.st_mtime_ns)

    def existing_file_info(self, path: str | Path) -> ExistingFileInfo:
        """Snapshot of an existing note: body plus every date source the policy reads."""
        return self.read_snapshot(path)[1]

    def read_snapshot(self, path: str | Path) -> tuple[str, ExistingFileInfo]:
        """Raw text of a note together with the ExistingFileInfo built from it."""
        raw = self.read(path)
        fs_created, fs_updated = self.stat(path)
        _, body, fields = extract_frontmatter(raw)
        return raw, ExistingFileInfo(
            content=body,
            created_date=normalize_date(fields.get(FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY)),
            updated_date=normalize_date(fields.get(FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY)),
            fs_created_date=fs_created,
            fs_updated_date=fs_updated,
            last_synced_date=normalize_date(
                fields.get(FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY)
            ),
        )

    def list_markdown(self, skip_folders: Iterable[str] = ()) -> list[Path]:
        """All ``.md`` files under the root, skipping folders by name."""
        skip = set(skip_folders)
        files = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in skip)
            for name in sorted(filenames):
                if name.lower().endswith(".md"):
                    files.append(Path(dirpath) / name)
        return files
