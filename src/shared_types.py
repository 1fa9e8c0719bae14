"""Shared enums and types for keepsync."""

from enum import StrEnum


class Decision(StrEnum):
    """Outcome of reconciling an incoming note with an existing file."""

    SKIP = "skip"
    RENAME = "rename"
    OVERWRITE = "overwrite"


class SyncAction(StrEnum):
    """What the sync driver actually did to the vault for one note."""

    CREATED = "created"
    SKIPPED = "skipped"
    OVERWRITTEN = "overwritten"
    MERGED = "merged"
    CONFLICT_COPY = "conflict_copy"
    UNTITLED = "untitled"


class RenameStrategy(StrEnum):
    """How a RENAME decision is materialized."""

    MERGE = "merge"
    COPY = "copy"


class ErrorKind(StrEnum):
    NETWORK = "network"
    PARSE = "parse"
    IO = "io"
    UNKNOWN = "unknown"
