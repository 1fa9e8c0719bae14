"""Decide what to do when an incoming note collides with an existing file.

The decision is a pure function of the two bodies and the timestamps each
side carries. Dates are only compared within one lineage: the incoming
note's updated time against the existing file's last sync point, and the
existing file's modification time against that same point.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from shared_types import Decision

from .note import NormalizedNote

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IncomingFileInfo:
    content: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None


@dataclass(frozen=True)
class ExistingFileInfo:
    content: str
    created_date: Optional[datetime] = None
    updated_date: Optional[datetime] = None
    fs_created_date: Optional[datetime] = None
    fs_updated_date: Optional[datetime] = None
    last_synced_date: Optional[datetime] = None


@dataclass(frozen=True)
class ResolvedDates:
    """Reference points after applying each field's fallback chain."""

    incoming_created: datetime
    incoming_updated: datetime
    existing_created: Optional[datetime]
    existing_updated: Optional[datetime]
    last_synced: Optional[datetime]


def first_present(*candidates: Optional[datetime]) -> Optional[datetime]:
    """Return the first candidate that is not None, normalized to UTC-aware."""
    for candidate in candidates:
        if candidate is not None:
            if candidate.tzinfo is None:
                return candidate.replace(tzinfo=timezone.utc)
            return candidate
    return None


def incoming_file_info(note: NormalizedNote) -> IncomingFileInfo:
    return IncomingFileInfo(
        content=note.body,
        created_date=note.created,
        updated_date=note.updated,
    )


def resolve_dates(
    incoming: IncomingFileInfo,
    existing: ExistingFileInfo,
    clock: Optional[Clock] = None,
) -> ResolvedDates:
    """Apply the ordered fallback chain for every date the policy reads.

    An incoming note without dates is treated as modified at ``clock()``.
    """
    now = (clock or utc_now)()
    return ResolvedDates(
        incoming_created=first_present(incoming.created_date, now),
        incoming_updated=first_present(incoming.updated_date, now),
        existing_created=first_present(existing.created_date, existing.fs_created_date),
        existing_updated=first_present(
            existing.fs_updated_date,
            existing.updated_date,
            existing.fs_created_date,
        ),
        last_synced=first_present(existing.last_synced_date, existing.fs_created_date),
    )


def decide(
    incoming: IncomingFileInfo,
    existing: ExistingFileInfo,
    clock: Optional[Clock] = None,
) -> Decision:
    """Pick skip, overwrite or rename for an incoming note and its existing file.

    Identical bodies are always skipped. With a last-sync reference, each
    side is checked for changes since that point; without one, the incoming
    updated time is compared directly with the existing one. Any ambiguity
    resolves to RENAME so neither copy is lost.
    """
    if incoming.content == existing.content:
        return Decision.SKIP

    dates = resolve_dates(incoming, existing, clock)

    if dates.last_synced is not None and dates.existing_updated is not None:
        incoming_modified = dates.incoming_updated > dates.last_synced
        existing_modified = dates.existing_updated > dates.last_synced

        if incoming_modified and existing_modified:
            return Decision.RENAME
        if incoming_modified:
            return Decision.OVERWRITE
        if existing_modified:
            return Decision.RENAME
        # Bodies differ but neither side moved past the sync point
        return Decision.SKIP

    if dates.existing_updated is not None and dates.incoming_updated > dates.existing_updated:
        return Decision.OVERWRITE
    return Decision.RENAME
