"""Apply reconciliation decisions for incoming notes to the vault."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

import structlog

from shared_types import Decision, RenameStrategy, SyncAction
from vault.storage import NoteVault
from vault.sync_log import SyncLog

from .attachments import BlobFetcher, process_attachments
from .compare import Clock, decide, incoming_file_info, utc_now
from .constants import DEFAULT_PAGE_SIZE
from .errors import AppError
from .frontmatter import load_metadata, note_metadata, render_note
from .merge import merge_note_bodies
from .note import normalize_note
from .schema import KeepNotePayload, KeepResponsePage

logger = structlog.get_logger()

FetchPage = Callable[[int, int], KeepResponsePage]


@dataclass
class SyncCallbacks:
    """Optional progress hooks. Exceptions raised by them are logged and ignored."""

    set_total_notes: Optional[Callable[[int], None]] = None
    report_progress: Optional[Callable[[], None]] = None


@dataclass
class SyncOutcome:
    title: str
    action: SyncAction
    path: Optional[Path] = None
    decision: Optional[Decision] = None
    attachments: int = 0


@dataclass
class SyncReport:
    outcomes: list[SyncOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def count(self, action: SyncAction) -> int:
        return sum(1 for o in self.outcomes if o.action == action)

    @property
    def attachments(self) -> int:
        return sum(o.attachments for o in self.outcomes)


def _safe_call(hook: Optional[Callable], *args) -> None:
    if hook is None:
        return
    try:
        hook(*args)
    except Exception as e:
        logger.warning("sync_callback_failed", error=str(e))


class NoteSyncer:
    """Reconciles incoming notes with the files already in a vault."""

    def __init__(
        self,
        vault: NoteVault,
        sync_log: Optional[SyncLog] = None,
        strategy: RenameStrategy | str = RenameStrategy.MERGE,
        clock: Optional[Clock] = None,
        fetch_blob: Optional[BlobFetcher] = None,
        blob_base_url: Optional[str] = None,
    ):
        self.vault = vault
        self.clock = clock or utc_now
        self.sync_log = sync_log or SyncLog(vault, self.clock)
        self.strategy = RenameStrategy(strategy)
        self.fetch_blob = fetch_blob
        self.blob_base_url = blob_base_url

    def _link(self, title: str, path: Path) -> str:
        return f"[{title}]({path.relative_to(self.vault.root).as_posix()})"

    def process_note(self, raw: Mapping[str, Any] | KeepNotePayload) -> SyncOutcome:
        """Reconcile one incoming note and write the result to the vault."""
        if isinstance(raw, KeepNotePayload):
            raw = raw.model_dump()
        note = normalize_note(raw)
        if not note.title:
            self.sync_log.write("Skipped note without a title")
            return SyncOutcome(title="", action=SyncAction.UNTITLED)

        path = self.vault.note_path(note.title)
        link = self._link(note.title, path)
        now = self.clock()

        try:
            if not self.vault.exists(path):
                self.vault.write(path, render_note(note_metadata(note), note.body, now), stamp=now)
                self.sync_log.write(f"{link} - created")
                outcome = SyncOutcome(note.title, SyncAction.CREATED, path)
            else:
                raw_existing, existing = self.vault.read_snapshot(path)
                decision = decide(incoming_file_info(note), existing, self.clock)
                outcome = self._apply(note, path, link, raw_existing, existing.content, decision, now)
            outcome.attachments = self._download_attachments(note)
        except (AppError, ValueError) as e:
            self.sync_log.write(f"{link} - error: {e}")
            raise

        logger.info(
            "note_synced",
            title=note.title,
            action=str(outcome.action),
            decision=str(outcome.decision) if outcome.decision else None,
        )
        return outcome

    def _download_attachments(self, note) -> int:
        if not note.blob_urls:
            return 0
        if self.fetch_blob is None:
            logger.debug("attachments_not_fetched", title=note.title, count=len(note.blob_urls))
            return 0
        result = process_attachments(
            self.vault,
            note.blob_urls,
            self.fetch_blob,
            blob_names=note.blob_names,
            base_url=self.blob_base_url,
        )
        return result.downloaded

    def _apply(self, note, path, link, raw_existing, existing_body, decision, now) -> SyncOutcome:
        if decision == Decision.SKIP:
            self.sync_log.write(f"{link} - identical (skipped)")
            return SyncOutcome(note.title, SyncAction.SKIPPED, path, decision)

        incoming_meta = note_metadata(note)
        metadata = {**load_metadata(raw_existing), **incoming_meta}

        if decision == Decision.OVERWRITE:
            self.vault.write(path, render_note(metadata, note.body, now), stamp=now)
            self.sync_log.write(f"{link} - overwritten")
            return SyncOutcome(note.title, SyncAction.OVERWRITTEN, path, decision)

        if self.strategy == RenameStrategy.COPY:
            copy_path = self.vault.conflict_path(path, now)
            self.vault.write(copy_path, render_note(incoming_meta, note.body, now), stamp=now)
            self.sync_log.write(f"{self._link(note.title, copy_path)} - conflict copy created")
            return SyncOutcome(note.title, SyncAction.CONFLICT_COPY, copy_path, decision)

        result = merge_note_bodies(existing_body, note.body)
        if not result.has_conflict:
            self.vault.write(path, render_note(metadata, result.merged, now), stamp=now)
            self.sync_log.write(f"{link} - merged (no conflict)")
            return SyncOutcome(note.title, SyncAction.MERGED, path, decision)

        copy_path = self.vault.conflict_path(path, now)
        self.vault.write(copy_path, render_note(metadata, result.merged, now), stamp=now)
        self.sync_log.write(f"{self._link(note.title, copy_path)} - conflict copy created")
        return SyncOutcome(note.title, SyncAction.CONFLICT_COPY, copy_path, decision)

    def process_notes(
        self,
        notes: Iterable[Mapping[str, Any] | KeepNotePayload],
        callbacks: Optional[SyncCallbacks] = None,
    ) -> list[SyncOutcome]:
        outcomes = []
        for note in notes:
            outcomes.append(self.process_note(note))
            if callbacks:
                _safe_call(callbacks.report_progress)
        return outcomes

    def import_notes(
        self,
        fetch_page: FetchPage,
        page_size: int = DEFAULT_PAGE_SIZE,
        callbacks: Optional[SyncCallbacks] = None,
    ) -> SyncReport:
        """Page through ``fetch_page(offset, limit)`` until an empty page.

        Raises:
            AppError: the first fetch or write failure; earlier pages stay applied
        """
        report = SyncReport()
        offset = 0
        while True:
            try:
                page = fetch_page(offset, page_size)
            except AppError as e:
                logger.error("fetch_notes_failed", offset=offset, error=str(e))
                raise

            if page.total_notes is not None and callbacks:
                _safe_call(callbacks.set_total_notes, page.total_notes)
            if not page.notes:
                break

            report.outcomes.extend(self.process_notes(page.notes, callbacks))
            offset += page_size

        logger.info("import_finished", total=report.total)
        return report
