"""Tests for applying reconciliation decisions to a vault."""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import frontmatter
import pytest

from keep.constants import CONFLICT_START_MARKER, FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY
from keep.errors import NetworkError, VaultIOError
from keep.note import extract_frontmatter, normalize_date
from keep.schema import parse_page
from keep.sync import NoteSyncer, SyncCallbacks
from shared_types import Decision, RenameStrategy, SyncAction


def day(d: int) -> datetime:
    return datetime(2023, 5, d, tzinfo=timezone.utc)


def write_existing(vault, title, body, last_synced=None, mtime=None, extra=""):
    lines = [extra] if extra else []
    if last_synced:
        lines.append(f"{FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY}: {last_synced.isoformat()}")
    text = f"---\n{chr(10).join(lines)}\n---\n{body}" if lines else body
    path = vault.write(vault.note_path(title), text)
    if mtime:
        ts = mtime.timestamp()
        os.utime(path, (ts, ts))
    return path


def body_of(path):
    return extract_frontmatter(path.read_text())[1]


def incoming(title, text, updated):
    return {"title": title, "text": text, "updated": updated.isoformat()}


@pytest.fixture
def syncer(vault, fixed_clock):
    return NoteSyncer(vault, clock=fixed_clock)


class TestProcessNote:
    def test_new_note_is_created(self, syncer, vault, sample_notes):
        outcome = syncer.process_note(sample_notes[0])

        assert outcome.action == SyncAction.CREATED
        assert outcome.decision is None
        post = frontmatter.loads(outcome.path.read_text())
        assert normalize_date(post[FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY]) == syncer.clock()
        assert normalize_date(post["GoogleKeepUpdatedDate"]) == datetime(
            2023, 5, 20, 10, tzinfo=timezone.utc
        )
        assert body_of(outcome.path) == "milk\neggs"

    def test_untitled_note_is_skipped(self, syncer, vault):
        outcome = syncer.process_note({"title": "   ", "text": "orphan"})

        assert outcome.action == SyncAction.UNTITLED
        assert vault.list_markdown(skip_folders=("_KeepSidianLogs",)) == []
        assert "Skipped note without a title" in syncer.sync_log.log_path().read_text()

    def test_accepts_validated_payload(self, syncer, sample_notes):
        page = parse_page({"notes": sample_notes})

        outcome = syncer.process_note(page.notes[1])

        assert outcome.action == SyncAction.CREATED
        assert body_of(outcome.path) == "write a sync tool"

    def test_identical_resync_is_skipped(self, syncer, sample_notes):
        syncer.process_note(sample_notes[1])

        outcome = syncer.process_note(sample_notes[1])

        assert outcome.action == SyncAction.SKIPPED
        assert outcome.decision == Decision.SKIP

    def test_only_incoming_changed_overwrites(self, syncer, vault):
        path = write_existing(
            vault, "Todo", "old", last_synced=day(26), mtime=day(25), extra="Custom: keep me"
        )

        outcome = syncer.process_note(incoming("Todo", "new", day(27)))

        assert outcome.action == SyncAction.OVERWRITTEN
        assert outcome.path == path
        assert body_of(path) == "new"
        post = frontmatter.loads(path.read_text())
        assert post["Custom"] == "keep me"
        assert normalize_date(post[FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY]) == syncer.clock()

    def test_both_changed_merges_in_place(self, syncer, vault):
        path = write_existing(
            vault, "List", "A\nB\nC\nlocal", last_synced=day(25), mtime=day(26)
        )

        outcome = syncer.process_note(incoming("List", "remote\nA\nB\nC", day(27)))

        assert outcome.action == SyncAction.MERGED
        assert outcome.decision == Decision.RENAME
        assert body_of(path) == "remote\nA\nB\nC\nlocal"

    def test_conflicting_edits_write_a_conflict_copy(self, syncer, vault):
        path = write_existing(vault, "Plan", "A\nB\nC", last_synced=day(25), mtime=day(26))

        outcome = syncer.process_note(incoming("Plan", "A\nZ\nC", day(27)))

        assert outcome.action == SyncAction.CONFLICT_COPY
        assert outcome.path != path
        assert outcome.path.name.startswith("Plan-conflict-")
        assert body_of(path) == "A\nB\nC"
        assert CONFLICT_START_MARKER in body_of(outcome.path)
        assert "conflict copy created" in syncer.sync_log.log_path().read_text()

    def test_copy_strategy_keeps_both_files(self, vault, fixed_clock):
        syncer = NoteSyncer(vault, strategy=RenameStrategy.COPY, clock=fixed_clock)
        path = write_existing(vault, "Draft", "local text", last_synced=day(25), mtime=day(26))

        outcome = syncer.process_note(incoming("Draft", "remote text", day(27)))

        assert outcome.action == SyncAction.CONFLICT_COPY
        assert body_of(path) == "local text"
        assert body_of(outcome.path) == "remote text"

    def test_write_error_is_logged_and_raised(self, syncer, vault):
        with patch.object(vault, "write", side_effect=VaultIOError("disk full", "x")):
            with pytest.raises(VaultIOError):
                syncer.process_note(incoming("Broken", "text", day(27)))

        assert "error: disk full" in syncer.sync_log.log_path().read_text()


class TestResyncOfSyncedFiles:
    """Second sync against a file this syncer wrote, with the real clock."""

    def test_remote_only_edit_overwrites(self, vault):
        syncer = NoteSyncer(vault)
        start = datetime.now(timezone.utc)
        syncer.process_note(incoming("N", "first", start - timedelta(minutes=1)))

        outcome = syncer.process_note(incoming("N", "second", start + timedelta(minutes=5)))

        assert outcome.action == SyncAction.OVERWRITTEN
        assert body_of(outcome.path) == "second"

    def test_written_file_mtime_matches_sync_stamp(self, vault):
        outcome = NoteSyncer(vault).process_note(incoming("N", "text", day(20)))

        info = vault.existing_file_info(outcome.path)
        assert info.fs_updated_date == info.last_synced_date

    def test_unchanged_remote_after_local_edit_keeps_local(self, vault):
        syncer = NoteSyncer(vault)
        created = syncer.process_note(incoming("N", "remote", day(20)))
        path = created.path
        path.write_text(path.read_text().replace("remote", "local edit"))
        edited = vault.existing_file_info(path).last_synced_date + timedelta(seconds=30)
        os.utime(path, (edited.timestamp(), edited.timestamp()))

        outcome = syncer.process_note(incoming("N", "remote", day(20)))

        assert outcome.decision == Decision.RENAME
        assert body_of(path) == "local edit"


class TestAttachments:
    def test_blobs_downloaded_after_write(self, vault, fixed_clock):
        fetch = MagicMock(return_value=b"png")
        syncer = NoteSyncer(vault, clock=fixed_clock, fetch_blob=fetch, blob_base_url="http://sync.test")
        note = {
            **incoming("Pic", "see image", day(27)),
            "blob_urls": ["/blobs/abc"],
            "blob_names": ["photo.png"],
        }

        outcome = syncer.process_note(note)

        assert outcome.attachments == 1
        fetch.assert_called_once_with("http://sync.test/blobs/abc")
        assert vault.read_bytes(vault.media_path("photo.png")) == b"png"

    def test_without_fetcher_blobs_are_ignored(self, syncer, vault):
        outcome = syncer.process_note({**incoming("Pic", "x", day(27)), "blob_urls": ["https://cdn.test/1.png"]})

        assert outcome.action == SyncAction.CREATED
        assert outcome.attachments == 0
        assert not (vault.root / "media").exists()

    def test_download_failure_is_logged_and_raised(self, vault, fixed_clock):
        fetch = MagicMock(side_effect=NetworkError("Server returned status 500", status=500))
        syncer = NoteSyncer(vault, clock=fixed_clock, fetch_blob=fetch)

        with pytest.raises(NetworkError):
            syncer.process_note({**incoming("Pic", "x", day(27)), "blob_urls": ["https://cdn.test/1.png"]})

        assert "error: Server returned status 500" in syncer.sync_log.log_path().read_text()


class TestImportNotes:
    def _pages(self, notes, page_size):
        def fetch(offset, limit):
            assert limit == page_size
            return parse_page({"notes": notes[offset : offset + limit], "total_notes": len(notes)})

        return fetch

    def test_pages_until_empty(self, syncer, sample_notes):
        totals = []
        progress = MagicMock()
        callbacks = SyncCallbacks(set_total_notes=totals.append, report_progress=progress)

        report = syncer.import_notes(self._pages(sample_notes, 2), page_size=2, callbacks=callbacks)

        assert report.total == 3
        assert report.count(SyncAction.CREATED) == 3
        assert progress.call_count == 3
        assert set(totals) == {3}

    def test_failing_callbacks_do_not_stop_sync(self, syncer, sample_notes):
        callbacks = SyncCallbacks(
            set_total_notes=MagicMock(side_effect=RuntimeError("ui gone")),
            report_progress=MagicMock(side_effect=RuntimeError("ui gone")),
        )

        report = syncer.import_notes(self._pages(sample_notes, 50), callbacks=callbacks)

        assert report.total == 3

    def test_fetch_error_propagates_after_applied_pages(self, syncer, vault, sample_notes):
        calls = []

        def fetch(offset, limit):
            calls.append(offset)
            if offset:
                raise NetworkError("Server returned status 500", status=500)
            return parse_page({"notes": sample_notes[:1]})

        with pytest.raises(NetworkError):
            syncer.import_notes(fetch, page_size=1)

        assert calls == [0, 1]
        assert vault.exists(vault.note_path("Shopping"))
