"""Tests for downloading note attachments into the media folder."""

from unittest.mock import MagicMock

import pytest

from keep.attachments import derive_file_name, process_attachments, resolve_blob_url
from keep.errors import NetworkError


class TestResolveBlobUrl:
    def test_absolute_url(self):
        assert resolve_blob_url("https://cdn.test/b/1.png") == "https://cdn.test/b/1.png"

    def test_server_relative_path(self):
        assert resolve_blob_url("/blobs/1.png", "http://sync.test/") == "http://sync.test/blobs/1.png"

    def test_relative_path_without_base(self):
        assert resolve_blob_url("/blobs/1.png") is None

    def test_garbage(self):
        assert resolve_blob_url("not a url", "http://sync.test") is None
        assert resolve_blob_url("   ") is None


class TestDeriveFileName:
    def test_prefers_blob_name(self):
        assert derive_file_name("https://cdn.test/x/abc", 1, ["a.png", "b/c.jpg"]) == "b_c.jpg"

    def test_falls_back_to_last_segment(self):
        assert derive_file_name("https://cdn.test/x/my%20photo.png", 0, [" "]) == "my photo.png"

    def test_no_segment(self):
        assert derive_file_name("https://cdn.test/", 0) is None


class TestProcessAttachments:
    def test_downloads_into_media(self, vault):
        fetch = MagicMock(return_value=b"image-bytes")

        result = process_attachments(vault, ["https://cdn.test/x/1.png"], fetch)

        assert result.downloaded == 1
        fetch.assert_called_once_with("https://cdn.test/x/1.png")
        assert (vault.root / "media" / "1.png").read_bytes() == b"image-bytes"

    def test_identical_file_is_not_rewritten(self, vault):
        vault.write_bytes(vault.media_path("1.png"), b"same")

        result = process_attachments(vault, ["https://cdn.test/1.png"], MagicMock(return_value=b"same"))

        assert result.downloaded == 0
        assert result.skipped_identical == 1

    def test_changed_file_is_replaced(self, vault):
        vault.write_bytes(vault.media_path("1.png"), b"old")

        result = process_attachments(vault, ["https://cdn.test/1.png"], MagicMock(return_value=b"new"))

        assert result.downloaded == 1
        assert vault.read_bytes(vault.media_path("1.png")) == b"new"

    def test_invalid_urls_are_skipped(self, vault):
        fetch = MagicMock(return_value=b"x")

        result = process_attachments(vault, ["nope", "https://cdn.test/2.png"], fetch)

        assert result.downloaded == 1
        fetch.assert_called_once_with("https://cdn.test/2.png")

    def test_fetch_error_propagates(self, vault):
        fetch = MagicMock(side_effect=NetworkError("gone", status=404))

        with pytest.raises(NetworkError):
            process_attachments(vault, ["https://cdn.test/1.png"], fetch)
