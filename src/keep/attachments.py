"""Download note attachments into the vault's media folder."""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from urllib.parse import unquote, urljoin, urlparse

import structlog

from vault.storage import NoteVault

logger = structlog.get_logger()

BlobFetcher = Callable[[str], bytes]


@dataclass
class AttachmentResult:
    downloaded: int = 0
    skipped_identical: int = 0


def resolve_blob_url(blob_url: str, base_url: Optional[str] = None) -> Optional[str]:
    """Absolute URL for a blob, or None.

    Server-relative paths (``/blobs/...``) are joined onto ``base_url``.
    """
    blob_url = (blob_url or "").strip()
    if not blob_url:
        return None
    parsed = urlparse(blob_url)
    if parsed.scheme in ("http", "https") and parsed.netloc:
        return blob_url
    if blob_url.startswith("/") and base_url:
        return urljoin(base_url.rstrip("/") + "/", blob_url)
    return None


def _sanitize_file_name(name: str) -> str:
    return name.replace("\\", "_").replace("/", "_")


def derive_file_name(
    url: str, index: int, blob_names: Optional[Sequence[str]] = None
) -> Optional[str]:
    """Name from ``blob_names[index]`` when given, else the URL's last path segment."""
    if blob_names and index < len(blob_names):
        name = (blob_names[index] or "").strip()
        if name:
            return _sanitize_file_name(name)
    segments = [s for s in urlparse(url).path.split("/") if s]
    if not segments:
        return None
    return _sanitize_file_name(unquote(segments[-1]))


def process_attachments(
    vault: NoteVault,
    blob_urls: Sequence[str],
    fetch_blob: BlobFetcher,
    blob_names: Optional[Sequence[str]] = None,
    base_url: Optional[str] = None,
) -> AttachmentResult:
    """Fetch each blob into ``media/``; files with identical bytes are left alone.

    Unusable URLs are logged and skipped. Fetch and write errors propagate.
    """
    result = AttachmentResult()
    for index, blob_url in enumerate(blob_urls):
        url = resolve_blob_url(blob_url, base_url)
        if url is None:
            logger.warning("attachment_invalid_url", url=blob_url)
            continue
        file_name = derive_file_name(url, index, blob_names)
        if not file_name:
            logger.warning("attachment_no_file_name", url=url)
            continue

        data = fetch_blob(url)
        path = vault.media_path(file_name)
        if vault.exists(path) and vault.read_bytes(path) == data:
            result.skipped_identical += 1
            continue
        vault.write_bytes(path, data)
        result.downloaded += 1

    if result.downloaded or result.skipped_identical:
        logger.info(
            "attachments_processed",
            downloaded=result.downloaded,
            skipped_identical=result.skipped_identical,
        )
    return result
