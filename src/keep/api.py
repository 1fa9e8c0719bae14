"""Sources of incoming note pages: the sync server and local JSON exports."""

import json
import logging
from pathlib import Path
from typing import Optional

import httpx

from .constants import DEFAULT_PAGE_SIZE
from .errors import NetworkError, ParseError, VaultIOError
from .retry import http_retry
from .schema import KeepResponsePage, parse_page

logger = logging.getLogger(__name__)

SYNC_ENDPOINT = "/keep/sync/v2"


class KeepApiClient:
    """Pages notes from the sync server."""

    def __init__(
        self,
        base_url: str,
        email: str,
        token: str,
        timeout: float = 30.0,
        max_attempts: int = 3,
        min_wait: float = 2.0,
        max_wait: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.token = token
        self._retry = http_retry(max_attempts=max_attempts, min_wait=min_wait, max_wait=max_wait)
        self.client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-User-Email": self.email,
            "Authorization": f"Bearer {self.token}",
        }

    def _get(self, offset: int, limit: int) -> httpx.Response:
        url = f"{self.base_url}{SYNC_ENDPOINT}"
        try:
            response = self.client.get(
                url,
                params={"offset": offset, "limit": limit},
                headers=self._headers(),
            )
        except httpx.RequestError as e:
            raise NetworkError(f"Request to {url} failed: {e}", cause=e) from e

        if not response.is_success:
            raise NetworkError(_error_message(response), status=response.status_code)
        return response

    def fetch_notes(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> KeepResponsePage:
        """Fetch one page of notes, retrying transient failures.

        Raises:
            NetworkError: transport failure or non-2xx status
            ParseError: body is not JSON or not a notes page
        """
        response = self._retry(self._get)(offset, limit)
        try:
            data = response.json()
        except ValueError as e:
            raise ParseError("Failed to parse JSON response", e) from e

        page = parse_page(data)
        logger.debug("Fetched %d notes at offset %d", len(page.notes), offset)
        return page

    def _get_blob(self, url: str) -> bytes:
        # Credentials only go to the sync server itself
        headers = self._headers() if url.startswith(f"{self.base_url}/") else None
        try:
            response = self.client.get(url, headers=headers)
        except httpx.RequestError as e:
            raise NetworkError(f"Failed to download blob from {url}: {e}", cause=e) from e

        if not response.is_success:
            raise NetworkError(_error_message(response), status=response.status_code)
        return response.content

    def fetch_blob(self, url: str) -> bytes:
        """Download one attachment, retrying transient failures."""
        data = self._retry(self._get_blob)(url)
        logger.debug("Fetched %d bytes from %s", len(data), url)
        return data

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def _error_message(response: httpx.Response) -> str:
    message = f"Server returned status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or message
    return message


class JsonFileSource:
    """Serves pages from a JSON export: a list of notes or ``{"notes": [...]}``."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._notes: Optional[list] = None

    def _load(self) -> list:
        if self._notes is None:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except OSError as e:
                raise VaultIOError(f"Cannot read {self.path}", str(self.path), e) from e
            except json.JSONDecodeError as e:
                raise ParseError(f"Invalid JSON in {self.path}", e) from e
            if isinstance(data, dict):
                data = data.get("notes")
            if not isinstance(data, list):
                raise ParseError(f"No notes list in {self.path}")
            self._notes = data
        return self._notes

    def fetch_notes(self, offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> KeepResponsePage:
        notes = self._load()
        return parse_page({"notes": notes[offset : offset + limit], "total_notes": len(notes)})
