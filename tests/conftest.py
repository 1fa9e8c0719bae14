"""Shared test fixtures for keepsync."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

FIXED_NOW = datetime(2023, 6, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2023-06-01 12:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def vault(tmp_path):
    from vault.storage import NoteVault

    return NoteVault(tmp_path / "vault")


@pytest.fixture
def sample_notes():
    """Raw note payloads as served by the sync server."""
    return [
        {
            "title": "Shopping",
            "text": "---\nGoogleKeepCreatedDate: 2023-05-01T09:00:00Z\n---\nmilk\neggs",
            "created": "2023-05-01T09:00:00Z",
            "updated": "2023-05-20T10:00:00Z",
            "labels": ["home"],
        },
        {
            "title": "Ideas",
            "text": "write a sync tool",
            "created": "2023-05-02T09:00:00Z",
            "updated": "2023-05-02T09:00:00Z",
        },
        {
            "title": "Reading list",
            "text": "Dune\nHyperion",
            "created": "2023-05-03T09:00:00Z",
            "updated": "2023-05-03T09:00:00Z",
        },
    ]
