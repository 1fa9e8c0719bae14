"""Render synced notes as markdown with YAML frontmatter."""

from datetime import datetime
from typing import Any, Mapping

import frontmatter
import structlog
import yaml

from .constants import (
    FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY,
    FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY,
    FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY,
)
from .note import NormalizedNote, extract_frontmatter

logger = structlog.get_logger()


def note_metadata(note: NormalizedNote) -> dict[str, Any]:
    """Frontmatter for a note written fresh from the remote copy."""
    metadata: dict[str, Any] = dict(note.frontmatter_dict)
    if note.created and FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY not in metadata:
        metadata[FRONTMATTER_GOOGLE_KEEP_CREATED_DATE_KEY] = note.created.isoformat()
    if note.updated and FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY not in metadata:
        metadata[FRONTMATTER_GOOGLE_KEEP_UPDATED_DATE_KEY] = note.updated.isoformat()
    return metadata


def load_metadata(text: str) -> dict[str, Any]:
    """Read the frontmatter of an existing file.

    Preambles that are not valid YAML fall back to plain ``key: value`` parsing.
    """
    try:
        return dict(frontmatter.loads(text).metadata)
    except yaml.YAMLError as e:
        logger.warning("frontmatter_yaml_invalid", error=str(e))
        _, _, fields = extract_frontmatter(text)
        return dict(fields)


def render_note(metadata: Mapping[str, Any], body: str, last_synced: datetime) -> str:
    """Markdown document for ``body`` with ``metadata`` and a fresh sync stamp."""
    post = frontmatter.Post(body)
    post.metadata.update(metadata)
    post[FRONTMATTER_KEEP_SIDIAN_LAST_SYNCED_DATE_KEY] = last_synced.isoformat()
    return frontmatter.dumps(post)
