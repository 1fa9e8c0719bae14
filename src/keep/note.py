"""Incoming note normalization, date parsing and frontmatter extraction."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Mapping, Optional

FRONTMATTER_DELIMITER = "---"

_PASCAL_RE = re.compile(r"(^|-)([a-z])")


@dataclass
class NormalizedNote:
    """A remote note after cleanup, with its frontmatter split off the body."""

    title: str
    body: str
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
    text: str = ""
    frontmatter: str = ""
    frontmatter_dict: dict[str, str] = field(default_factory=dict)
    archived: bool = False
    trashed: bool = False
    labels: list[str] = field(default_factory=list)
    blob_urls: list[str] = field(default_factory=list)
    blob_names: list[str] = field(default_factory=list)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_date(value: Any) -> Optional[datetime]:
    """Parse a date value into an aware datetime, or None.

    Missing, empty and unparsable values all map to None. Naive values are
    taken as UTC and bare dates as midnight UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _as_utc(parsed)


def to_pascal_case(key: str) -> str:
    """``google-keep-url`` -> ``GoogleKeepUrl``; already-Pascal keys are unchanged."""
    return _PASCAL_RE.sub(lambda m: m.group(2).upper(), key)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_frontmatter_fields(frontmatter: str) -> dict[str, str]:
    """Split ``key: value`` lines into a dict with PascalCase keys."""
    fields: dict[str, str] = {}
    for line in frontmatter.split("\n"):
        key, sep, value = line.partition(": ")
        key = key.strip()
        value = _unquote(value.strip())
        if sep and key and value:
            fields[to_pascal_case(key)] = value
    return fields


def extract_frontmatter(text: Optional[str]) -> tuple[str, str, dict[str, str]]:
    """Split text into (frontmatter, body, fields).

    The preamble sits between the first and second ``---``. Text with fewer
    than two delimiters has no preamble and is returned as the body.
    """
    if not text:
        return "", text or "", {}

    parts = text.split(FRONTMATTER_DELIMITER, 2)
    if len(parts) < 3:
        return "", text, {}

    frontmatter = parts[1].strip()
    body = parts[2].strip()
    return frontmatter, body, parse_frontmatter_fields(frontmatter)


def _string_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return []


def normalize_note(raw: Mapping[str, Any]) -> NormalizedNote:
    """Build a NormalizedNote from a raw note payload."""
    title = (raw.get("title") or "").strip()
    text = (raw.get("text") or "").strip()
    frontmatter, body, fields = extract_frontmatter(text)

    return NormalizedNote(
        title=title,
        body=body,
        created=normalize_date(raw.get("created")),
        updated=normalize_date(raw.get("updated")),
        text=text,
        frontmatter=frontmatter,
        frontmatter_dict=fields,
        archived=bool(raw.get("archived", False)),
        trashed=bool(raw.get("trashed", False)),
        labels=_string_list(raw.get("labels")),
        blob_urls=_string_list(raw.get("blob_urls")),
        blob_names=_string_list(raw.get("blob_names")),
    )
