"""Pydantic models for note pages served by the sync server or an export file."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ParseError


class KeepNotePayload(BaseModel):
    """One note as delivered by the server, before normalization."""

    model_config = ConfigDict(extra="ignore")

    title: str
    text: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    archived: bool = False
    trashed: bool = False
    labels: list[str] = Field(default_factory=list)
    blob_urls: list[str] = Field(default_factory=list)
    blob_names: list[str] = Field(default_factory=list)


class KeepResponsePage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    notes: list[KeepNotePayload]
    total_notes: Optional[int] = None


def parse_page(data: Any) -> KeepResponsePage:
    """Validate a decoded page, raising ParseError on a malformed shape."""
    try:
        return KeepResponsePage.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Invalid notes page: {e.error_count()} validation error(s)", e) from e
