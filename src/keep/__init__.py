from .compare import ExistingFileInfo, IncomingFileInfo, decide
from .merge import MergeResult, merge_note_bodies
from .note import NormalizedNote, extract_frontmatter, normalize_date, normalize_note

__all__ = [
    "decide",
    "ExistingFileInfo",
    "IncomingFileInfo",
    "merge_note_bodies",
    "MergeResult",
    "NormalizedNote",
    "normalize_note",
    "normalize_date",
    "extract_frontmatter",
]
