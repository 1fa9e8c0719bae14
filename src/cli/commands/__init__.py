"""CLI command modules."""

from .migrate import fix_frontmatter
from .reconcile import decide, merge
from .sync import import_notes, pull

__all__ = [
    "import_notes",
    "pull",
    "decide",
    "merge",
    "fix_frontmatter",
]
