"""Line-level merge of two note bodies using a longest common subsequence."""

from dataclasses import dataclass

from .constants import CONFLICT_END_MARKER, CONFLICT_SEPARATOR, CONFLICT_START_MARKER

LINE_BREAK = "\n"


@dataclass(frozen=True)
class MergeResult:
    merged: str
    has_conflict: bool


def split_lines(body: str) -> list[str]:
    """Split on line breaks, keeping blank lines. An empty body has no lines."""
    if not body:
        return []
    return body.split(LINE_BREAK)


def build_lcs_table(existing: list[str], incoming: list[str]) -> list[list[int]]:
    """LCS length table, filled from the end of both sequences backward.

    ``table[i][j]`` is the LCS length of ``existing[i:]`` and ``incoming[j:]``.
    """
    m, n = len(existing), len(incoming)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(m - 1, -1, -1):
        for j in range(n - 1, -1, -1):
            if existing[i] == incoming[j]:
                table[i][j] = table[i + 1][j + 1] + 1
            else:
                table[i][j] = max(table[i + 1][j], table[i][j + 1])
    return table


def reconstruct_lcs(
    existing: list[str], incoming: list[str], table: list[list[int]]
) -> list[str]:
    """Walk the table forward and collect one LCS.

    On a tie the existing (left) side advances.
    """
    lcs = []
    i = j = 0
    while i < len(existing) and j < len(incoming):
        if existing[i] == incoming[j]:
            lcs.append(existing[i])
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return lcs


def _emit_gap(out: list[str], existing_gap: list[str], incoming_gap: list[str]) -> bool:
    """Append a gap to ``out``; returns True when it had to become a conflict block."""
    if existing_gap and incoming_gap:
        out.append(CONFLICT_START_MARKER)
        out.extend(existing_gap)
        out.append(CONFLICT_SEPARATOR)
        out.extend(incoming_gap)
        out.append(CONFLICT_END_MARKER)
        return True
    out.extend(existing_gap or incoming_gap)
    return False


def merge_note_bodies(existing_body: str, incoming_body: str) -> MergeResult:
    """Merge two bodies line by line.

    Lines shared by both sides are kept in order. A run of lines unique to one
    side is kept as is; runs unique to both sides at the same position are
    wrapped in conflict markers.
    """
    existing_lines = split_lines(existing_body)
    incoming_lines = split_lines(incoming_body)

    table = build_lcs_table(existing_lines, incoming_lines)
    common = reconstruct_lcs(existing_lines, incoming_lines, table)

    merged: list[str] = []
    has_conflict = False
    ai = bi = 0
    for line in common:
        a_end = existing_lines.index(line, ai)
        b_end = incoming_lines.index(line, bi)
        if _emit_gap(merged, existing_lines[ai:a_end], incoming_lines[bi:b_end]):
            has_conflict = True
        merged.append(line)
        ai = a_end + 1
        bi = b_end + 1

    if _emit_gap(merged, existing_lines[ai:], incoming_lines[bi:]):
        has_conflict = True

    return MergeResult(merged=LINE_BREAK.join(merged), has_conflict=has_conflict)
