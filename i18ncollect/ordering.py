"""Deduplication and ordering of extracted translation entries."""

from __future__ import annotations

from typing import List, Sequence, Set, Tuple

from .structures import ExtractionEntry


def deduplicate_entries(entries: Sequence[ExtractionEntry]) -> List[ExtractionEntry]:
    """Keep the first entry seen for every dotted key."""

    seen: Set[str] = set()
    unique: List[ExtractionEntry] = []
    for entry in entries:
        if entry.key in seen:
            continue
        seen.add(entry.key)
        unique.append(entry)
    return unique


def _segment_key(entry: ExtractionEntry, index: int) -> Tuple[bool, str]:
    if index < len(entry.path):
        return True, entry.path[index]
    return False, ""


def sort_entries_alphabetically(entries: Sequence[ExtractionEntry]) -> List[ExtractionEntry]:
    """Order entries so sibling keys are grouped and ascending.

    One stable descending pass is made per path column, deepest column
    first. Entries without a segment in the current column go after those
    that have one. The descending result is reversed at the end.
    """

    ordered = list(entries)
    depth = max((len(entry.path) for entry in ordered), default=0)
    for index in range(depth - 1, -1, -1):
        ordered.sort(key=lambda entry: _segment_key(entry, index), reverse=True)
    ordered.reverse()
    return ordered
