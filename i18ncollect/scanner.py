"""Delimiter scanning for marker spans such as ``{{ ... }}``."""

from __future__ import annotations

import re

from .errors import InputValidationError
from .structures import ScanResult

DEFAULT_OPEN_MARKER = "{{"
DEFAULT_CLOSE_MARKER = "}}"

REPEATED_SPACES = re.compile(r" {2,}")


def _normalise_span(span: str) -> str:
    """Collapse runs of spaces and trim the surrounding whitespace."""

    return REPEATED_SPACES.sub(" ", span).strip()


def _find_closing(text: str, open_marker: str, close_marker: str, start: int) -> int:
    """Return the index of the close marker balancing an open marker, or -1.

    Searching begins at ``start``, just past the opening marker. Any open
    marker met before the next close marker nests one level deeper.
    """

    depth = 1
    index = start
    while True:
        close_at = text.find(close_marker, index)
        if close_at == -1:
            return -1
        open_at = text.find(open_marker, index)
        if open_at != -1 and open_at < close_at:
            depth += 1
            index = open_at + len(open_marker)
            continue
        depth -= 1
        if depth == 0:
            return close_at
        index = close_at + len(close_marker)


def scan_marker_spans(
    text: str,
    open_marker: str = DEFAULT_OPEN_MARKER,
    close_marker: str = DEFAULT_CLOSE_MARKER,
) -> ScanResult:
    """Extract every span enclosed by the marker pair, left to right.

    Each extracted span is removed from the working buffer together with
    its markers before the next one is searched. An open marker without a
    balancing partner is closed by the first close marker after it, so
    later spans are still found. Scanning stops once no close marker
    follows the first open marker; whatever is left is returned as the
    remainder.
    """

    if not open_marker or not close_marker:
        raise InputValidationError("Open and close markers must be non-empty strings.")

    result = ScanResult()
    buffer = text
    while open_marker in buffer and close_marker in buffer:
        open_at = buffer.find(open_marker)
        content_start = open_at + len(open_marker)
        close_at = _find_closing(buffer, open_marker, close_marker, content_start)
        if close_at == -1:
            close_at = buffer.find(close_marker, content_start)
        if close_at == -1:
            break
        result.matches.append(_normalise_span(buffer[content_start:close_at]))
        buffer = buffer[:open_at] + buffer[close_at + len(close_marker):]

    result.remainder = buffer
    return result
