"""Turn marker spans into translation keys and placeholder names."""

from __future__ import annotations

from typing import List, Optional

from .scanner import DEFAULT_CLOSE_MARKER, DEFAULT_OPEN_MARKER, scan_marker_spans
from .structures import ExtractionEntry

DEFAULT_MARKER_FUNCTION = "__"

QUOTE_CHARACTERS = ("\"", "'")


def _strip_quotes(token: str) -> str:
    for quote in QUOTE_CHARACTERS:
        token = token.replace(quote, "")
    return token


def _variable_name(token: str, open_marker: str, close_marker: str) -> str:
    """Return the placeholder name of ``{{var}}``, ``{{var=default}}`` or ``var=value``."""

    if token.startswith(open_marker):
        token = token[len(open_marker):]
    if token.endswith(close_marker):
        token = token[: -len(close_marker)]
    return token.split("=", 1)[0]


def parse_marker_span(
    span: str,
    marker_function: str = DEFAULT_MARKER_FUNCTION,
    *,
    open_marker: str = DEFAULT_OPEN_MARKER,
    close_marker: str = DEFAULT_CLOSE_MARKER,
) -> Optional[ExtractionEntry]:
    """Parse one scanned span, returning ``None`` if it is not a translation call."""

    prefix = f"{marker_function} "
    if not span.startswith(prefix):
        return None

    tokens = [token for token in span[len(prefix):].split(" ") if token]
    if not tokens:
        return None

    path = tuple(segment for segment in _strip_quotes(tokens[0]).split(".") if segment)
    if not path:
        return None

    variables: List[str] = []
    for token in tokens[1:]:
        name = _variable_name(token, open_marker, close_marker)
        if name:
            variables.append(name)

    return ExtractionEntry(path=path, variables=tuple(variables))


def extract_entries(
    text: str,
    marker_function: str = DEFAULT_MARKER_FUNCTION,
    *,
    open_marker: str = DEFAULT_OPEN_MARKER,
    close_marker: str = DEFAULT_CLOSE_MARKER,
) -> List[ExtractionEntry]:
    """Scan ``text`` and return the translation entries in order of appearance."""

    scanned = scan_marker_spans(text, open_marker, close_marker)
    entries: List[ExtractionEntry] = []
    for span in scanned.matches:
        entry = parse_marker_span(
            span,
            marker_function,
            open_marker=open_marker,
            close_marker=close_marker,
        )
        if entry is not None:
            entries.append(entry)
    return entries
