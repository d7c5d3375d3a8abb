"""Tests for the marker span scanner."""

from __future__ import annotations

import pytest

from i18ncollect.errors import InputValidationError
from i18ncollect.scanner import scan_marker_spans


class TestScanMarkerSpans:
    """Extraction of spans between open and close markers."""

    def test_nested_placeholder_stays_inside_span(self) -> None:
        result = scan_marker_spans('Hello {{ __ "myKey" {{myVar}} }}')

        assert result.matches == ['__ "myKey" {{myVar}}']
        assert result.remainder == "Hello "

    def test_spans_are_returned_left_to_right(self) -> None:
        result = scan_marker_spans("a {{x}} b {{  y   z }} c")

        assert result.matches == ["x", "y z"]
        assert result.remainder == "a  b  c"

    def test_missing_marker_returns_nothing(self) -> None:
        text = "no opening marker here }}"
        result = scan_marker_spans(text)

        assert result.matches == []
        assert result.remainder == text

    def test_close_before_open_is_ignored(self) -> None:
        result = scan_marker_spans('}} {{ __ "k" }}')

        assert result.matches == ['__ "k"']
        assert result.remainder == "}} "

    def test_unclosed_span_stops_scanning(self) -> None:
        result = scan_marker_spans("x {{ a }} y {{ b")

        assert result.matches == ["a"]
        assert result.remainder == "x  y {{ b"

    def test_unbalanced_open_falls_back_to_first_close(self) -> None:
        result = scan_marker_spans("{{ a {{ b }} c")

        assert result.matches == ["a {{ b"]
        assert result.remainder == " c"

    def test_stray_open_does_not_hide_later_spans(self) -> None:
        result = scan_marker_spans('s = "{{"; {{__ "a"}} {{__ "b"}}')

        assert result.matches == ['"; {{__ "a"', '__ "b"']

    def test_custom_markers(self) -> None:
        result = scan_marker_spans("<b>[[ __ title ]]</b>", "[[", "]]")

        assert result.matches == ["__ title"]

    def test_only_spaces_are_collapsed(self) -> None:
        result = scan_marker_spans("{{\n  a    b\t}}")

        assert result.matches == ["a b"]

    @pytest.mark.parametrize(("open_marker", "close_marker"), [("", "}}"), ("{{", "")])
    def test_empty_markers_are_rejected(self, open_marker: str, close_marker: str) -> None:
        with pytest.raises(InputValidationError):
            scan_marker_spans("{{ a }}", open_marker, close_marker)
