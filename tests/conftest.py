"""Shared fixtures for template and catalog files."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def simple_template(tmp_path: Path) -> Path:
    """A template holding a single translation call with one placeholder."""

    path = tmp_path / "simple.html"
    path.write_text('<p>Hello {{ __ "myKey" {{myVar}} }}</p>\n', encoding="utf-8")
    return path


@pytest.fixture
def multiple_template(tmp_path: Path) -> Path:
    """A template whose keys appear out of alphabetical order."""

    path = tmp_path / "multiple.html"
    path.write_text(
        '<h1>{{__ "b"}}</h1>\n<p>{{__ "a.b"}}</p>\n<p>{{__ "a.a"}}</p>\n<p>{{__ "b"}}</p>\n',
        encoding="utf-8",
    )
    return path
