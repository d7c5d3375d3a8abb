"""Tests for catalog building, merging and flattening."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from i18ncollect.catalog import (
    assign_leaf,
    build_catalog,
    build_catalogs,
    flatten_catalog,
    merge_deep,
    read_catalog,
    render_catalog,
    unflatten_catalog,
)
from i18ncollect.errors import CatalogFormatError, CatalogReadError
from i18ncollect.ordering import sort_entries_alphabetically
from i18ncollect.structures import ExtractionEntry


def entry(key: str, *variables: str) -> ExtractionEntry:
    return ExtractionEntry(path=tuple(key.split(".")), variables=variables)


class TestBuildCatalog:
    """Nested catalog construction per language."""

    def test_descriptive_leaf(self) -> None:
        tree = build_catalog([entry("myKey", "myVar")], "en")

        assert tree == {"myKey": "en of myKey with variables {{myVar}}"}

    def test_empty_mode_lists_placeholders(self) -> None:
        tree = build_catalog([entry("myKey", "myVar"), entry("other")], "en", empty=True)

        assert tree == {"myKey": "{{myVar}}", "other": ""}

    def test_several_variables(self) -> None:
        tree = build_catalog([entry("k", "a", "b")], "de")

        assert tree == {"k": "de of k with variables {{a}} {{b}}"}

    def test_dotted_paths_nest(self) -> None:
        tree = build_catalog([entry("a.b"), entry("a.c")], "en")

        assert tree == {"a": {"b": "en of a.b", "c": "en of a.c"}}

    def test_shorter_leaf_wins_over_deeper_path(self) -> None:
        assert build_catalog([entry("a"), entry("a.b")]) == {"a": "en of a"}

    def test_existing_namespace_is_not_replaced_by_leaf(self) -> None:
        assert build_catalog([entry("a.b"), entry("a")]) == {"a": {"b": "en of a.b"}}

    def test_one_tree_per_language_in_order(self) -> None:
        catalogs = build_catalogs([entry("myKey", "myVar")], ["de", "fr", "es"])

        assert list(catalogs) == ["de", "fr", "es"]
        assert catalogs["fr"] == {"myKey": "fr of myKey with variables {{myVar}}"}


class TestMergeDeep:
    """Recursive merge of a source catalog onto a target."""

    def test_additive_merge(self) -> None:
        target = {"a": {"x": 1}}

        merged = merge_deep(target, {"a": {"y": 2}, "b": 3})

        assert merged == {"a": {"x": 1, "y": 2}, "b": 3}
        assert merged is target

    def test_source_leaf_overwrites(self) -> None:
        assert merge_deep({"a": {"k": "old"}}, {"a": {"k": "new"}}) == {"a": {"k": "new"}}

    def test_source_mapping_replaces_target_leaf(self) -> None:
        assert merge_deep({"a": "x"}, {"a": {"b": "y"}}) == {"a": {"b": "y"}}

    def test_source_is_not_aliased(self) -> None:
        source = {"a": {"b": "y"}}

        merged = merge_deep({}, source)
        merged["a"]["b"] = "changed"

        assert source == {"a": {"b": "y"}}

    def test_target_keys_keep_their_position(self) -> None:
        merged = merge_deep({"fresh": "1", "shared": "2"}, {"old": "3", "shared": "kept"})

        assert list(merged) == ["fresh", "shared", "old"]
        assert merged["shared"] == "kept"


class TestFlattenCatalog:
    """Leaf traversal and reconstruction."""

    def test_depth_first_order(self) -> None:
        tree = {"a": {"b": "1", "c": {"d": "2"}}, "e": "3"}

        assert flatten_catalog(tree) == [
            (("a", "b"), "1"),
            (("a", "c", "d"), "2"),
            (("e",), "3"),
        ]

    def test_unsupported_values_are_rejected(self) -> None:
        with pytest.raises(CatalogFormatError, match="a.b"):
            flatten_catalog({"a": {"b": 1}})
        with pytest.raises(CatalogFormatError):
            flatten_catalog({"a": ["x"]})

    def test_unflatten_restores_tree(self) -> None:
        tree = {"a": {"b": "1", "c": {"d": "2"}}, "e": "3"}

        assert unflatten_catalog(flatten_catalog(tree)) == tree

    def test_built_paths_round_trip(self) -> None:
        entries = [entry("b"), entry("a.b"), entry("a.a"), entry("c.d.e")]

        leaves = flatten_catalog(build_catalog(entries))

        assert {path for path, _ in leaves} == {item.path for item in entries}

    def test_sorted_entries_flatten_in_sorted_order(self) -> None:
        ordered = sort_entries_alphabetically([entry("b"), entry("a.b"), entry("a.a")])

        leaves = flatten_catalog(build_catalog(ordered))

        assert [path for path, _ in leaves] == [item.path for item in ordered]

    def test_assign_leaf_creates_levels(self) -> None:
        tree: dict = {"a": "x"}

        assign_leaf(tree, ("a", "b"), "y")
        assign_leaf(tree, ("c",), "z")

        assert tree == {"a": {"b": "y"}, "c": "z"}


class TestCatalogFiles:
    """Rendering and reading persisted catalogs."""

    def test_two_space_indentation(self) -> None:
        assert render_catalog({"en": {"k": "v"}}) == '{\n  "en": {\n    "k": "v"\n  }\n}'

    def test_non_ascii_is_kept(self) -> None:
        assert "Grüße" in render_catalog({"k": "Grüße"})

    def test_read_catalog(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"en": {"k": "v"}}), encoding="utf-8")

        assert read_catalog(path) == {"en": {"k": "v"}}

    def test_missing_catalog(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogReadError, match="not found"):
            read_catalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(CatalogReadError, match="not valid JSON"):
            read_catalog(path)

    def test_root_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(CatalogReadError):
            read_catalog(path)
