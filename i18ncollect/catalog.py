"""Building, merging and serialising nested translation catalogs."""

from __future__ import annotations

import json
import pathlib
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Sequence, Tuple

from .errors import CatalogFormatError, CatalogReadError
from .structures import CatalogPath, CatalogTree, ExtractionEntry

JSON_INDENT = 2


def format_placeholders(variables: Sequence[str], text_before: str = "") -> str:
    """Return ``{{a}} {{b}}`` for the given names, prefixed when non-empty."""

    if not variables:
        return ""
    return text_before + " ".join(f"{{{{{name}}}}}" for name in variables)


def leaf_text(entry: ExtractionEntry, language: str, empty: bool = False) -> str:
    """Generate the initial catalog value for an extracted entry."""

    if empty:
        return format_placeholders(entry.variables)
    return (
        f"{language} of {entry.key}"
        + format_placeholders(entry.variables, " with variables ")
    )


def _insert_leaf(tree: CatalogTree, path: CatalogPath, value: str) -> bool:
    """Place ``value`` at ``path`` unless an earlier entry already owns the spot."""

    node: Dict[str, Any] = tree
    for segment in path[:-1]:
        child = node.get(segment)
        if child is None:
            child = {}
            node[segment] = child
        elif not isinstance(child, dict):
            return False
        node = child
    if path[-1] in node:
        return False
    node[path[-1]] = value
    return True


def build_catalog(
    entries: Iterable[ExtractionEntry],
    language: str = "en",
    empty: bool = False,
) -> CatalogTree:
    """Build the nested catalog for one language."""

    tree: CatalogTree = {}
    for entry in entries:
        _insert_leaf(tree, entry.path, leaf_text(entry, language, empty))
    return tree


def build_catalogs(
    entries: Sequence[ExtractionEntry],
    languages: Sequence[str],
    empty: bool = False,
) -> Dict[str, CatalogTree]:
    """Build one catalog per language, keyed by language code in the given order."""

    return {language: build_catalog(entries, language, empty) for language in languages}


def merge_deep(target: MutableMapping[str, Any], source: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Merge ``source`` onto ``target`` in place and return ``target``.

    Nested mappings are merged key by key. Any other value from ``source``
    overwrites whatever ``target`` holds at that key, and a mapping in
    ``source`` replaces a plain value in ``target``.
    """

    pending: List[Tuple[MutableMapping[str, Any], Mapping[str, Any]]] = [(target, source)]
    while pending:
        destination, origin = pending.pop()
        for key, value in origin.items():
            if isinstance(value, Mapping):
                existing = destination.get(key)
                if not isinstance(existing, MutableMapping):
                    existing = {}
                    destination[key] = existing
                pending.append((existing, value))
            else:
                destination[key] = value
    return target


def flatten_catalog(tree: Mapping[str, Any]) -> List[Tuple[CatalogPath, str]]:
    """Return ``(path, text)`` for every leaf in depth-first order."""

    leaves: List[Tuple[CatalogPath, str]] = []
    stack: List[Tuple[CatalogPath, Any]] = [
        ((key,), value) for key, value in reversed(list(tree.items()))
    ]
    while stack:
        path, node = stack.pop()
        if isinstance(node, str):
            leaves.append((path, node))
        elif isinstance(node, Mapping):
            stack.extend(
                (path + (key,), value) for key, value in reversed(list(node.items()))
            )
        else:
            raise CatalogFormatError(
                f"Unsupported value at '{'.'.join(path)}': expected a string or "
                f"mapping, found {type(node).__name__}."
            )
    return leaves


def unflatten_catalog(leaves: Iterable[Tuple[CatalogPath, str]]) -> CatalogTree:
    """Rebuild a nested catalog from ``(path, text)`` pairs."""

    tree: CatalogTree = {}
    for path, text in leaves:
        _insert_leaf(tree, path, text)
    return tree


def assign_leaf(tree: MutableMapping[str, Any], path: CatalogPath, value: str) -> None:
    """Overwrite the leaf at ``path``, creating missing levels."""

    node = tree
    for segment in path[:-1]:
        child = node.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            node[segment] = child
        node = child
    node[path[-1]] = value


def render_catalog(tree: Mapping[str, Any]) -> str:
    """Serialise a catalog as indented JSON."""

    return json.dumps(tree, indent=JSON_INDENT, ensure_ascii=False)


def read_catalog(path: pathlib.Path) -> Dict[str, Any]:
    """Load a persisted catalog, raising ``CatalogReadError`` on any failure."""

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise CatalogReadError(f"Catalog file not found: {path}") from exc
    except OSError as exc:
        raise CatalogReadError(f"Catalog file could not be read: {path} ({exc})") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise CatalogReadError(f"Catalog file is not valid JSON: {path} ({exc})") from exc

    if not isinstance(data, dict):
        raise CatalogReadError(
            f"Invalid catalog file {path}: expected an object at the root."
        )
    return data


def write_catalog(path: pathlib.Path, rendered: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(rendered, encoding="utf-8")
