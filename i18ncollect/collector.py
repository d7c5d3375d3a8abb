"""High-level orchestration for collecting translation keys from templates."""

from __future__ import annotations

import glob
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .catalog import build_catalogs, merge_deep, read_catalog, render_catalog, write_catalog
from .errors import InputValidationError
from .ordering import deduplicate_entries, sort_entries_alphabetically
from .scanner import DEFAULT_CLOSE_MARKER, DEFAULT_OPEN_MARKER
from .structures import CatalogTree, ExtractionEntry, normalise_languages
from .tokenizer import DEFAULT_MARKER_FUNCTION, extract_entries

IGNORED_DIRECTORIES = {"node_modules"}
CATALOG_ROOT_KEY = "translations"
JSON_SUFFIX = ".json"


@dataclass
class CollectOptions:
    """Switches controlling a collect run."""

    alphabetical: bool = False
    dry_run: bool = False
    empty: bool = False
    languages: List[str] = field(default_factory=lambda: ["en"])
    log: bool = False
    separate_language_files: bool = False
    marker_function: str = DEFAULT_MARKER_FUNCTION
    update: bool = False
    open_marker: str = DEFAULT_OPEN_MARKER
    close_marker: str = DEFAULT_CLOSE_MARKER


@dataclass
class CollectSummary:
    """Report returned after a collect run."""

    source: str
    target: str
    processed_files: List[pathlib.Path]
    total_keys: int
    languages: List[str]
    written_files: List[pathlib.Path] = field(default_factory=list)
    dry_run: bool = False
    output: Dict[str, Any] = field(default_factory=dict)


def find_template_files(pattern: str) -> List[pathlib.Path]:
    """Expand a glob pattern into a sorted list of template files."""

    matches = []
    for candidate in glob.glob(pattern, recursive=True):
        path = pathlib.Path(candidate)
        if not path.is_file():
            continue
        if IGNORED_DIRECTORIES.intersection(path.parts):
            continue
        matches.append(path)
    return sorted(matches)


def separate_file_base(target: str) -> str:
    """Strip a trailing ``.json`` so per-language suffixes can be appended."""

    if target.lower().endswith(JSON_SUFFIX):
        return target[: -len(JSON_SUFFIX)]
    return target


def language_file_path(target: str, language: str) -> pathlib.Path:
    return pathlib.Path(f"{separate_file_base(target)}.{language}{JSON_SUFFIX}")


def validate_arguments(source: Any, target: Any, options: Any) -> None:
    """Reject invalid arguments before any file is touched."""

    if not isinstance(source, str):
        raise InputValidationError(
            "First argument SOURCE must be of type string. Please specify a valid SOURCE."
        )
    if not isinstance(target, str):
        raise InputValidationError(
            "Second argument TARGET must be of type string. Please specify a valid TARGET."
        )
    if options is not None and not isinstance(options, CollectOptions):
        raise InputValidationError(
            "Third argument OPTIONS must be a CollectOptions instance."
        )


class CollectRunner:
    """Coordinates extraction, catalog building, merging and writing."""

    def __init__(self, *, source: str, target: str, options: CollectOptions) -> None:
        self.source = source
        self.target = target
        self.options = options
        self.languages = normalise_languages(options.languages)

    def run(self) -> CollectSummary:
        files = find_template_files(self.source)
        entries: List[ExtractionEntry] = []
        for path in files:
            print(f"Now processing {path}")
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as exc:
                raise InputValidationError(f"Template file is not valid UTF-8: {path}") from exc
            entries.extend(
                extract_entries(
                    content,
                    self.options.marker_function,
                    open_marker=self.options.open_marker,
                    close_marker=self.options.close_marker,
                )
            )

        summary = CollectSummary(
            source=self.source,
            target=self.target,
            processed_files=files,
            total_keys=0,
            languages=self.languages,
            dry_run=self.options.dry_run,
        )

        if not entries:
            print("No strings for translation found, no files written.")
            return summary

        entries = self.prepare_entries(entries)
        summary.total_keys = len(entries)
        catalogs = build_catalogs(entries, self.languages, self.options.empty)

        if self.options.separate_language_files:
            self._write_separate(catalogs, summary)
        else:
            self._write_single(catalogs, summary)
        return summary

    def prepare_entries(self, entries: Sequence[ExtractionEntry]) -> List[ExtractionEntry]:
        unique = deduplicate_entries(entries)
        if self.options.alphabetical:
            return sort_entries_alphabetically(unique)
        return unique

    def _write_single(self, catalogs: Dict[str, CatalogTree], summary: CollectSummary) -> None:
        target_path = pathlib.Path(self.target)
        output: Dict[str, Any] = {CATALOG_ROOT_KEY: catalogs}
        if self.options.update:
            existing = read_catalog(target_path)
            previous = existing.get(CATALOG_ROOT_KEY, existing)
            if isinstance(previous, dict):
                merge_deep(output[CATALOG_ROOT_KEY], previous)

        summary.output = output
        rendered = render_catalog(output)
        if self.options.log or self.options.dry_run:
            print(rendered)

        if self.options.dry_run:
            print("This was a dry run. No file written.")
            return

        write_catalog(target_path, rendered)
        summary.written_files.append(target_path)
        print(f"Done and Ready! Your output was written to {target_path}")

    def _write_separate(self, catalogs: Dict[str, CatalogTree], summary: CollectSummary) -> None:
        # Every existing file is read before the first write.
        for language, tree in catalogs.items():
            if self.options.update:
                existing = read_catalog(language_file_path(self.target, language))
                previous = existing.get(language, existing)
                if isinstance(previous, dict):
                    merge_deep(tree, previous)
            summary.output[language] = tree

        for language, tree in catalogs.items():
            path = language_file_path(self.target, language)
            rendered = render_catalog({language: tree})
            if self.options.log or self.options.dry_run:
                print(rendered)

            if self.options.dry_run:
                continue

            write_catalog(path, rendered)
            summary.written_files.append(path)
            print(f"Wrote language keys for '{language}' to {path}")

        if self.options.dry_run:
            print("This was a dry run. No files written.")


def collect(source: str, target: str, options: CollectOptions | None = None) -> CollectSummary:
    """Collect translation keys from ``source`` templates into ``target`` catalog(s)."""

    validate_arguments(source, target, options)
    runner = CollectRunner(source=source, target=target, options=options or CollectOptions())
    return runner.run()
