"""Core data structures for the i18n key collector."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union


CatalogNode = Union[str, Dict[str, "CatalogNode"]]
CatalogTree = Dict[str, CatalogNode]
CatalogPath = Tuple[str, ...]

DEFAULT_LANGUAGES: Tuple[str, ...] = ("en",)


@dataclass(frozen=True)
class ExtractionEntry:
    """A translation key found in a template, with its placeholder names."""

    path: CatalogPath
    variables: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("An extraction entry needs at least one path segment.")

    @property
    def key(self) -> str:
        return ".".join(self.path)


@dataclass
class ScanResult:
    """Spans extracted by the delimiter scanner and the unconsumed text."""

    matches: List[str] = field(default_factory=list)
    remainder: str = ""


def normalise_languages(languages: Union[str, List[str], Tuple[str, ...], None]) -> List[str]:
    """Return an ordered, de-duplicated language list, defaulting to English."""

    if languages is None:
        return list(DEFAULT_LANGUAGES)
    if isinstance(languages, str):
        languages = languages.split(",")
    ordered: List[str] = []
    for language in languages:
        cleaned = language.strip()
        if cleaned and cleaned not in ordered:
            ordered.append(cleaned)
    return ordered or list(DEFAULT_LANGUAGES)
