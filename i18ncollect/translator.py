"""High-level orchestration for translating catalog values."""

from __future__ import annotations

import copy
import pathlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .catalog import assign_leaf, flatten_catalog, read_catalog, render_catalog, write_catalog
from .collector import CATALOG_ROOT_KEY
from .errors import TranslationProviderError
from .providers import DeepLTranslationProvider, TranslationProvider
from .structures import CatalogPath

DEFAULT_BATCH_BUDGET = 2000


@dataclass
class TextBatch:
    """Leaves sent to the provider in one call, constrained by a character budget."""

    batch_id: int
    paths: List[CatalogPath]
    texts: List[str]


@dataclass
class TranslationResult:
    tree: Dict[str, Any]
    total_texts: int
    translated_texts: int
    skipped_texts: int
    total_batches: int


@dataclass
class TranslationSummary:
    """Report returned after translating a catalog file."""

    source_path: pathlib.Path
    target_path: pathlib.Path
    provider_name: str
    model: str | None
    target_language: str
    source_language: str | None
    total_texts: int
    translated_texts: int
    skipped_texts: int
    total_batches: int
    elapsed_seconds: float
    written: bool
    output: Dict[str, Any] = field(default_factory=dict)


class BatchBuilder:
    """Aggregates catalog leaves into batches within a character budget."""

    def __init__(self, budget: int) -> None:
        self.budget = max(1, budget)

    def build(self, leaves: Sequence[Tuple[CatalogPath, str]]) -> List[TextBatch]:
        batches: List[TextBatch] = []
        current = TextBatch(batch_id=1, paths=[], texts=[])
        running_total = 0

        for path, text in leaves:
            size = len(text)
            if current.texts and running_total + size > self.budget:
                batches.append(current)
                current = TextBatch(batch_id=current.batch_id + 1, paths=[], texts=[])
                running_total = 0
            current.paths.append(path)
            current.texts.append(text)
            running_total += size

        if current.texts:
            batches.append(current)
        return batches


def translate_catalog(
    tree: Mapping[str, Any],
    provider: TranslationProvider,
    *,
    target_language: str,
    source_language: str | None = None,
    model: str | None = None,
    batch_budget: int = DEFAULT_BATCH_BUDGET,
    verbose: bool = False,
) -> TranslationResult:
    """Translate every non-blank leaf of ``tree`` into a new catalog.

    The input tree is left untouched. Provider failures propagate before
    any result is returned.
    """

    leaves = flatten_catalog(tree)
    pending = [(path, text) for path, text in leaves if text.strip()]
    batches = BatchBuilder(batch_budget).build(pending)
    if verbose:
        print(f"Prepared {len(pending)} texts in {len(batches)} batches.")

    translated: List[Tuple[CatalogPath, str]] = []
    for batch in batches:
        results = provider.translate(
            batch.texts,
            source_language=source_language,
            target_language=target_language,
            model=model,
        )
        if len(results) != len(batch.texts):
            raise TranslationProviderError(
                f"Batch {batch.batch_id} returned {len(results)} translations "
                f"for {len(batch.texts)} texts."
            )
        translated.extend(zip(batch.paths, results))
        if verbose:
            print(f"Processed batch {batch.batch_id} ({len(batch.texts)} texts).")

    output = copy.deepcopy(dict(tree))
    for path, text in translated:
        assign_leaf(output, path, text)

    return TranslationResult(
        tree=output,
        total_texts=len(leaves),
        translated_texts=len(translated),
        skipped_texts=len(leaves) - len(translated),
        total_batches=len(batches),
    )


def is_language_code(value: str) -> bool:
    code = value.strip().upper()
    known = DeepLTranslationProvider.TARGET_LANGUAGES
    return code in known or code.split("-")[0] in known


def select_language_tree(
    data: Mapping[str, Any],
    source_language: str | None,
) -> Tuple[Mapping[str, Any], bool]:
    """Find the subtree to translate inside a collected catalog file.

    Returns the subtree and whether it was a language-keyed section. A
    lone root key counts as a language section inside ``translations``,
    or anywhere when it is a known language code such as ``en`` in a
    per-language file.
    """

    collected = data.get(CATALOG_ROOT_KEY)
    root = collected if isinstance(collected, Mapping) else data
    if source_language and isinstance(root.get(source_language), Mapping):
        return root[source_language], True
    if len(root) == 1:
        ((only_key, only_value),) = root.items()
        if isinstance(only_value, Mapping) and (collected is root or is_language_code(only_key)):
            return only_value, True
    return root, False


def translate_file(
    *,
    source: pathlib.Path,
    target: pathlib.Path,
    provider: TranslationProvider,
    target_language: str,
    source_language: str | None = None,
    model: str | None = None,
    batch_budget: int = DEFAULT_BATCH_BUDGET,
    dry_run: bool = False,
    log: bool = False,
    verbose: bool = False,
) -> TranslationSummary:
    """Translate the catalog stored at ``source`` and write it to ``target``."""

    start_time = time.time()
    data = read_catalog(source)
    subtree, language_keyed = select_language_tree(data, source_language)

    result = translate_catalog(
        subtree,
        provider,
        target_language=target_language,
        source_language=source_language,
        model=model,
        batch_budget=batch_budget,
        verbose=verbose,
    )
    output = {target_language: result.tree} if language_keyed else result.tree

    rendered = render_catalog(output)
    if log or dry_run:
        print(rendered)
    if dry_run:
        print("This was a dry run. No file written.")
    else:
        write_catalog(target, rendered)

    return TranslationSummary(
        source_path=source,
        target_path=target,
        provider_name=provider.name,
        model=model,
        target_language=target_language,
        source_language=source_language,
        total_texts=result.total_texts,
        translated_texts=result.translated_texts,
        skipped_texts=result.skipped_texts,
        total_batches=result.total_batches,
        elapsed_seconds=time.time() - start_time,
        written=not dry_run,
        output=output,
    )
