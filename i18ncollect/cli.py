"""Command line interface for i18n-collect."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional

from .collector import CollectOptions, collect
from .configuration import get_settings, normalise_provider_name
from .errors import I18nCollectError, TranslationProviderConfigurationError
from .providers import build_provider
from .structures import normalise_languages
from .tokenizer import DEFAULT_MARKER_FUNCTION
from .translator import DEFAULT_BATCH_BUDGET, TranslationSummary, translate_file


def build_collect_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-collect",
        description="Collect translation keys from templates into JSON catalogs.",
    )
    parser.add_argument(
        "source",
        help="Path to the template file(s), glob pattern allowed.",
    )
    parser.add_argument(
        "target",
        help="JSON file to write the result to.",
    )
    parser.add_argument(
        "-a",
        "--alphabetical",
        action="store_true",
        help="Order the keys alphabetically (default: order of appearance).",
    )
    parser.add_argument(
        "-dr",
        "--dry-run",
        action="store_true",
        help="Log the result(s) but do not write any file.",
    )
    parser.add_argument(
        "-e",
        "--empty",
        action="store_true",
        help="Write only placeholder variables as values instead of generated text.",
    )
    parser.add_argument(
        "--lng",
        type=normalise_languages,
        default=None,
        help="Comma separated languages to generate, e.g. de,fr,es (default: en).",
    )
    parser.add_argument(
        "-l",
        "--log",
        action="store_true",
        help="Print the final JSON to the console.",
    )
    parser.add_argument(
        "-sf",
        "--separate-lng-files",
        action="store_true",
        help="Write each language to its own <target>.<lang>.json file.",
    )
    parser.add_argument(
        "--transl-func",
        default=DEFAULT_MARKER_FUNCTION,
        help=f"Name of the translation function in the templates (default: {DEFAULT_MARKER_FUNCTION}).",
    )
    parser.add_argument(
        "-u",
        "--update",
        action="store_true",
        help="Merge into the existing catalog file(s), keeping existing values.",
    )
    return parser


def build_translate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-translate",
        description="Translate the values of a JSON catalog through a translation service.",
    )
    parser.add_argument("source", help="Catalog JSON file to translate.")
    parser.add_argument("target", help="JSON file to write the translated catalog to.")
    parser.add_argument(
        "-t",
        "--target-language",
        required=True,
        help="Destination language code.",
    )
    parser.add_argument(
        "-s",
        "--source-language",
        help="Source language code; also selects the language section to translate.",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider: openai, azure_openai, deepl or echo.",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Provider-specific model or engine identifier.",
    )
    parser.add_argument(
        "-b",
        "--batch-guidance",
        type=int,
        default=DEFAULT_BATCH_BUDGET,
        help=f"Approximate maximum characters per request (default: {DEFAULT_BATCH_BUDGET}).",
    )
    parser.add_argument(
        "-dr",
        "--dry-run",
        action="store_true",
        help="Print the translated catalog without writing it.",
    )
    parser.add_argument(
        "-l",
        "--log",
        action="store_true",
        help="Print the translated catalog to the console.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    return parser


def main_collect(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_collect_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    options = CollectOptions(
        alphabetical=args.alphabetical,
        dry_run=args.dry_run,
        empty=args.empty,
        languages=normalise_languages(args.lng),
        log=args.log,
        separate_language_files=args.separate_lng_files,
        marker_function=args.transl_func,
        update=args.update,
    )
    try:
        collect(args.source, args.target, options)
    except I18nCollectError as exc:
        print(exc)
        return 1
    except OSError as exc:
        print(f"File error: {exc}")
        return 1
    except KeyboardInterrupt:
        print("Collection interrupted by user.")
        return 2
    return 0


def print_summary(summary: TranslationSummary) -> None:
    """Output a friendly report once processing completes."""

    print("\nTranslation complete.")
    print(f"  Input file:      {summary.source_path}")
    print(f"  Output file:     {summary.target_path}" + ("" if summary.written else " (not written)"))
    print(
        "  Texts:           "
        f"{summary.translated_texts} translated / {summary.total_texts} total "
        f"({summary.skipped_texts} skipped) in {summary.total_batches} batches"
    )
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else "")
    )
    if summary.source_language:
        print(f"  Source language: {summary.source_language}")
    print(f"  Target language: {summary.target_language}")
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds")


def main_translate(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_translate_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = None
    provider_debug = bool(args.debug_provider)
    if args.provider is None or normalise_provider_name(args.provider) != "echo":
        try:
            settings = get_settings()
        except TranslationProviderConfigurationError as exc:
            print(exc)
            return 1
        provider_debug = provider_debug or bool(settings.I18N_COLLECT_PROVIDER_DEBUG)

    try:
        provider = build_provider(args.provider, settings=settings, debug=provider_debug)
        summary = translate_file(
            source=pathlib.Path(args.source).expanduser(),
            target=pathlib.Path(args.target).expanduser(),
            provider=provider,
            target_language=args.target_language,
            source_language=args.source_language,
            model=args.model,
            batch_budget=args.batch_guidance,
            dry_run=args.dry_run,
            log=args.log,
            verbose=args.verbose,
        )
    except I18nCollectError as exc:
        print(exc)
        return 1
    except OSError as exc:
        print(f"File error: {exc}")
        return 1
    except KeyboardInterrupt:
        print("Translation interrupted by user.")
        return 2

    print_summary(summary)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main_collect())
