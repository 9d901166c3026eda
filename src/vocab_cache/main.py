"""Main entry point for the vocabulary cache command line."""

import argparse
import asyncio
import logging
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from vocab_cache.coordinators import PipelineContext, PipelineStrategy, VocabularyPipeline
from vocab_cache.exceptions import ConfigurationError, VocabCacheError
from vocab_cache.io import DatabaseManager, InputReader
from vocab_cache.services import (
    DictionaryService,
    FetchGate,
    GeminiTranslationService,
    MorphologyService,
    SettingsManager,
)
from vocab_cache.services.settings_manager import TRANSLATION_MODES

logger = logging.getLogger("vocab_cache")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vocab-cache",
        description="Extract vocabulary from Japanese text into a persistent translation cache.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Tokenize, translate and cache an input file")
    run.add_argument("input", type=Path, help="UTF-8 text file, one line per sentence")
    run.add_argument("--db", type=Path, default=None, help="Cache database path")
    run.add_argument("--mode", choices=TRANSLATION_MODES, default=None, help="Line translation strategy")
    run.add_argument("--batch-size", type=int, default=None, help="Most lines per batched translation request")
    run.add_argument(
        "--dictionary-only",
        action="store_true",
        help="Skip the example index (no seen forms or examples are written)",
    )
    run.add_argument("--dictionary-delay", type=float, default=None, help="Seconds between lookups")
    run.add_argument("--translation-delay", type=float, default=None, help="Seconds between translations")
    run.add_argument("--model", default=None, help="Gemini model name")

    unresolved = subparsers.add_parser("unresolved", help="List tokens without a dictionary entry")
    unresolved.add_argument("--db", type=Path, default=None, help="Cache database path")
    unresolved.add_argument("--all", action="store_true", help="Include tokens already resolved")

    resolve = subparsers.add_parser("resolve", help="Mark an unresolved token as manually resolved")
    resolve.add_argument("token", help="Canonical token to mark")
    resolve.add_argument("--db", type=Path, default=None, help="Cache database path")

    stats = subparsers.add_parser("stats", help="Show row counts per table")
    stats.add_argument("--db", type=Path, default=None, help="Cache database path")

    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_context(args: argparse.Namespace, settings: SettingsManager) -> PipelineContext:
    """
    Composition root: the only place that instantiates and wires the collaborators.
    """
    dictionary_delay = settings.get_dictionary_delay() if args.dictionary_delay is None else args.dictionary_delay
    translation_delay = (
        settings.get_translation_delay() if args.translation_delay is None else args.translation_delay
    )
    if dictionary_delay < 0 or translation_delay < 0:
        raise ConfigurationError("Delays must not be negative")
    translator = GeminiTranslationService(
        api_key=settings.require_gemini_api_key(),
        model_name=args.model or settings.get_gemini_model(),
    )
    return PipelineContext(
        db_path=args.db or settings.get_db_path(),
        morphology=MorphologyService(),
        dictionary=DictionaryService(),
        translator=translator,
        dictionary_gate=FetchGate("dictionary", dictionary_delay),
        translation_gate=FetchGate("translation", translation_delay),
    )


async def run_pipeline(args: argparse.Namespace, settings: SettingsManager) -> int:
    lines = InputReader().read_lines(args.input)
    batch_size = settings.get_translation_batch_size() if args.batch_size is None else args.batch_size
    if batch_size < 1:
        raise ConfigurationError("--batch-size must be at least 1")
    strategy = PipelineStrategy(
        translation_mode=args.mode or settings.get_translation_mode(),
        index_examples=False if args.dictionary_only else settings.get_index_examples(),
        batch_size=batch_size,
    )
    async with build_context(args, settings) as context:
        report = await VocabularyPipeline(context, strategy).run(lines)

    print(
        f"{report.lines_read} lines, {report.tokens_seen} tokens, "
        f"{report.dictionary.resolved} new entries, {report.dictionary.unresolved} unresolved, "
        f"{report.lines_failed + report.lines_untokenized + report.dictionary.failed} failures (retried next run)"
    )
    return 0


def _open_store(args: argparse.Namespace, settings: SettingsManager) -> DatabaseManager:
    db = DatabaseManager(args.db or settings.get_db_path())
    try:
        db.ensure_schema()
    except VocabCacheError:
        db.close()
        raise
    return db


def list_unresolved(args: argparse.Namespace, settings: SettingsManager) -> int:
    db = _open_store(args, settings)
    try:
        for item in db.list_unresolved_tokens(include_resolved=args.all):
            status = "resolved" if item.resolved else "unresolved"
            print(f"{item.token}\t{status}\t{item.date_added}")
    finally:
        db.close()
    return 0


def resolve_token(args: argparse.Namespace, settings: SettingsManager) -> int:
    db = _open_store(args, settings)
    try:
        if not db.mark_resolved(args.token):
            print(f"Token not found among unresolved tokens: {args.token}", file=sys.stderr)
            return 1
    finally:
        db.close()
    print(f"Marked {args.token} as resolved")
    return 0


def show_stats(args: argparse.Namespace, settings: SettingsManager) -> int:
    db = _open_store(args, settings)
    try:
        for table, count in db.count_rows().items():
            print(f"{table}\t{count}")
    finally:
        db.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the chosen command and map fatal errors to exit status 1."""
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)
    settings = SettingsManager()

    try:
        if args.command == "run":
            return asyncio.run(run_pipeline(args, settings))
        if args.command == "unresolved":
            return list_unresolved(args, settings)
        if args.command == "resolve":
            return resolve_token(args, settings)
        return show_stats(args, settings)
    except VocabCacheError as e:
        logger.error("%s", e)
        return 1
    except sqlite3.Error as e:
        logger.error("Cache database error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
