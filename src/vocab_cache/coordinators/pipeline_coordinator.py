"""Pipeline Coordinator - drives one run from input lines to a fully resolved cache."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

from vocab_cache.core import Line
from vocab_cache.exceptions import TokenizationError
from vocab_cache.io import DatabaseManager
from vocab_cache.services import (
    DictionaryService,
    ExampleIndex,
    FetchGate,
    LineTranslationCache,
    MorphologyService,
    Observation,
    ResolutionReport,
    TokenDictionaryCache,
    TokenNormalizer,
    TranslationService,
)
from vocab_cache.services.line_translation_cache import DEFAULT_BATCH_SIZE
from vocab_cache.services.settings_manager import TRANSLATION_MODES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineStrategy:
    """How a run translates lines and whether it indexes examples.

    ``batch_size`` caps how many lines go into one batched translation request.
    """

    translation_mode: str = "batched"
    index_examples: bool = True
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.translation_mode not in TRANSLATION_MODES:
            raise ValueError(
                f"translation_mode must be one of {TRANSLATION_MODES}, got {self.translation_mode!r}"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")


@dataclass
class PipelineReport:
    lines_read: int = 0
    lines_cached: int = 0
    lines_translated: int = 0
    lines_failed: int = 0
    lines_untokenized: int = 0
    tokens_seen: int = 0
    tokens_filtered: int = 0
    tokens_dropped: int = 0
    new_examples: int = 0
    dictionary: ResolutionReport = field(default_factory=ResolutionReport)


class PipelineContext:
    """
    Everything a run needs, acquired once and released on every exit path.

    Entering the context opens the store, creates the schema and builds the
    tokenizer; any failure there closes the store again and propagates, which
    aborts the run before processing starts.
    """

    def __init__(
        self,
        db_path: Path,
        morphology: MorphologyService,
        dictionary: DictionaryService,
        translator: TranslationService,
        dictionary_gate: FetchGate,
        translation_gate: FetchGate,
    ) -> None:
        self.db_path = Path(db_path)
        self.morphology = morphology
        self.dictionary = dictionary
        self.translator = translator
        self.dictionary_gate = dictionary_gate
        self.translation_gate = translation_gate
        self._db: Optional[DatabaseManager] = None

    @property
    def db(self) -> DatabaseManager:
        if self._db is None:
            raise RuntimeError("PipelineContext is not open")
        return self._db

    async def __aenter__(self) -> "PipelineContext":
        self._db = DatabaseManager(self.db_path)
        try:
            self._db.ensure_schema()
            self.morphology.build()
        except BaseException:
            self._close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._close()

    def _close(self) -> None:
        self.dictionary_gate.close()
        self.translation_gate.close()
        if self._db is not None:
            self._db.close()
            self._db = None


class VocabularyPipeline:
    """Orchestrates line translation, tokenization, example indexing and dictionary resolution.

    Lines are handled in input order and tokens in emission order. Dictionary
    resolution runs once, after every line is scanned, over tokens in first-seen
    order.
    """

    def __init__(self, context: PipelineContext, strategy: Optional[PipelineStrategy] = None) -> None:
        if context is None:
            raise ValueError("PipelineContext must not be None")
        self._context = context
        self._strategy = strategy or PipelineStrategy()

    @property
    def strategy(self) -> PipelineStrategy:
        return self._strategy

    async def run(self, lines: Iterable[str]) -> PipelineReport:
        """Process ``lines`` and persist everything learned from them."""
        context = self._context
        line_cache = LineTranslationCache(
            context.db, context.translator, context.translation_gate, batch_size=self._strategy.batch_size
        )
        dictionary_cache = TokenDictionaryCache(context.db, context.dictionary, context.dictionary_gate)
        examples = ExampleIndex(context.db)
        normalizer = TokenNormalizer()

        texts = [line.strip() for line in lines if line.strip()]
        report = PipelineReport(lines_read=len(texts))
        seen_tokens: Dict[str, None] = {}

        batched: Dict[str, Line] = {}
        if self._strategy.translation_mode == "batched":
            batched = await line_cache.resolve_lines(texts)

        for text in texts:
            if self._strategy.translation_mode == "batched":
                line = batched.get(text)
            else:
                line = await line_cache.resolve_line(text)

            try:
                raw_tokens = context.morphology.tokenize(text)
            except TokenizationError as e:
                report.lines_untokenized += 1
                logger.warning("Skipping line: %s", e)
                continue

            for raw in raw_tokens:
                normalized = normalizer.normalize(raw)
                if normalized is None:
                    continue
                seen_tokens.setdefault(normalized.token, None)
                if self._strategy.index_examples and line is not None:
                    examples.record(Observation(token=normalized, line_id=line.id))
                else:
                    examples.record_token(normalized)

        report.dictionary = await dictionary_cache.resolve_tokens(seen_tokens)

        report.lines_cached = line_cache.cache_hits
        report.lines_translated = line_cache.fetched
        report.lines_failed = line_cache.failed
        report.tokens_seen = len(seen_tokens)
        report.tokens_filtered = normalizer.stats.filtered
        report.tokens_dropped = normalizer.stats.dropped
        report.new_examples = examples.new_examples

        logger.info(
            "Run finished: %d lines (%d cached, %d translated, %d failed, %d untokenized), "
            "%d tokens (%d cached, %d resolved, %d unresolved, %d failed), %d new examples",
            report.lines_read,
            report.lines_cached,
            report.lines_translated,
            report.lines_failed,
            report.lines_untokenized,
            report.tokens_seen,
            report.dictionary.cached,
            report.dictionary.resolved,
            report.dictionary.unresolved,
            report.dictionary.failed,
            report.new_examples,
        )
        return report
