"""Line Translation Cache - reuses or fetches full-line translations keyed by exact text."""

import logging
from typing import Dict, List, Optional, Sequence

from vocab_cache.core import Line
from vocab_cache.exceptions import ExternalServiceError
from vocab_cache.io import DatabaseManager
from vocab_cache.services.fetch_gate import FetchGate
from vocab_cache.services.translation import TranslationResult, TranslationService

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50
"""Most lines sent in one batched translation request; keeps replies under the model's output limit."""


class LineTranslationCache:
    """Resolves source lines to stored Line rows, calling the translator only on a miss.

    A failed translation returns None for that line; nothing is stored, so the
    next run asks again.
    """

    def __init__(
        self,
        db: DatabaseManager,
        translator: TranslationService,
        gate: FetchGate,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._db = db
        self._translator = translator
        self._gate = gate
        self._batch_size = batch_size
        self.cache_hits = 0
        self.fetched = 0
        self.failed = 0

    async def resolve_line(self, text: str) -> Optional[Line]:
        """Return the Line for ``text``, translating it once if it is not cached."""
        cached = self._db.get_line(text)
        if cached is not None:
            self.cache_hits += 1
            return cached

        try:
            result: TranslationResult = await self._gate.call(self._translator.translate, text)
        except ExternalServiceError as e:
            self._record_failure(text, str(e))
            return None

        if result.is_error:
            self._record_failure(text, result.error)
            return None

        self.fetched += 1
        return self._db.insert_line(text, result.text)

    async def resolve_lines(self, texts: Sequence[str]) -> Dict[str, Line]:
        """
        Batched variant of :meth:`resolve_line`.

        Looks up every distinct text in one pass and sends only the misses to the
        translator, at most ``batch_size`` lines per gated call. A failed chunk
        leaves only its own lines unresolved.

        Returns:
            Mapping of source text to Line for every text that resolved.
        """
        distinct = list(dict.fromkeys(texts))
        resolved = self._db.find_lines(distinct)
        self.cache_hits += len(resolved)

        missing: List[str] = [text for text in distinct if text not in resolved]
        for start in range(0, len(missing), self._batch_size):
            chunk = missing[start : start + self._batch_size]
            resolved.update(await self._translate_chunk(chunk))
        return resolved

    async def _translate_chunk(self, chunk: List[str]) -> Dict[str, Line]:
        try:
            results: List[TranslationResult] = await self._gate.call(
                self._translator.translate_batch, chunk
            )
        except ExternalServiceError as e:
            for text in chunk:
                self._record_failure(text, str(e))
            return {}

        if len(results) != len(chunk):
            logger.error(
                "Batch translation returned %d results for %d lines; leaving batch unresolved",
                len(results),
                len(chunk),
            )
            self.failed += len(chunk)
            return {}

        lines: Dict[str, Line] = {}
        for text, result in zip(chunk, results):
            if result.is_error:
                self._record_failure(text, result.error)
                continue
            self.fetched += 1
            lines[text] = self._db.insert_line(text, result.text)
        return lines

    def _record_failure(self, text: str, reason: Optional[str]) -> None:
        self.failed += 1
        logger.warning("Translation failed for line %r: %s", text, reason)
