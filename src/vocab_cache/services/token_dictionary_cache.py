"""Token Dictionary Cache - looks each canonical token up at most once, ever."""

import logging
from dataclasses import dataclass
from typing import Iterable, List

from vocab_cache.core import UnresolvedToken
from vocab_cache.exceptions import ExternalServiceError
from vocab_cache.io import DatabaseManager
from vocab_cache.services.dictionary_service import DictionaryLookupResult, DictionaryService
from vocab_cache.services.fetch_gate import FetchGate

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    cached: int = 0
    resolved: int = 0
    unresolved: int = 0
    failed: int = 0


class TokenDictionaryCache:
    """Persists one DictionaryEntry or one UnresolvedToken per canonical token.

    Tokens that already have either row are never looked up again. Lookup
    failures write nothing, so those tokens are retried on the next run.
    """

    def __init__(self, db: DatabaseManager, dictionary: DictionaryService, gate: FetchGate) -> None:
        self._db = db
        self._dictionary = dictionary
        self._gate = gate

    async def resolve_tokens(self, tokens: Iterable[str]) -> ResolutionReport:
        """
        Resolve dictionary data for every token not yet settled.

        Args:
            tokens: Canonical tokens in first-seen order; duplicates are ignored

        Returns:
            ResolutionReport with per-outcome counts
        """
        ordered = list(dict.fromkeys(tokens))
        settled = self._db.find_settled_tokens(ordered)
        report = ResolutionReport(cached=len(settled))

        for token in ordered:
            if token in settled:
                continue
            try:
                result: DictionaryLookupResult = await self._gate.call(self._dictionary.lookup, token)
            except ExternalServiceError as e:
                report.failed += 1
                logger.warning("Dictionary lookup failed for %r: %s", token, e)
                continue

            self._db.ensure_token(token)
            if result.best_match is None:
                self._db.insert_unresolved_token(token)
                report.unresolved += 1
                logger.info("No dictionary entry for %r; flagged for manual review", token)
                continue

            best = result.best_match
            self._db.insert_dictionary_entry(
                token,
                best_match=best.to_dict(),
                multiple_results=len(result.candidates) > 1,
                direct_match=best.identity == token,
            )
            report.resolved += 1

        return report

    def list_unresolved(self, include_resolved: bool = False) -> List[UnresolvedToken]:
        return self._db.list_unresolved_tokens(include_resolved=include_resolved)

    def mark_resolved(self, token: str) -> bool:
        return self._db.mark_resolved(token)
