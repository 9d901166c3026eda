"""Dictionary Service - Jamdict-backed candidate lookup for canonical tokens."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from jamdict import Jamdict
from jamdict.jmdict import JMDEntry
from jamdict.util import LookupResult

from vocab_cache.exceptions import DictionaryLookupError


@dataclass
class DictionarySense:
    """Single sense of a dictionary entry."""

    glosses: List[str]
    pos: List[str]


@dataclass
class DictionaryCandidate:
    """One dictionary entry matching a lookup term."""

    identity: str
    """Headword used to compare against the query (first kanji form, else first kana form)"""

    entry_id: Optional[int] = None
    kanji_forms: List[str] = field(default_factory=list)
    kana_forms: List[str] = field(default_factory=list)
    senses: List[DictionarySense] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DictionaryLookupResult:
    """All candidates for a lookup term, best match first."""

    term: str
    candidates: List[DictionaryCandidate]

    @property
    def best_match(self) -> Optional[DictionaryCandidate]:
        return self.candidates[0] if self.candidates else None


class DictionaryService:
    """Wraps Jamdict to fetch candidate entries for canonical tokens."""

    def __init__(self, jamdict: Optional[Jamdict] = None):
        self._jamdict = jamdict

    def _get_jamdict(self) -> Jamdict:
        if self._jamdict is None:
            self._jamdict = Jamdict()
        return self._jamdict

    def lookup(self, term: str) -> DictionaryLookupResult:
        """
        Lookup a canonical token.

        Args:
            term: Dictionary form to search for

        Returns:
            DictionaryLookupResult; an empty candidate list means "no entry"

        Raises:
            DictionaryLookupError: If Jamdict raises or returns an unexpected shape
        """
        query = term.strip()
        if not query:
            return DictionaryLookupResult(term=term, candidates=[])

        try:
            result: LookupResult = self._get_jamdict().lookup(query)
        except Exception as exc:
            raise DictionaryLookupError(f"Jamdict lookup failed for '{query}': {exc}") from exc

        entries = getattr(result, "entries", None)
        if entries is None:
            raise DictionaryLookupError(
                f"Unexpected Jamdict response for '{query}': {type(result).__name__}"
            )

        candidates = [self._build_candidate(entry) for entry in entries]
        return DictionaryLookupResult(term=term, candidates=candidates)

    def _build_candidate(self, entry: JMDEntry) -> DictionaryCandidate:
        kanji_forms = [form.text for form in entry.kanji_forms]
        kana_forms = [form.text for form in entry.kana_forms]
        identity = (kanji_forms or kana_forms or [""])[0]
        return DictionaryCandidate(
            identity=identity,
            entry_id=int(entry.idseq) if entry.idseq else None,
            kanji_forms=kanji_forms,
            kana_forms=kana_forms,
            senses=self._build_senses(entry),
        )

    def _build_senses(self, entry: JMDEntry) -> List[DictionarySense]:
        """Build DictionarySense list from JMDEntry.senses."""
        senses: List[DictionarySense] = []
        for sense in entry.senses:
            glosses = [gloss.text for gloss in sense.gloss]
            # POS is a list of strings in jamdict
            pos = [str(p) for p in sense.pos]
            senses.append(DictionarySense(glosses=glosses, pos=pos))
        return senses
