"""Token Normalizer - filters non-content tokens and keys the rest by canonical form."""

import unicodedata
from dataclasses import dataclass
from typing import Optional

from vocab_cache.core import NormalizedToken, RawToken
from vocab_cache.services.text_processing.morphology_service import UNKNOWN_FORM

# Particles, symbols, auxiliary verbs and whitespace never become Tokens.
FILTERED_WORD_TYPES = frozenset({"助詞", "記号", "補助記号", "助動詞", "空白"})

TYPE_DICTIONARY = {
    "副詞": "Adverb",
    "名詞": "Noun",
    "動詞": "Verb",
    "形容詞": "Adjective",
}


def _is_punctuation_only(text: str) -> bool:
    return all(unicodedata.category(char)[0] in ("P", "Z") for char in text)


def type_label_for(category: str) -> str:
    """English label for the main categories, raw category otherwise."""
    return TYPE_DICTIONARY.get(category, category)


def is_filtered(raw: RawToken) -> bool:
    return raw.category in FILTERED_WORD_TYPES


def is_droppable(raw: RawToken) -> bool:
    """Unknown, empty and punctuation-only canonical forms carry no vocabulary."""
    form = raw.canonical_form.strip()
    return not form or form == UNKNOWN_FORM or _is_punctuation_only(form)


def normalize_token(raw: RawToken) -> Optional[NormalizedToken]:
    """Return the normalized record for a content token, None for anything else."""
    if is_filtered(raw) or is_droppable(raw):
        return None

    return NormalizedToken(
        token=raw.canonical_form.strip(),
        type_label=type_label_for(raw.category),
        surface=raw.surface,
        category=raw.category,
        subcategory1=raw.subcategory1,
        subcategory2=raw.subcategory2,
        subcategory3=raw.subcategory3,
        conjugation_type=raw.conjugation_type,
        conjugation_form=raw.conjugation_form,
        reading=raw.reading,
        pronunciation=raw.pronunciation,
    )


@dataclass
class NormalizerStats:
    kept: int = 0
    filtered: int = 0
    dropped: int = 0


class TokenNormalizer:
    """Applies :func:`normalize_token` and counts what was discarded and why."""

    def __init__(self) -> None:
        self.stats = NormalizerStats()

    def normalize(self, raw: RawToken) -> Optional[NormalizedToken]:
        if is_filtered(raw):
            self.stats.filtered += 1
            return None
        normalized = normalize_token(raw)
        if normalized is None:
            self.stats.dropped += 1
            return None
        self.stats.kept += 1
        return normalized
