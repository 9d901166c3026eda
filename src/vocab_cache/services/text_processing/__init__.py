"""Text processing services - morphology and token normalization."""

from vocab_cache.services.text_processing.morphology_service import UNKNOWN_FORM, MorphologyService
from vocab_cache.services.text_processing.token_normalizer import (
    FILTERED_WORD_TYPES,
    TYPE_DICTIONARY,
    NormalizerStats,
    TokenNormalizer,
    normalize_token,
)

__all__ = [
    "MorphologyService",
    "UNKNOWN_FORM",
    "FILTERED_WORD_TYPES",
    "TYPE_DICTIONARY",
    "NormalizerStats",
    "TokenNormalizer",
    "normalize_token",
]
