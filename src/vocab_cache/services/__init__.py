"""Services layer - external collaborators and the caches built on them."""

from vocab_cache.services.dictionary_service import (
    DictionaryCandidate,
    DictionaryLookupResult,
    DictionarySense,
    DictionaryService,
)
from vocab_cache.services.fetch_gate import FetchGate
from vocab_cache.services.settings_manager import SettingsManager

# Text processing services
from vocab_cache.services.text_processing import MorphologyService, TokenNormalizer, normalize_token

# Translation services
from vocab_cache.services.translation import TranslationService, TranslationResult, GeminiTranslationService

# Caches
from vocab_cache.services.line_translation_cache import LineTranslationCache
from vocab_cache.services.token_dictionary_cache import ResolutionReport, TokenDictionaryCache
from vocab_cache.services.example_index import ExampleIndex, Observation

__all__ = [
    "DictionaryCandidate",
    "DictionaryLookupResult",
    "DictionarySense",
    "DictionaryService",
    "FetchGate",
    "SettingsManager",
    "MorphologyService",
    "TokenNormalizer",
    "normalize_token",
    "TranslationService",
    "TranslationResult",
    "GeminiTranslationService",
    "LineTranslationCache",
    "ResolutionReport",
    "TokenDictionaryCache",
    "ExampleIndex",
    "Observation",
]
