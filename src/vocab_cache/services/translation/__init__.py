"""Translation services - abstract interface and Gemini implementation."""

from vocab_cache.services.translation.translation_service import TranslationService, TranslationResult
from vocab_cache.services.translation.gemini_translation_service import GeminiTranslationService

__all__ = [
    "TranslationService",
    "TranslationResult",
    "GeminiTranslationService",
]
