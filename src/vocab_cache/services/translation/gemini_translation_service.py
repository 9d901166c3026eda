"""Gemini Translation Service - Implements translation via Google Gemini API."""

import json
import logging
from typing import Any, List, Optional, Sequence

import google.genai as genai
from google.genai import types

from vocab_cache.exceptions import TranslationError
from vocab_cache.services.translation.translation_service import TranslationResult, TranslationService

logger = logging.getLogger(__name__)


def _describe_error(exc: Exception) -> str:
    """Map an API exception onto a short, user-facing reason."""
    error_msg = str(exc).lower()
    if "429" in error_msg or "resource_exhausted" in error_msg or "quota" in error_msg or "rate_limit" in error_msg:
        return "API quota exceeded. Please try again later."
    if "api_key" in error_msg or "authentication" in error_msg or "invalid" in error_msg:
        return f"Invalid API key or request: {exc}"
    if "deadline" in error_msg or "timeout" in error_msg:
        return "Request timed out. Please check your connection."
    return f"Translation failed: {exc}"


class GeminiTranslationService(TranslationService):
    """
    Translation service using Google Gemini API.

    Optimized for speed and consistency with lower temperature settings.
    Uses the async surface of the google.genai package (``client.aio``).
    """

    MODEL_NAME = "gemini-2.0-flash"

    TRANSLATION_PROMPT = """Translate the following Japanese text to natural, idiomatic English.
Preserve the tone and nuance of the original.
Only output the translation, nothing else.

Japanese text:
{text}"""

    BATCH_TRANSLATION_PROMPT = """Translate each of the following Japanese lines to natural, idiomatic English.
Preserve the tone and nuance of each line and translate every line on its own.
Respond with a JSON array of exactly {count} strings, one translation per line, in the same order.

Japanese lines (JSON array):
{lines}"""

    def __init__(self, api_key: str, model_name: Optional[str] = None, client: Any = None):
        self.model_name = model_name or self.MODEL_NAME
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def translate(self, text: str) -> TranslationResult:
        """
        Translate Japanese text to English using Gemini API.

        Args:
            text: Japanese text to translate.

        Returns:
            TranslationResult with translated text or error message.
        """
        prompt = self.TRANSLATION_PROMPT.format(text=text)
        logger.debug("Gemini translate request (%s): %r", self.model_name, text[:100])

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=0.3,
                    top_p=0.95,
                    top_k=40,
                    max_output_tokens=1024,
                ),
            )
        except Exception as e:
            return TranslationResult(text="", model=self.model_name, error=_describe_error(e))

        if not response.text:
            return TranslationResult(
                text="",
                model=self.model_name,
                error="Empty response from API",
            )

        return TranslationResult(text=response.text.strip(), model=self.model_name)

    async def translate_batch(self, texts: Sequence[str]) -> List[TranslationResult]:
        """
        Translate many lines with one request.

        The model is asked for a JSON array; a reply of the wrong shape or length
        fails every line of the batch.
        """
        texts = list(texts)
        if not texts:
            return []

        prompt = self.BATCH_TRANSLATION_PROMPT.format(
            count=len(texts),
            lines=json.dumps(texts, ensure_ascii=False),
        )
        logger.debug("Gemini batch translate request (%s): %d lines", self.model_name, len(texts))

        try:
            response = await self._client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=0.3,
                    top_p=0.95,
                    top_k=40,
                    response_mime_type="application/json",
                ),
            )
            translations = self._parse_batch(response.text, len(texts))
        except TranslationError as e:
            logger.error("Malformed batch translation response: %s", e)
            return self._failed_batch(len(texts), str(e))
        except Exception as e:
            return self._failed_batch(len(texts), _describe_error(e))

        return [
            TranslationResult(text=item, model=self.model_name)
            if item
            else TranslationResult(text="", model=self.model_name, error="Empty translation in batch")
            for item in translations
        ]

    def _failed_batch(self, count: int, error: str) -> List[TranslationResult]:
        return [TranslationResult(text="", model=self.model_name, error=error) for _ in range(count)]

    @staticmethod
    def _parse_batch(raw: Optional[str], expected: int) -> List[str]:
        if not raw:
            raise TranslationError("Empty response from API")
        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TranslationError(f"Response is not JSON: {e}") from e
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise TranslationError("Response is not a JSON array of strings")
        if len(items) != expected:
            raise TranslationError(f"Expected {expected} translations, got {len(items)}")
        return [item.strip() for item in items]
