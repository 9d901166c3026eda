"""Translation Service - abstract JA→EN translation, single line or batched."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass
class TranslationResult:
    """Result of a translation request."""

    text: str
    model: str
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        """True if translation failed."""
        return self.error is not None


class TranslationService(ABC):
    """
    Abstract service for translating Japanese text to English.

    Implementations report failures as error results rather than raising, so a
    single bad line never aborts a run.
    """

    @abstractmethod
    async def translate(self, text: str) -> TranslationResult:
        """
        Translate one line of Japanese text to English.

        Args:
            text: Japanese text to translate.

        Returns:
            TranslationResult with text or error message.
        """

    @abstractmethod
    async def translate_batch(self, texts: Sequence[str]) -> List[TranslationResult]:
        """
        Translate many lines in a single request.

        Returns:
            One TranslationResult per input text, in input order.
        """
