"""Morphology Service - tokenization of Japanese text into raw token records."""

import logging
from typing import List, Optional

from sudachipy import Dictionary, SplitMode
from sudachipy.errors import SudachiError

from vocab_cache.core import RawToken
from vocab_cache.exceptions import TokenizationError, TokenizerBuildError

logger = logging.getLogger(__name__)

UNKNOWN_FORM = "*"
"""Canonical form reported for words missing from the tokenizer dictionary."""


class MorphologyService:
    """
    Analyzes Japanese text and emits one RawToken per morpheme.

    Uses SudachiPy (split mode C, core dictionary) for segmentation, lemmatization
    and the six-field part-of-speech tuple. The dictionary is loaded once by
    :meth:`build`; tokenizing before that is a programming error.
    """

    def __init__(self, dictionary_name: str = "core", split_mode: SplitMode = SplitMode.C):
        self._dictionary_name = dictionary_name
        self._split_mode = split_mode
        self._tokenizer = None

    @property
    def is_built(self) -> bool:
        return self._tokenizer is not None

    def build(self) -> None:
        """
        Load dictionary data and create the tokenizer.

        Raises:
            TokenizerBuildError: If the Sudachi dictionary cannot be loaded
        """
        if self._tokenizer is not None:
            return
        try:
            self._tokenizer = Dictionary(dict=self._dictionary_name).tokenizer(mode=self._split_mode)
        except Exception as e:
            raise TokenizerBuildError(
                f"Failed to load Sudachi dictionary '{self._dictionary_name}': {e}"
            ) from e
        logger.debug("Sudachi tokenizer built with dictionary '%s'", self._dictionary_name)

    def tokenize(self, text: str) -> List[RawToken]:
        """
        Tokenize a line of Japanese text.

        Args:
            text: One source line

        Returns:
            RawToken records in emission order; empty for empty text

        Raises:
            TokenizationError: If Sudachi rejects the line
        """
        if not text:
            return []
        if self._tokenizer is None:
            raise RuntimeError("MorphologyService.build() must be called before tokenize()")

        try:
            morphemes = self._tokenizer.tokenize(text)
        except SudachiError as e:
            raise TokenizationError(f"Sudachi could not tokenize line ({len(text)} chars): {e}") from e

        tokens = []
        for morpheme in morphemes:
            pos = tuple(morpheme.part_of_speech()) + ("*",) * 6
            reading = morpheme.reading_form()
            canonical_form: Optional[str] = morpheme.dictionary_form()
            if morpheme.is_oov():
                canonical_form = UNKNOWN_FORM

            tokens.append(
                RawToken(
                    surface=morpheme.surface(),
                    canonical_form=canonical_form or UNKNOWN_FORM,
                    category=pos[0],
                    subcategory1=pos[1],
                    subcategory2=pos[2],
                    subcategory3=pos[3],
                    conjugation_type=pos[4],
                    conjugation_form=pos[5],
                    reading=reading,
                    # Sudachi has no separate pronunciation field; the reading doubles as it.
                    pronunciation=reading,
                )
            )
        return tokens
