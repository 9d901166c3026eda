"""Domain layer - pure entities for tokens, lines and cached dictionary data."""

from .raw_token import NormalizedToken, RawToken
from .vocabulary_entities import (
    DictionaryEntry,
    Example,
    Line,
    SeenForm,
    Token,
    UnresolvedToken,
)

__all__ = [
    "RawToken",
    "NormalizedToken",
    "Token",
    "SeenForm",
    "Line",
    "Example",
    "DictionaryEntry",
    "UnresolvedToken",
]
