"""Exception hierarchy for vocab-cache."""


class VocabCacheError(Exception):
    """Base exception for all vocab-cache errors."""


class ConfigurationError(VocabCacheError):
    """Missing or invalid setting (API key, delay, mode)."""


class TokenizerBuildError(VocabCacheError):
    """Tokenizer dictionary data could not be loaded."""


class TokenizationError(VocabCacheError):
    """The tokenizer rejected one input line, e.g. one over Sudachi's byte limit."""


class StoreOpenError(VocabCacheError):
    """The SQLite cache file could not be opened or initialised."""


class InputReadError(VocabCacheError):
    """The input text file is missing or not valid UTF-8."""


class ExternalServiceError(VocabCacheError):
    """A call to a third-party service failed for this item."""


class DictionaryLookupError(ExternalServiceError):
    """Dictionary lookup raised or returned an unexpected shape."""


class TranslationError(ExternalServiceError):
    """Translation call failed or returned a malformed response."""
