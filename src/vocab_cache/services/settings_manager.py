"""Settings Manager - Handles API key, store location and pipeline configuration."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from vocab_cache.exceptions import ConfigurationError

TRANSLATION_MODES = ("batched", "per_line")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SettingsManager:
    """
    Manages settings and API key configuration.

    Reads a .env file from the project root (the working directory by default),
    then environment variables. Values already present in the environment win.
    """

    DEFAULT_DB_PATH = "vocab_cache.db"
    DEFAULT_DICTIONARY_DELAY = 0.5
    DEFAULT_TRANSLATION_DELAY = 1.0
    DEFAULT_TRANSLATION_MODE = "batched"
    DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
    DEFAULT_TRANSLATION_BATCH_SIZE = 50

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Directory holding the .env file.
                         If None, uses the current working directory.
        """
        if project_root is None:
            project_root = Path.cwd()

        env_path = Path(project_root) / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = Path(project_root)

    def get_gemini_api_key(self) -> Optional[str]:
        """Get the Gemini API key from environment."""
        key = os.getenv("GEMINI_API_KEY")
        return key.strip() if key and key.strip() else None

    def require_gemini_api_key(self) -> str:
        key = self.get_gemini_api_key()
        if key is None:
            raise ConfigurationError("GEMINI_API_KEY is not set (environment or .env file)")
        return key

    def get_db_path(self) -> Path:
        return Path(os.getenv("VOCAB_CACHE_DB") or self.DEFAULT_DB_PATH)

    def get_gemini_model(self) -> str:
        return os.getenv("VOCAB_CACHE_GEMINI_MODEL") or self.DEFAULT_GEMINI_MODEL

    def get_dictionary_delay(self) -> float:
        """Minimum seconds between dictionary lookups."""
        return self._get_delay("VOCAB_CACHE_DICTIONARY_DELAY", self.DEFAULT_DICTIONARY_DELAY)

    def get_translation_delay(self) -> float:
        """Minimum seconds between translation requests."""
        return self._get_delay("VOCAB_CACHE_TRANSLATION_DELAY", self.DEFAULT_TRANSLATION_DELAY)

    def get_translation_mode(self) -> str:
        mode = (os.getenv("VOCAB_CACHE_TRANSLATION_MODE") or self.DEFAULT_TRANSLATION_MODE).strip().lower()
        if mode not in TRANSLATION_MODES:
            raise ConfigurationError(
                f"VOCAB_CACHE_TRANSLATION_MODE must be one of {TRANSLATION_MODES}, got {mode!r}"
            )
        return mode

    def get_translation_batch_size(self) -> int:
        """Maximum lines per batched translation request."""
        raw = os.getenv("VOCAB_CACHE_TRANSLATION_BATCH_SIZE")
        if raw is None or not raw.strip():
            return self.DEFAULT_TRANSLATION_BATCH_SIZE
        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"VOCAB_CACHE_TRANSLATION_BATCH_SIZE must be a whole number, got {raw!r}"
            ) from e
        if value < 1:
            raise ConfigurationError(f"VOCAB_CACHE_TRANSLATION_BATCH_SIZE must be at least 1, got {value}")
        return value

    def get_index_examples(self) -> bool:
        raw = os.getenv("VOCAB_CACHE_INDEX_EXAMPLES")
        if raw is None or not raw.strip():
            return True
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"VOCAB_CACHE_INDEX_EXAMPLES must be a boolean, got {raw!r}")

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)

    @staticmethod
    def _get_delay(name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as e:
            raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}") from e
        if value < 0:
            raise ConfigurationError(f"{name} must not be negative, got {value}")
        return value
