"""Input Reader - loads source lines from a UTF-8 text file."""

import logging
from pathlib import Path
from typing import List

from vocab_cache.exceptions import InputReadError

logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Split raw text into trimmed, non-empty lines, preserving input order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


class InputReader:
    """Reads an input file with one source-language line per text line."""

    def read_lines(self, input_path: Path) -> List[str]:
        """
        Read and split an input file.

        Args:
            input_path: Path to a UTF-8 text file

        Returns:
            Trimmed non-empty lines in file order

        Raises:
            InputReadError: If the file is missing, unreadable or not UTF-8
        """
        path = Path(input_path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadError(f"Cannot read input file {path}: {e}") from e

        lines = split_lines(text)
        logger.info("Read %d non-empty lines from %s", len(lines), path)
        return lines
