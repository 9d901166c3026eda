"""I/O layer - persistence and input file access."""

from .database_manager import DatabaseManager
from .input_reader import InputReader, split_lines

__all__ = ["DatabaseManager", "InputReader", "split_lines"]
