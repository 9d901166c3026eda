"""Incremental Japanese vocabulary cache: tokens, line translations and dictionary entries."""

__version__ = "0.1.0"
