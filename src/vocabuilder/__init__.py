"""Vocabulary builder: translation history and spaced-repetition review."""

__version__ = "0.1.0"
