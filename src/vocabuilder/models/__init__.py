from .common import ParseResult
from .progress import MAX_EASE_FACTOR, MIN_EASE_FACTOR, Rating, ReviewProgress, parse_progress
from .translation import TranslationRecord, TranslationResult, parse_history

__all__ = [
    "MAX_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "ParseResult",
    "Rating",
    "ReviewProgress",
    "TranslationRecord",
    "TranslationResult",
    "parse_history",
    "parse_progress",
]
