from .review_session import (
    InvalidTransition,
    Loaded,
    Phase,
    Rated,
    Reveal,
    ReviewFlow,
    StudyState,
    reduce,
)
from .translate import TranslateFlow, TranslateOutcome

__all__ = [
    "InvalidTransition",
    "Loaded",
    "Phase",
    "Rated",
    "Reveal",
    "ReviewFlow",
    "StudyState",
    "TranslateFlow",
    "TranslateOutcome",
    "reduce",
]
