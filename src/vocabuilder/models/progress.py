from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, StrictFloat, StrictInt, StrictStr, TypeAdapter

from .common import CamelModel, ParseResult, parse_collection

MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5


class Rating(str, Enum):
    again = "again"
    good = "good"
    easy = "easy"


class ReviewProgress(CamelModel):
    """Spaced-repetition state of a single word.

    1 語につき 1 件。初回の採点時に遅延生成され、以後の採点ごとに
    新しいインスタンスへ置き換えられる。
    """

    word: StrictStr
    ease_factor: StrictFloat = Field(ge=MIN_EASE_FACTOR, le=MAX_EASE_FACTOR)
    interval: StrictInt = Field(ge=1)
    repetitions: StrictInt = Field(ge=0)
    next_review_date: StrictInt


_PROGRESS_ADAPTER = TypeAdapter(list[ReviewProgress])


def parse_progress(payload: Any) -> ParseResult[ReviewProgress]:
    """Validate a decoded `flashcards` collection."""

    return parse_collection(_PROGRESS_ADAPTER, payload)
