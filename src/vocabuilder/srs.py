"""Spaced-repetition scheduling (SM-2 family).

- セッション構築: 期限到来（due）の語を古い順に優先し、未学習語で埋めて
  最大 `size` 件を選び、出題順だけをシャッフルする
- 採点後の進捗更新: again / good / easy の 3 段階。ease は [1.3, 2.5] に収める
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .models.progress import MAX_EASE_FACTOR, MIN_EASE_FACTOR, Rating, ReviewProgress
from .models.translation import TranslationRecord

DAY_MS = 86_400_000
DEFAULT_SESSION_SIZE = 10
INITIAL_EASE_FACTOR = 2.5
EASY_INTERVAL_MULTIPLIER = 1.3
EASY_EASE_BONUS = 0.15
AGAIN_EASE_PENALTY = 0.2


@dataclass(frozen=True)
class Session:
    """Cards for one review pass plus the progress snapshot they were picked with."""

    cards: list[TranslationRecord]
    progress: dict[str, ReviewProgress] = field(default_factory=dict)

    def is_new(self, word: str) -> bool:
        return word not in self.progress


def round_half_up(value: float) -> int:
    """Round x.5 upward; identical to half-away-from-zero for positive values."""

    return int(math.floor(value + 0.5))


def _clamp_ease(value: float) -> float:
    return max(MIN_EASE_FACTOR, min(MAX_EASE_FACTOR, value))


def fresh_progress(word: str) -> ReviewProgress:
    return ReviewProgress(
        word=word,
        ease_factor=INITIAL_EASE_FACTOR,
        interval=1,
        repetitions=0,
        next_review_date=0,
    )


def apply_rating(progress: ReviewProgress, rating: Rating | str, now: int) -> ReviewProgress:
    """Return the progress after one review. The input is never mutated.

    | rating | repetitions | interval                                   | ease           |
    |--------|-------------|--------------------------------------------|----------------|
    | again  | 0           | 1                                          | max(1.3, EF-0.2) |
    | good   | prev+1      | prev<1 -> 1, prev==1 -> 6, else round(I*EF) | unchanged      |
    | easy   | prev+1      | good と同じ値を round(x*1.3)                | min(2.5, EF+0.15) |
    """

    rating = Rating(rating)
    previous_repetitions = progress.repetitions
    previous_interval = progress.interval
    previous_ease = progress.ease_factor

    if rating is Rating.again:
        repetitions = 0
        interval = 1
        ease_factor = previous_ease - AGAIN_EASE_PENALTY
    else:
        repetitions = previous_repetitions + 1
        if previous_repetitions < 1:
            interval = 1
        elif previous_repetitions == 1:
            interval = 6
        else:
            interval = round_half_up(previous_interval * previous_ease)
        ease_factor = previous_ease
        if rating is Rating.easy:
            interval = round_half_up(interval * EASY_INTERVAL_MULTIPLIER)
            ease_factor = previous_ease + EASY_EASE_BONUS

    interval = max(1, interval)
    return progress.model_copy(
        update={
            "repetitions": repetitions,
            "interval": interval,
            "ease_factor": _clamp_ease(ease_factor),
            "next_review_date": now + interval * DAY_MS,
        }
    )


def prioritize(
    history: Sequence[TranslationRecord],
    progress_map: Mapping[str, ReviewProgress],
    now: int,
    size: int = DEFAULT_SESSION_SIZE,
) -> list[TranslationRecord]:
    """Select session cards in priority order (before shuffling).

    due（期限到来済み）を nextReviewDate の昇順で先に、未学習語を履歴順で後に並べる。
    期限が未来の語は含めない。
    """

    due = [
        t for t in history
        if t.word in progress_map and progress_map[t.word].next_review_date <= now
    ]
    due.sort(key=lambda t: progress_map[t.word].next_review_date)
    unseen = [t for t in history if t.word not in progress_map]
    return [*due, *unseen][: max(0, size)]


def build_session(
    history: Sequence[TranslationRecord],
    progress_map: Mapping[str, ReviewProgress],
    now: int,
    *,
    size: int = DEFAULT_SESSION_SIZE,
    rng: random.Random | None = None,
) -> Session:
    cards = prioritize(history, progress_map, now, size)
    # random.shuffle は Fisher-Yates による一様な並べ替え
    (rng or random.Random()).shuffle(cards)
    return Session(cards=cards, progress=dict(progress_map))
