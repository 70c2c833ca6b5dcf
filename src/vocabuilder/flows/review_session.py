"""Flashcard review session: state machine and the flow that persists ratings.

状態遷移は loading → studying → done。reduce は純粋関数で、採点結果の
永続化だけを ReviewFlow が担う。永続化に失敗した場合（ストア破損）は
状態を進めず、同じカードに留まる。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Union

from ..logging import logger
from ..models.progress import Rating, ReviewProgress
from ..models.translation import TranslationRecord


class Phase(str, Enum):
    loading = "loading"
    studying = "studying"
    done = "done"


class InvalidTransition(RuntimeError):
    """Raised when an event does not apply to the current phase."""


@dataclass(frozen=True)
class StudyState:
    phase: Phase = Phase.loading
    cards: tuple[TranslationRecord, ...] = ()
    progress_map: dict[str, ReviewProgress] = field(default_factory=dict)
    current_index: int = 0
    revealed: bool = False
    again_count: int = 0
    good_count: int = 0
    easy_count: int = 0

    @property
    def current_card(self) -> TranslationRecord | None:
        if self.phase is not Phase.studying:
            return None
        return self.cards[self.current_index]

    @property
    def total_rated(self) -> int:
        return self.again_count + self.good_count + self.easy_count


@dataclass(frozen=True)
class Loaded:
    cards: tuple[TranslationRecord, ...]
    progress_map: dict[str, ReviewProgress]


@dataclass(frozen=True)
class Reveal:
    pass


@dataclass(frozen=True)
class Rated:
    rating: Rating
    updated: ReviewProgress


Event = Union[Loaded, Reveal, Rated]


def reduce(state: StudyState, event: Event) -> StudyState:
    if isinstance(event, Loaded):
        if state.phase is not Phase.loading:
            raise InvalidTransition(f"loaded while {state.phase.value}")
        return replace(
            state,
            phase=Phase.done if not event.cards else Phase.studying,
            cards=tuple(event.cards),
            progress_map=dict(event.progress_map),
        )
    if isinstance(event, Reveal):
        if state.phase is not Phase.studying:
            raise InvalidTransition(f"reveal while {state.phase.value}")
        return replace(state, revealed=True)
    if isinstance(event, Rated):
        if state.phase is not Phase.studying:
            raise InvalidTransition(f"rate while {state.phase.value}")
        next_index = state.current_index + 1
        is_done = next_index >= len(state.cards)
        progress_map = dict(state.progress_map)
        progress_map[event.updated.word] = event.updated
        return replace(
            state,
            phase=Phase.done if is_done else Phase.studying,
            current_index=state.current_index if is_done else next_index,
            revealed=False,
            progress_map=progress_map,
            again_count=state.again_count + (event.rating is Rating.again),
            good_count=state.good_count + (event.rating is Rating.good),
            easy_count=state.easy_count + (event.rating is Rating.easy),
        )
    raise InvalidTransition(f"unknown event: {event!r}")


class ReviewFlow:
    """Drive one review session against a VocabularyService."""

    def __init__(self, service, clock: Callable[[], int] | None = None) -> None:
        self.service = service
        self.clock = clock or service.clock
        self.state = StudyState()

    def start(self) -> StudyState:
        session = self.service.build_session(self.clock())
        self.state = reduce(self.state, Loaded(cards=tuple(session.cards), progress_map=session.progress))
        logger.info("review_session_started", cards=len(session.cards), phase=self.state.phase.value)
        return self.state

    def reveal(self) -> StudyState:
        self.state = reduce(self.state, Reveal())
        return self.state

    def rate(self, rating: Rating | str) -> bool:
        """Rate the current card. Returns False (state unchanged) when saving fails."""

        rating = Rating(rating)
        card = self.state.current_card
        if card is None:
            raise InvalidTransition(f"rate while {self.state.phase.value}")
        # 読込・採点・保存はサービス側のロック内で行う
        updated, saved = self.service.grade(card.word, rating, self.clock())
        if not saved:
            logger.warning("review_rating_not_saved", word=card.word, rating=rating.value)
            return False
        self.state = reduce(self.state, Rated(rating=rating, updated=updated))
        return True

    def summary(self) -> dict[str, int]:
        return {
            "again": self.state.again_count,
            "good": self.state.good_count,
            "easy": self.state.easy_count,
        }
