"""Presentation-facing facade over the repositories and the scheduler.

UI / HTTP 層はこのクラスだけを経由して履歴・復習進捗にアクセスする。
リポジトリは読込→変更→書込を 1 キー単位で行うため、同一プロセス内の
書込はリポジトリごとのロックで直列化する。
"""

from __future__ import annotations

import random
import time
from threading import Lock
from typing import Callable

from .config import settings
from .models.progress import Rating, ReviewProgress
from .models.translation import TranslationRecord
from .srs import Session, apply_rating, build_session, fresh_progress
from .store import DurableStore, HistoryRepository, ProgressRepository, create_store


def now_ms() -> int:
    return int(time.time() * 1000)


class VocabularyService:
    def __init__(
        self,
        store: DurableStore,
        *,
        session_size: int | None = None,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
    ) -> None:
        self.history = HistoryRepository(store)
        self.progress = ProgressRepository(store)
        self.session_size = settings.session_size if session_size is None else session_size
        self.clock = clock
        self._rng = rng or random.Random()
        self._history_lock = Lock()
        self._progress_lock = Lock()

    # --- history ---
    def list_history(self, query: str | None = None) -> list[TranslationRecord]:
        if query is None:
            return self.history.list()
        return self.history.search(query)

    def save_translation(self, record: TranslationRecord) -> bool:
        with self._history_lock:
            return self.history.save(record)

    def delete_translation(self, record_id: str) -> bool:
        with self._history_lock:
            return self.history.delete_by_id(record_id)

    def clear_history(self) -> None:
        with self._history_lock:
            self.history.clear()

    def find_by_word(self, word: str) -> TranslationRecord | None:
        return next((r for r in self.history.list() if r.word == word), None)

    # --- review ---
    def build_session(self, now: int | None = None) -> Session:
        return build_session(
            self.history.list(),
            self.progress.get_all(),
            self.clock() if now is None else now,
            size=self.session_size,
            rng=self._rng,
        )

    def get_progress(self) -> dict[str, ReviewProgress]:
        return self.progress.get_all()

    def save_progress(self, progress: ReviewProgress) -> bool:
        with self._progress_lock:
            return self.progress.save(progress)

    def grade(self, word: str, rating: Rating | str, now: int | None = None) -> tuple[ReviewProgress, bool]:
        """Read, rate and persist one word's progress as a single locked step.

        戻り値は (採点後の進捗, 保存できたか)。進捗が無ければ初期値から計算する。
        ストア破損時は計算結果を返すが保存はされない。
        """

        with self._progress_lock:
            existing = self.progress.get_all().get(word) or fresh_progress(word)
            updated = apply_rating(existing, rating, self.clock() if now is None else now)
            return updated, self.progress.save(updated)

    @staticmethod
    def apply_rating(progress: ReviewProgress, rating: Rating | str, now: int) -> ReviewProgress:
        return apply_rating(progress, rating, now)


def create_service() -> VocabularyService:
    return VocabularyService(create_store())
