from __future__ import annotations

from ..logging import logger
from ..models.progress import ReviewProgress, parse_progress
from .durable import DurableStore

PROGRESS_KEY = "flashcards"


class ProgressRepository:
    """語ごとの復習進捗（ReviewProgress）を word をキーに保持する。"""

    def __init__(self, store: DurableStore) -> None:
        self._store = store

    def get_all(self) -> dict[str, ReviewProgress]:
        """Return word -> progress. Corruption degrades to an empty mapping."""

        result = self._store.read_collection(PROGRESS_KEY, parse_progress)
        return {p.word: p for p in result.items}

    def save(self, progress: ReviewProgress) -> bool:
        """Upsert by word and rewrite the whole collection."""

        current = self._store.read_collection(PROGRESS_KEY, parse_progress)
        if not current.readable:
            logger.warning("progress_save_refused", word=progress.word, reason="unreadable")
            return False
        by_word = {p.word: p for p in current.items}
        by_word[progress.word] = progress
        self._store.write_collection(PROGRESS_KEY, by_word.values())
        logger.info(
            "progress_saved",
            word=progress.word,
            interval=progress.interval,
            repetitions=progress.repetitions,
            ease_factor=progress.ease_factor,
        )
        return True
