from __future__ import annotations

from ..logging import logger
from ..models.translation import TranslationRecord, parse_history
from .durable import DurableStore

HISTORY_KEY = "history"


class HistoryRepository:
    """翻訳履歴（TranslationRecord の配列）の CRUD。

    書込系はいずれも「読めなかった（破損）場合は書かない」ガードを持つ。
    破損したストアを新しい 1 件で上書きすると、復旧可能だった履歴が失われるため。
    """

    def __init__(self, store: DurableStore) -> None:
        self._store = store

    def list(self) -> list[TranslationRecord]:
        """Return all records, newest first. Corruption degrades to an empty list."""

        return self._store.read_collection(HISTORY_KEY, parse_history).items

    def recent(self, limit: int = 5) -> list[TranslationRecord]:
        return self.list()[: max(0, limit)]

    def search(self, query: str) -> list[TranslationRecord]:
        """単語または訳語に query を含む履歴（大文字小文字は区別しない）。空の query は全件。"""

        needle = query.strip().casefold()
        records = self.list()
        if not needle:
            return records
        return [r for r in records if needle in r.word.casefold() or needle in r.translation.casefold()]

    def save(self, record: TranslationRecord) -> bool:
        """Prepend a record, evicting any older record of the same word."""

        current = self._store.read_collection(HISTORY_KEY, parse_history)
        if not current.readable:
            logger.warning("history_save_refused", word=record.word, reason="unreadable")
            return False
        updated = [record, *(r for r in current.items if r.word != record.word)]
        self._store.write_collection(HISTORY_KEY, updated)
        logger.info("history_saved", word=record.word, id=record.id, total=len(updated))
        return True

    def delete_by_id(self, record_id: str) -> bool:
        current = self._store.read_collection(HISTORY_KEY, parse_history)
        if not current.readable:
            logger.warning("history_delete_refused", id=record_id, reason="unreadable")
            return False
        updated = [r for r in current.items if r.id != record_id]
        self._store.write_collection(HISTORY_KEY, updated)
        logger.info("history_deleted", id=record_id, removed=len(current.items) - len(updated))
        return True

    def clear(self) -> None:
        self._store.remove_key(HISTORY_KEY)
        logger.info("history_cleared")
