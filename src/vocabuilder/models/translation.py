from __future__ import annotations

from typing import Any

from pydantic import BaseModel, StrictInt, StrictStr, TypeAdapter

from .common import CamelModel, ParseResult, parse_collection


class TranslationResult(CamelModel):
    """翻訳プロバイダが返す構造化結果（履歴化する前の素の翻訳）。"""

    translation: StrictStr
    part_of_speech: StrictStr
    example: StrictStr
    example_translation: StrictStr


class TranslationRecord(CamelModel):
    """A translated word persisted in the history collection.

    - id: 一意で不透明な識別子
    - word: 正規化済みの英単語（履歴内で一意）
    - timestamp: 作成時刻（ms epoch）
    """

    id: StrictStr
    word: StrictStr
    translation: StrictStr
    part_of_speech: StrictStr
    example: StrictStr
    example_translation: StrictStr
    timestamp: StrictInt

    @classmethod
    def from_result(
        cls, *, record_id: str, word: str, result: TranslationResult, timestamp: int
    ) -> "TranslationRecord":
        return cls(
            id=record_id,
            word=word,
            translation=result.translation,
            part_of_speech=result.part_of_speech,
            example=result.example,
            example_translation=result.example_translation,
            timestamp=timestamp,
        )


class HistoryResponse(BaseModel):
    items: list[TranslationRecord]


_HISTORY_ADAPTER = TypeAdapter(list[TranslationRecord])


def parse_history(payload: Any) -> ParseResult[TranslationRecord]:
    """Validate a decoded `history` collection."""

    return parse_collection(_HISTORY_ADAPTER, payload)
