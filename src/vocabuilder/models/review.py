from pydantic import BaseModel, Field

from .progress import Rating, ReviewProgress
from .translation import TranslationRecord


class ReviewSessionResponse(BaseModel):
    """Cards selected for a review pass.

    - cards: 出題順（シャッフル済み）のカード
    - progress: 出題カードに対応する進捗スナップショット（未学習語は含まない）
    """

    cards: list[TranslationRecord]
    progress: dict[str, ReviewProgress] = {}


class ReviewGradeRequest(BaseModel):
    """復習結果の採点リクエスト。

    - word: 採点対象の語（履歴に存在すること）
    - rating: again | good | easy
    """

    word: str = Field(min_length=1, max_length=64)
    rating: Rating


class ReviewGradeResponse(BaseModel):
    ok: bool
    progress: ReviewProgress
