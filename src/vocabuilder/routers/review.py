from functools import partial

import anyio
from fastapi import APIRouter, Depends, HTTPException

from ..deps import get_service
from ..logging import logger
from ..models.review import ReviewGradeRequest, ReviewGradeResponse, ReviewSessionResponse
from ..service import VocabularyService

router = APIRouter(tags=["review"])


@router.get("/session", response_model=ReviewSessionResponse, summary="復習セッションのカードを取得")
async def review_session(service: VocabularyService = Depends(get_service)) -> ReviewSessionResponse:
    """Return up to `session_size` cards: due first (most overdue), then unseen, shuffled."""
    session = await anyio.to_thread.run_sync(service.build_session)
    progress = {c.word: session.progress[c.word] for c in session.cards if c.word in session.progress}
    return ReviewSessionResponse(cards=session.cards, progress=progress)


@router.post("/grade", response_model=ReviewGradeResponse, summary="採点して次回出題時刻を更新")
async def review_grade(
    req: ReviewGradeRequest, service: VocabularyService = Depends(get_service)
) -> ReviewGradeResponse:
    """Apply a rating to the word's current progress and persist it.

    - 履歴に無い語は 404
    - 進捗ストアが破損している場合は書き込まず 409
    """
    record = await anyio.to_thread.run_sync(partial(service.find_by_word, req.word))
    if record is None:
        raise HTTPException(status_code=404, detail="word not found in history")
    updated, saved = await anyio.to_thread.run_sync(partial(service.grade, req.word, req.rating))
    if not saved:
        logger.warning("review_grade_refused", word=req.word, rating=req.rating.value)
        raise HTTPException(status_code=409, detail="flashcard storage is corrupted; progress was not saved")
    return ReviewGradeResponse(ok=True, progress=updated)
