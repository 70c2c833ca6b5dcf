from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..deps import get_translate_flow
from ..flows.translate import TranslateFlow
from ..models.translation import TranslationRecord
from ..providers import TranslationErrorCode, user_facing_message

router = APIRouter(tags=["translate"])

# エラーコード → HTTP ステータス
_STATUS_BY_CODE = {
    TranslationErrorCode.INVALID_WORD_INPUT: 422,
    TranslationErrorCode.INVALID_API_KEY: 401,
    TranslationErrorCode.GEMINI_REQUEST_FAILED: 502,
    TranslationErrorCode.GEMINI_EMPTY_RESPONSE: 502,
    TranslationErrorCode.GEMINI_INVALID_RESPONSE: 502,
}


class TranslateRequest(BaseModel):
    word: str = Field(max_length=256)


class TranslateResponse(BaseModel):
    """翻訳結果。superseded の場合は record を持たない。"""

    status: str
    record: TranslationRecord | None = None
    saved: bool | None = None


@router.post("", response_model=TranslateResponse, response_model_exclude_none=True, summary="単語を翻訳して履歴に保存")
async def translate(req: TranslateRequest, flow: TranslateFlow = Depends(get_translate_flow)) -> TranslateResponse:
    """Translate a word; a newer request from the same client supersedes this one."""
    outcome = await flow.request(req.word)
    if outcome.status == "error" and outcome.error is not None:
        raise HTTPException(
            status_code=_STATUS_BY_CODE.get(outcome.error, 502),
            detail={"code": outcome.error.value, "message": user_facing_message(outcome.error)},
        )
    saved = outcome.saved if outcome.status == "ok" else None
    return TranslateResponse(status=outcome.status, record=outcome.record, saved=saved)
