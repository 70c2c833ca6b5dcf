from functools import partial

import anyio
from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_service
from ..models.translation import HistoryResponse
from ..service import VocabularyService

router = APIRouter(tags=["history"])

_CORRUPTED_DETAIL = "history storage is corrupted; nothing was written"


@router.get("", response_model=HistoryResponse, summary="翻訳履歴の一覧（新しい順）")
async def list_history(
    limit: int | None = Query(default=None, ge=1, le=1000),
    q: str | None = Query(default=None, max_length=64, description="単語/訳語の部分一致（大文字小文字を区別しない）"),
    service: VocabularyService = Depends(get_service),
) -> HistoryResponse:
    items = await anyio.to_thread.run_sync(partial(service.list_history, q))
    return HistoryResponse(items=items if limit is None else items[:limit])


@router.delete("/{record_id}", summary="履歴から 1 件削除")
async def delete_translation(
    record_id: str, service: VocabularyService = Depends(get_service)
) -> dict[str, bool]:
    ok = await anyio.to_thread.run_sync(partial(service.delete_translation, record_id))
    if not ok:
        raise HTTPException(status_code=409, detail=_CORRUPTED_DETAIL)
    return {"ok": True}


@router.delete("", summary="履歴を全削除")
async def clear_history(service: VocabularyService = Depends(get_service)) -> dict[str, bool]:
    await anyio.to_thread.run_sync(service.clear_history)
    return {"ok": True}
