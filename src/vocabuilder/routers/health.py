from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..metrics import registry

router = APIRouter()


@router.get("/healthz")
def health_check() -> dict[str, str]:
    """Simple health check endpoint.

    ライブネス/レディネス確認用の簡易エンドポイント。
    """
    return {"status": "ok"}


@router.get("/metrics")
def metrics() -> JSONResponse:
    """Return in-memory metrics (パス別 p95・ステータス分類、翻訳結果、破損検出回数)."""
    return JSONResponse(content=registry.snapshot())
