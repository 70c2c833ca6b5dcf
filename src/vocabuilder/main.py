from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .deps import reset_translate_flows
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .routers import health, history, review, translate


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "startup",
        environment=settings.environment,
        store_backend=settings.store_backend,
        store_path=settings.store_path,
    )
    yield
    # 実行中の翻訳リクエストを破棄
    reset_translate_flows()


configure_logging()
app = FastAPI(title="Vocabuilder API", version="0.1.0", lifespan=lifespan)

# アクセスログ/メトリクス（内側）→ リクエストID付与（外側）
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIDMiddleware)

app.include_router(health.router)  # ヘルスチェック
app.include_router(history.router, prefix="/api/history")  # 翻訳履歴
app.include_router(review.router, prefix="/api/review")  # フラッシュカード復習
app.include_router(translate.router, prefix="/api/translate")  # 翻訳
