from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from structlog import contextvars as structlog_contextvars

from .logging import logger
from .metrics import registry


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to each incoming request and expose it in headers.

    - Sets `request.state.request_id`
    - Binds `request_id` into structlog contextvars for the request's lifetime
    - Adds `X-Request-ID` to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog_contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog_contextvars.unbind_contextvars("request_id")
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Record per-route latency and status buckets, then emit `request_complete`."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        start = time.time()
        path = request.url.path
        is_error = False
        status: int | None = None
        try:
            response = await call_next(request)
            status = response.status_code
            is_error = status >= 500
            return response
        except Exception:
            is_error = True
            raise
        finally:
            latency_ms = (time.time() - start) * 1000
            route = request.scope.get("route")
            # /api/history/{record_id} のような可変パスはルートのテンプレートで集計する
            registry.record(getattr(route, "path", path), latency_ms, status=status)
            logger.info(
                "request_complete",
                path=path,
                method=request.method,
                status=status,
                latency_ms=latency_ms,
                is_error=is_error,
            )
