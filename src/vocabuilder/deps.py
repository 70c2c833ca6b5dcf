"""FastAPI dependencies shared by the routers.

サービスと翻訳フローはプロセス内で共有する。テストでは
`app.dependency_overrides` でインメモリ構成へ差し替える。
"""

from __future__ import annotations

from functools import lru_cache
from threading import Lock

from fastapi import Depends, Header

from .flows.translate import TranslateFlow
from .providers import get_translator
from .service import VocabularyService, create_service

_FLOWS: dict[str, TranslateFlow] = {}
_FLOWS_LOCK = Lock()


@lru_cache(maxsize=1)
def get_service() -> VocabularyService:
    return create_service()


def get_translate_flow(
    service: VocabularyService = Depends(get_service),
    x_client_id: str | None = Header(default=None),
) -> TranslateFlow:
    """Return the single-flight flow owned by the calling client (X-Client-Id)."""

    channel = (x_client_id or "").strip() or "default"
    with _FLOWS_LOCK:
        flow = _FLOWS.get(channel)
        if flow is None:
            flow = TranslateFlow(service, get_translator())
            _FLOWS[channel] = flow
        return flow


def reset_translate_flows() -> None:
    with _FLOWS_LOCK:
        for flow in _FLOWS.values():
            flow.cancel()
        _FLOWS.clear()
