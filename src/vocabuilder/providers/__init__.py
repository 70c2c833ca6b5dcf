from __future__ import annotations

from threading import Lock

from .gemini import (
    GeminiTranslator,
    TranslationError,
    TranslationErrorCode,
    user_facing_message,
)

# 翻訳クライアントのシングルトン（設定はプロセス起動時に固定）
_TRANSLATOR: GeminiTranslator | None = None
_TRANSLATOR_LOCK = Lock()


def get_translator() -> GeminiTranslator:
    """Return the process-wide translator, building it from settings on first use."""

    global _TRANSLATOR
    with _TRANSLATOR_LOCK:
        if _TRANSLATOR is None:
            _TRANSLATOR = GeminiTranslator()
        return _TRANSLATOR


__all__ = [
    "GeminiTranslator",
    "TranslationError",
    "TranslationErrorCode",
    "get_translator",
    "user_facing_message",
]
