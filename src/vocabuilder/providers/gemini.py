"""Gemini 翻訳プロバイダ。

英単語 1 語を受け取り、訳語・品詞・例文・例文訳を構造化して返す。
失敗は TranslationError（安定したエラーコード付き）として呼び出し側へ伝える。
リトライは行わない（ユーザーが手動で再試行する前提）。
"""

from __future__ import annotations

import json
import re
from enum import Enum

import httpx
from pydantic import BaseModel, ValidationError

from ..config import settings
from ..logging import logger
from ..models.translation import TranslationResult
from ..validation import normalize_word_input


class TranslationErrorCode(str, Enum):
    INVALID_WORD_INPUT = "INVALID_WORD_INPUT"
    INVALID_API_KEY = "INVALID_API_KEY"
    GEMINI_REQUEST_FAILED = "GEMINI_REQUEST_FAILED"
    GEMINI_EMPTY_RESPONSE = "GEMINI_EMPTY_RESPONSE"
    GEMINI_INVALID_RESPONSE = "GEMINI_INVALID_RESPONSE"


_USER_FACING_MESSAGES = {
    TranslationErrorCode.INVALID_WORD_INPUT: "Please enter a single English word.",
    TranslationErrorCode.INVALID_API_KEY: "Invalid API key. Please check your Gemini API key in preferences.",
    TranslationErrorCode.GEMINI_REQUEST_FAILED: "Gemini request failed. Please try again.",
    TranslationErrorCode.GEMINI_EMPTY_RESPONSE: "Gemini returned an unexpected response. Please try again.",
    TranslationErrorCode.GEMINI_INVALID_RESPONSE: "Gemini returned an unexpected response. Please try again.",
}


class TranslationError(Exception):
    """Typed failure of the translation collaborator."""

    def __init__(self, code: TranslationErrorCode) -> None:
        super().__init__(code.value)
        self.code = code

    @property
    def message(self) -> str:
        return user_facing_message(self.code)


def user_facing_message(code: TranslationErrorCode | str) -> str:
    try:
        return _USER_FACING_MESSAGES[TranslationErrorCode(code)]
    except ValueError:
        return "Translation failed. Please try again."


class _Part(BaseModel):
    text: str


class _Content(BaseModel):
    parts: list[_Part]


class _Candidate(BaseModel):
    content: _Content


class _GenerateContentResponse(BaseModel):
    candidates: list[_Candidate]


_CODE_FENCE_START_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_END_RE = re.compile(r"\s*```$")


def build_prompt(word: str, target_language: str) -> str:
    # 語は JSON 文字列リテラルとして埋め込み、プロンプト注入を避ける
    return (
        f"Translate the English word {json.dumps(word)} to {target_language}.\n"
        "Respond ONLY with valid JSON in this exact format:\n"
        "{\n"
        f'  "translation": "{target_language} word",\n'
        '  "partOfSpeech": "noun/verb/adjective/etc",\n'
        f'  "example": "{target_language} example sentence",\n'
        '  "exampleTranslation": "English translation of the example"\n'
        "}"
    )


def strip_code_fences(raw: str) -> str:
    return _CODE_FENCE_END_RE.sub("", _CODE_FENCE_START_RE.sub("", raw)).strip()


def parse_generate_content(payload: object) -> TranslationResult:
    """Extract the translation JSON from a generateContent response body."""

    try:
        envelope = _GenerateContentResponse.model_validate(payload)
    except ValidationError:
        raise TranslationError(TranslationErrorCode.GEMINI_INVALID_RESPONSE)
    raw = ""
    if envelope.candidates and envelope.candidates[0].content.parts:
        raw = envelope.candidates[0].content.parts[0].text
    if not raw:
        raise TranslationError(TranslationErrorCode.GEMINI_EMPTY_RESPONSE)
    try:
        return TranslationResult.model_validate(json.loads(strip_code_fences(raw)))
    except (ValueError, RecursionError, ValidationError):
        raise TranslationError(TranslationErrorCode.GEMINI_INVALID_RESPONSE)


class GeminiTranslator:
    """Async client for the Gemini generateContent endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout_ms: int | None = None,
        target_language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._model = model or settings.gemini_model
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._timeout_sec = (timeout_ms or settings.translation_timeout_ms) / 1000.0
        self._target_language = target_language or settings.target_language
        self._transport = transport

    async def translate(self, word: str) -> TranslationResult:
        normalized = normalize_word_input(word)
        if normalized is None:
            raise TranslationError(TranslationErrorCode.INVALID_WORD_INPUT)
        if not self._api_key:
            raise TranslationError(TranslationErrorCode.INVALID_API_KEY)

        url = f"{self._base_url}/{self._model}:generateContent"
        body = {"contents": [{"parts": [{"text": build_prompt(normalized, self._target_language)}]}]}
        logger.info("gemini_request", model=self._model, word=normalized)
        try:
            async with httpx.AsyncClient(timeout=self._timeout_sec, transport=self._transport) as client:
                response = await client.post(
                    url,
                    json=body,
                    headers={"x-goog-api-key": self._api_key},
                )
        except httpx.HTTPError as exc:
            logger.warning("gemini_request_error", model=self._model, error=repr(exc))
            raise TranslationError(TranslationErrorCode.GEMINI_REQUEST_FAILED) from exc

        if response.status_code in (401, 403):
            raise TranslationError(TranslationErrorCode.INVALID_API_KEY)
        if not response.is_success:
            logger.warning("gemini_request_status", model=self._model, status=response.status_code)
            raise TranslationError(TranslationErrorCode.GEMINI_REQUEST_FAILED)
        try:
            payload = response.json()
        except ValueError:
            raise TranslationError(TranslationErrorCode.GEMINI_INVALID_RESPONSE)
        return parse_generate_content(payload)
