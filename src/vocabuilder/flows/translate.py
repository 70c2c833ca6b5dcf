"""Single-flight translation requests.

入力欄ごとに「生きている」リクエストは常に 1 件だけ。新しいリクエストは
実行中のものをキャンセルし、世代トークンを進める。完了時点でトークンが
最新でなければ、成功・失敗にかかわらず結果を破棄する（遅れて完了した
古いリクエストが新しい結果を上書きしないため）。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Callable

import anyio

from ..id_factory import generate_translation_id
from ..logging import logger
from ..metrics import registry
from ..models.translation import TranslationRecord
from ..providers.gemini import GeminiTranslator, TranslationError, TranslationErrorCode
from ..validation import normalize_word_input


@dataclass(frozen=True)
class TranslateOutcome:
    """Result of one translation request.

    - status: "ok" | "error" | "superseded"
    - saved: 履歴への自動保存が成功したか（ストア破損時は False）
    """

    status: str
    record: TranslationRecord | None = None
    saved: bool = False
    error: TranslationErrorCode | None = None

    @classmethod
    def superseded(cls) -> "TranslateOutcome":
        return cls(status="superseded")


class TranslateFlow:
    def __init__(
        self,
        service,
        translator: GeminiTranslator,
        *,
        clock: Callable[[], int] | None = None,
        id_factory: Callable[[], str] = generate_translation_id,
    ) -> None:
        self._service = service
        self._translator = translator
        self._clock = clock or service.clock
        self._id_factory = id_factory
        self._generation = 0
        self._inflight: asyncio.Task | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Invalidate and cancel whatever request is in flight (e.g. input cleared)."""

        self._generation += 1
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _is_active(self, token: int) -> bool:
        return token == self._generation

    async def request(self, raw_word: str) -> TranslateOutcome:
        outcome = await self._request(raw_word)
        registry.record_translation(outcome.error.value if outcome.error is not None else outcome.status)
        return outcome

    async def _request(self, raw_word: str) -> TranslateOutcome:
        self.cancel()
        token = self._generation

        word = normalize_word_input(raw_word)
        if word is None:
            return TranslateOutcome(status="error", error=TranslationErrorCode.INVALID_WORD_INPUT)

        logger.info("translate_request", word=word, token=token)
        task = asyncio.ensure_future(self._translator.translate(word))
        self._inflight = task
        try:
            result = await task
        except asyncio.CancelledError:
            if task.cancelled() and not self._is_active(token):
                logger.info("translate_superseded", word=word, token=token)
                return TranslateOutcome.superseded()
            raise
        except TranslationError as exc:
            if not self._is_active(token):
                logger.info("translate_superseded", word=word, token=token)
                return TranslateOutcome.superseded()
            logger.warning("translate_failed", word=word, code=exc.code.value)
            return TranslateOutcome(status="error", error=exc.code)
        finally:
            if self._inflight is task:
                self._inflight = None

        if not self._is_active(token):
            logger.info("translate_superseded", word=word, token=token)
            return TranslateOutcome.superseded()

        record = TranslationRecord.from_result(
            record_id=self._id_factory(),
            word=word,
            result=result,
            timestamp=self._clock(),
        )
        # 自動保存（SQLite I/O はワーカースレッドへオフロード）
        saved = await anyio.to_thread.run_sync(partial(self._service.save_translation, record))
        return TranslateOutcome(status="ok", record=record, saved=saved)
