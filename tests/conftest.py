"""Pytest configuration: import path, deterministic settings and shared fixtures."""

import os
import random
import sys
from pathlib import Path
from typing import Callable

import pytest

# src レイアウトのパッケージを未インストールでも import できるようにする
_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

# テストではファイルを作らないインメモリ構成を既定にする
os.environ.setdefault("VOCABUILDER_STORE_BACKEND", "memory")
os.environ.setdefault("VOCABUILDER_GEMINI_API_KEY", "test-gemini-key-0123456789")

from vocabuilder.models import ReviewProgress, TranslationRecord  # noqa: E402
from vocabuilder.service import VocabularyService  # noqa: E402
from vocabuilder.srs import DAY_MS  # noqa: E402
from vocabuilder.store import DurableStore, InMemoryKeyValueBackend  # noqa: E402

NOW = 1_700_000_000_000


@pytest.fixture()
def backend() -> InMemoryKeyValueBackend:
    return InMemoryKeyValueBackend()


@pytest.fixture()
def durable_store(backend: InMemoryKeyValueBackend) -> DurableStore:
    return DurableStore(backend, namespace="vocabuilder")


@pytest.fixture()
def service(durable_store: DurableStore) -> VocabularyService:
    return VocabularyService(durable_store, session_size=10, clock=lambda: NOW, rng=random.Random(7))


@pytest.fixture()
def make_record() -> Callable[..., TranslationRecord]:
    def _make(word: str, *, record_id: str | None = None, timestamp: int = NOW, translation: str = "слово") -> TranslationRecord:
        return TranslationRecord(
            id=record_id or f"tr:{word}",
            word=word,
            translation=translation,
            part_of_speech="noun",
            example="Це приклад.",
            example_translation="This is an example.",
            timestamp=timestamp,
        )

    return _make


@pytest.fixture()
def make_progress() -> Callable[..., ReviewProgress]:
    def _make(
        word: str,
        *,
        due_in_days: float = 0,
        ease_factor: float = 2.5,
        interval: int = 1,
        repetitions: int = 1,
    ) -> ReviewProgress:
        return ReviewProgress(
            word=word,
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            next_review_date=int(NOW + due_in_days * DAY_MS),
        )

    return _make
