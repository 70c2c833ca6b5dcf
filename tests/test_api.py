import asyncio
import random

import pytest
from fastapi.testclient import TestClient

from vocabuilder.deps import get_service, get_translate_flow
from vocabuilder.flows import TranslateFlow
from vocabuilder.main import app
from vocabuilder.models import TranslationResult
from vocabuilder.providers import TranslationError, TranslationErrorCode
from vocabuilder.service import VocabularyService
from vocabuilder.srs import DAY_MS
from vocabuilder.store import DurableStore, InMemoryKeyValueBackend

NOW = 1_700_000_000_000


class StaticTranslator:
    def __init__(self) -> None:
        self.failures: dict[str, TranslationErrorCode] = {}

    async def translate(self, word: str) -> TranslationResult:
        await asyncio.sleep(0)
        if word in self.failures:
            raise TranslationError(self.failures[word])
        return TranslationResult(
            translation=f"uk-{word}",
            part_of_speech="adjective",
            example="Приклад.",
            example_translation="Example.",
        )


@pytest.fixture()
def kv() -> InMemoryKeyValueBackend:
    return InMemoryKeyValueBackend()


@pytest.fixture()
def api_service(kv: InMemoryKeyValueBackend) -> VocabularyService:
    return VocabularyService(DurableStore(kv), clock=lambda: NOW, rng=random.Random(0))


@pytest.fixture()
def translator() -> StaticTranslator:
    return StaticTranslator()


@pytest.fixture()
def client(api_service: VocabularyService, translator: StaticTranslator):
    flow = TranslateFlow(api_service, translator)  # type: ignore[arg-type]
    app.dependency_overrides[get_service] = lambda: api_service
    app.dependency_overrides[get_translate_flow] = lambda: flow
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID")


def test_translate_saves_and_lists_history(client):
    resp = client.post("/api/translate", json={"word": " robust "})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["saved"] is True
    assert body["record"]["word"] == "robust"
    assert body["record"]["partOfSpeech"] == "adjective"
    assert body["record"]["timestamp"] == NOW

    listed = client.get("/api/history").json()["items"]
    assert [item["word"] for item in listed] == ["robust"]
    assert listed[0]["exampleTranslation"] == "Example."


def test_translate_invalid_word(client):
    resp = client.post("/api/translate", json={"word": "two words"})
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_WORD_INPUT"


def test_translate_provider_error(client, translator):
    translator.failures["robust"] = TranslationErrorCode.INVALID_API_KEY
    resp = client.post("/api/translate", json={"word": "robust"})
    assert resp.status_code == 401
    detail = resp.json()["detail"]
    assert detail["code"] == "INVALID_API_KEY"
    assert "API key" in detail["message"]


def test_history_limit_delete_and_clear(client):
    for word in ["alpha", "bravo", "charlie"]:
        client.post("/api/translate", json={"word": word})

    items = client.get("/api/history", params={"limit": 2}).json()["items"]
    assert [i["word"] for i in items] == ["charlie", "bravo"]

    assert client.delete(f"/api/history/{items[0]['id']}").json() == {"ok": True}
    assert [i["word"] for i in client.get("/api/history").json()["items"]] == ["bravo", "alpha"]

    assert client.delete("/api/history").json() == {"ok": True}
    assert client.get("/api/history").json()["items"] == []


def test_delete_refused_when_history_corrupted(client, kv):
    kv.set("vocabuilder-history", "{broken")
    resp = client.delete("/api/history/tr:anything")
    assert resp.status_code == 409
    assert kv.get("vocabuilder-history") == "{broken"
    assert kv.get("vocabuilder-history-corrupt-backup") == "{broken"


def test_review_session_and_grade(client):
    client.post("/api/translate", json={"word": "alpha"})
    client.post("/api/translate", json={"word": "bravo"})

    session = client.get("/api/review/session").json()
    assert sorted(c["word"] for c in session["cards"]) == ["alpha", "bravo"]
    assert session["progress"] == {}

    resp = client.post("/api/review/grade", json={"word": "alpha", "rating": "good"})
    assert resp.status_code == 200
    progress = resp.json()["progress"]
    assert progress == {
        "word": "alpha",
        "easeFactor": 2.5,
        "interval": 1,
        "repetitions": 1,
        "nextReviewDate": NOW + DAY_MS,
    }

    # alpha は明日まで出題されない
    session = client.get("/api/review/session").json()
    assert [c["word"] for c in session["cards"]] == ["bravo"]


def test_grade_unknown_word(client):
    resp = client.post("/api/review/grade", json={"word": "ghost", "rating": "easy"})
    assert resp.status_code == 404


def test_grade_rejects_unknown_rating(client):
    client.post("/api/translate", json={"word": "alpha"})
    resp = client.post("/api/review/grade", json={"word": "alpha", "rating": "hard"})
    assert resp.status_code == 422


def test_grade_refused_when_progress_corrupted(client, kv):
    client.post("/api/translate", json={"word": "alpha"})
    kv.set("vocabuilder-flashcards", "[1, 2")
    resp = client.post("/api/review/grade", json={"word": "alpha", "rating": "good"})
    assert resp.status_code == 409
    assert kv.get("vocabuilder-flashcards") == "[1, 2"


def test_history_query_filters_case_insensitively(client):
    for word in ["Converge", "robust", "diverge"]:
        client.post("/api/translate", json={"word": word})

    items = client.get("/api/history", params={"q": "VERGE"}).json()["items"]
    assert [i["word"] for i in items] == ["diverge", "Converge"]

    items = client.get("/api/history", params={"q": "uk-rob"}).json()["items"]
    assert [i["word"] for i in items] == ["robust"]


def test_metrics_counts_refusals_and_translation_outcomes(client, kv, translator):
    from vocabuilder.metrics import registry

    before = registry.snapshot()
    client.post("/api/translate", json={"word": "alpha"})
    translator.failures["bravo"] = TranslationErrorCode.GEMINI_REQUEST_FAILED
    client.post("/api/translate", json={"word": "bravo"})
    kv.set("vocabuilder-flashcards", "[1, 2")
    client.post("/api/review/grade", json={"word": "alpha", "rating": "good"})

    after = client.get("/metrics").json()
    translate_before = before["paths"].get("/api/translate", {})
    grade_before = before["paths"].get("/api/review/grade", {})
    assert after["paths"]["/api/translate"]["provider_failures"] == translate_before.get("provider_failures", 0) + 1
    assert after["paths"]["/api/review/grade"]["storage_refusals"] == grade_before.get("storage_refusals", 0) + 1
    assert after["translations"]["ok"] >= before["translations"].get("ok", 0) + 1
    assert after["translations"]["GEMINI_REQUEST_FAILED"] >= 1
    assert after["storage_corruptions"]["vocabuilder-flashcards"] >= 1
