import json

from vocabuilder.store import ProgressRepository


def test_get_all_empty(durable_store):
    assert ProgressRepository(durable_store).get_all() == {}


def test_save_upserts_by_word(backend, durable_store, make_progress):
    repo = ProgressRepository(durable_store)
    first = make_progress("converge", interval=1)
    other = make_progress("robust")
    updated = make_progress("converge", interval=6, repetitions=2)

    assert repo.save(first) is True
    assert repo.save(other) is True
    assert repo.save(updated) is True

    progress = repo.get_all()
    assert progress == {"converge": updated, "robust": other}
    stored = json.loads(backend.get("vocabuilder-flashcards"))
    assert [p["word"] for p in stored] == ["converge", "robust"]
    assert stored[0]["interval"] == 6
    assert set(stored[0]) == {"word", "easeFactor", "interval", "repetitions", "nextReviewDate"}


def test_get_all_is_idempotent(durable_store, make_progress):
    repo = ProgressRepository(durable_store)
    repo.save(make_progress("a"))
    assert repo.get_all() == repo.get_all()


def test_corrupted_progress_refuses_save(backend, durable_store, make_progress):
    raw = '[{"word": "a", "easeFactor": "high"}]'
    backend.set("vocabuilder-flashcards", raw)
    repo = ProgressRepository(durable_store)

    assert repo.get_all() == {}
    assert repo.save(make_progress("a")) is False
    assert backend.get("vocabuilder-flashcards") == raw
    assert backend.get("vocabuilder-flashcards-corrupt-backup") == raw
