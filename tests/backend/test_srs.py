import itertools
import random

import pytest

from vocabuilder.models import Rating, ReviewProgress
from vocabuilder.srs import (
    DAY_MS,
    apply_rating,
    build_session,
    fresh_progress,
    prioritize,
    round_half_up,
)

NOW = 1_700_000_000_000


def test_fresh_progress_defaults():
    p = fresh_progress("converge")
    assert (p.ease_factor, p.interval, p.repetitions, p.next_review_date) == (2.5, 1, 0, 0)


def test_good_good_easy_progression():
    p = fresh_progress("converge")
    intervals = []
    eases = []
    for rating in [Rating.good, Rating.good, Rating.easy]:
        p = apply_rating(p, rating, NOW)
        intervals.append(p.interval)
        eases.append(p.ease_factor)

    assert intervals == [1, 6, 20]
    assert eases == [2.5, 2.5, 2.5]
    assert p.repetitions == 3
    assert p.next_review_date == NOW + 20 * DAY_MS


def test_again_resets_and_lowers_ease():
    p = ReviewProgress(word="w", ease_factor=2.0, interval=15, repetitions=3, next_review_date=0)
    out = apply_rating(p, "again", NOW)
    assert out.repetitions == 0
    assert out.interval == 1
    assert out.ease_factor == pytest.approx(1.8)
    assert out.next_review_date == NOW + DAY_MS


def test_good_uses_ease_after_second_repetition():
    p = ReviewProgress(word="w", ease_factor=2.0, interval=6, repetitions=2, next_review_date=0)
    out = apply_rating(p, Rating.good, NOW)
    assert (out.interval, out.repetitions, out.ease_factor) == (12, 3, 2.0)


def test_easy_raises_ease_and_stretches_interval():
    p = ReviewProgress(word="w", ease_factor=2.0, interval=6, repetitions=2, next_review_date=0)
    out = apply_rating(p, Rating.easy, NOW)
    # round(6 * 2.0) = 12, round(12 * 1.3) = round(15.6) = 16
    assert out.interval == 16
    assert out.ease_factor == pytest.approx(2.15)


def test_rounding_is_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(19.5) == 20
    assert round_half_up(0.5) == 1
    assert round_half_up(3.49) == 3
    # 初回の easy: round(1 * 1.3) = 1
    out = apply_rating(ReviewProgress(word="w", ease_factor=1.5, interval=1, repetitions=0, next_review_date=0), "easy", NOW)
    assert out.interval == 1


def test_apply_rating_does_not_mutate_input():
    p = ReviewProgress(word="w", ease_factor=2.2, interval=9, repetitions=4, next_review_date=123)
    snapshot = p.model_dump()
    for rating in Rating:
        out = apply_rating(p, rating, NOW)
        assert out is not p
        assert p.model_dump() == snapshot


@pytest.mark.parametrize("seed", range(5))
def test_ease_and_interval_stay_in_bounds(seed):
    rng = random.Random(seed)
    p = fresh_progress("w")
    for _ in range(200):
        p = apply_rating(p, rng.choice(list(Rating)), NOW)
        assert 1.3 <= p.ease_factor <= 2.5
        assert p.interval >= 1
        assert p.repetitions >= 0


def test_ease_floor_after_repeated_again():
    p = fresh_progress("w")
    for _ in range(10):
        p = apply_rating(p, Rating.again, NOW)
    assert p.ease_factor == pytest.approx(1.3)


def test_invalid_rating_rejected():
    with pytest.raises(ValueError):
        apply_rating(fresh_progress("w"), "hard", NOW)


def test_session_selection_priorities(make_record, make_progress):
    a, b, c, d = (make_record(w) for w in ["alpha", "bravo", "charlie", "delta"])
    progress = {
        "alpha": make_progress("alpha", due_in_days=-2),
        "charlie": make_progress("charlie", due_in_days=0),
        "delta": make_progress("delta", due_in_days=3),
    }
    history = [a, b, c, d]

    ordered = prioritize(history, progress, NOW, size=10)
    assert [r.word for r in ordered] == ["alpha", "charlie", "bravo"]

    session = build_session(history, progress, NOW, rng=random.Random(1))
    assert sorted(r.word for r in session.cards) == ["alpha", "bravo", "charlie"]
    assert session.is_new("bravo")
    assert not session.is_new("alpha")


def test_session_truncates_to_size_after_priority(make_record, make_progress):
    history = [make_record(f"w{i}") for i in range(15)]
    progress = {"w14": make_progress("w14", due_in_days=-1)}

    session = build_session(history, progress, NOW, size=10, rng=random.Random(3))
    words = {r.word for r in session.cards}
    assert len(session.cards) == 10
    assert "w14" in words
    assert words == {"w14", *(f"w{i}" for i in range(9))}


def test_session_snapshot_is_a_copy(make_record, make_progress):
    progress = {"a": make_progress("a", due_in_days=-1)}
    session = build_session([make_record("a")], progress, NOW)
    session.progress.clear()
    assert "a" in progress


def test_shuffle_produces_every_permutation(make_record):
    history = [make_record(w) for w in ["a", "b", "c"]]
    rng = random.Random(42)
    seen = {tuple(r.word for r in build_session(history, {}, NOW, rng=rng).cards) for _ in range(300)}
    assert seen == set(itertools.permutations(["a", "b", "c"]))
