"""Tests for Beta-distribution reputation views and the reputation book."""

import random

import pytest
from pydantic import ValidationError

from libreconomy.errors import InvariantViolation
from libreconomy.reputation import Outcome, Provenance, ReputationBook, ReputationView


def test_neutral_prior():
    view = ReputationView()

    assert view.mean == 0.5
    assert view.confidence == 2.0
    assert view.evidence == 0.0
    assert view.interaction_count == 0


def test_observe_positive_negative_neutral():
    view = ReputationView()

    view.observe(Outcome.POSITIVE, weight=1.0, tick=3)
    view.observe(Outcome.NEGATIVE, weight=2.0, tick=4)
    view.observe(Outcome.NEUTRAL, weight=1.0, tick=5)

    assert view.alpha == 2.0
    assert view.beta == 3.0
    assert view.interaction_count == 3
    assert view.last_interaction_tick == 5


def test_neutral_nudge_is_symmetric():
    view = ReputationView(alpha=3, beta=1)

    view.observe(Outcome.NEUTRAL, weight=1.0, neutral_nudge=0.25)

    assert view.alpha == 3.25
    assert view.beta == 1.25


def test_last_tick_never_moves_backwards():
    view = ReputationView()

    view.observe(Outcome.POSITIVE, weight=1.0, tick=9)
    view.observe(Outcome.POSITIVE, weight=1.0, tick=4)

    assert view.last_interaction_tick == 9


def test_variance_shrinks_with_evidence():
    sparse = ReputationView(alpha=2, beta=1)
    dense = ReputationView(alpha=200, beta=100)

    assert sparse.mean == pytest.approx(dense.mean)
    assert dense.std_dev < sparse.std_dev


def test_decay_factor_one_is_exact_noop():
    view = ReputationView(alpha=7.3, beta=2.1)

    for _ in range(10):
        view.decay(1.0)
        view.decay(1.0, preserve_mean=False)

    assert view.alpha == 7.3
    assert view.beta == 2.1


def test_symmetric_decay_preserves_mean_and_shrinks_confidence():
    view = ReputationView(alpha=10, beta=4)
    mean = view.mean
    previous = view.confidence

    for _ in range(50):
        view.decay(0.9)
        assert view.mean == pytest.approx(mean)
        assert view.confidence < previous
        previous = view.confidence

    for _ in range(2000):
        view.decay(0.9)
    assert view.confidence == pytest.approx(2.0)


def test_prior_pull_decay_formula():
    view = ReputationView(alpha=5, beta=3)

    view.decay(0.5, preserve_mean=False)

    assert view.alpha == pytest.approx(3.0)
    assert view.beta == pytest.approx(2.0)


def test_decay_rejects_invalid_factor():
    view = ReputationView()

    with pytest.raises(ValueError):
        view.decay(0.0)
    with pytest.raises(ValueError):
        view.decay(1.5)


def test_parameters_stay_positive_under_random_operations():
    rng = random.Random(42)
    view = ReputationView()

    for tick in range(2000):
        roll = rng.random()
        if roll < 0.4:
            view.observe(rng.choice(list(Outcome)), weight=rng.uniform(0.1, 3.0), tick=tick)
        elif roll < 0.7:
            view.decay(rng.uniform(0.01, 1.0), preserve_mean=rng.random() < 0.5)
        else:
            view.cap_confidence(rng.uniform(2.5, 50))
        assert view.alpha > 0
        assert view.beta > 0


def test_cap_confidence_keeps_mean():
    view = ReputationView(alpha=900, beta=300)

    assert view.cap_confidence(100)
    assert view.confidence == pytest.approx(100)
    assert view.mean == pytest.approx(0.75)
    assert not view.cap_confidence(1000)


def test_invariant_violation_guard():
    view = ReputationView()

    with pytest.raises(InvariantViolation):
        view.observe(Outcome.POSITIVE, weight=-5.0)

    assert view.alpha == 1.0
    assert view.interaction_count == 0


def test_direct_assignment_cannot_break_positivity():
    view = ReputationView(alpha=3, beta=2)

    with pytest.raises(ValidationError):
        view.alpha = -3
    with pytest.raises(ValidationError):
        view.beta = 0

    assert (view.alpha, view.beta) == (3, 2)


def test_score_with_decay_drifts_toward_neutral_without_mutation():
    view = ReputationView(alpha=9, beta=1, last_interaction_tick=10)

    stale = view.score_with_decay(current_tick=110, decay_rate=0.05)

    assert 0.5 < stale < view.mean
    assert view.alpha == 9
    assert view.score_with_decay(current_tick=10, decay_rate=0.05) == pytest.approx(0.9)
    assert ReputationView().score_with_decay(50, 0.1) == 0.5


def test_book_creates_views_lazily():
    book = ReputationBook()

    assert book.get(1, 2) is None
    view = book.view(1, 2)
    assert book.view(1, 2) is view
    assert len(book) == 1
    assert (1, 2, Provenance.FIRST_HAND) in book


def test_book_rejects_self_views():
    book = ReputationBook()

    with pytest.raises(ValueError):
        book.view(3, 3)


def test_first_hand_overrides_hearsay_without_erasing_it():
    book = ReputationBook()
    book.view(1, 2, Provenance.HEARSAY).observe(Outcome.NEGATIVE, weight=3.0)

    assert book.score(1, 2) == pytest.approx(0.2)

    book.view(1, 2).observe(Outcome.POSITIVE, weight=1.0)

    assert book.score(1, 2) == pytest.approx(2 / 3)
    assert book.get(1, 2, Provenance.HEARSAY).beta == 4.0


def test_book_defaults_for_unknown_pairs():
    book = ReputationBook()

    assert book.score(1, 9) == 0.5
    assert book.confidence(1, 9) == 2.0
    assert not book.is_trusted(1, 9)


def test_most_trusted_and_known_subjects():
    book = ReputationBook()
    book.set(1, 2, ReputationView(alpha=5, beta=1))
    book.set(1, 3, ReputationView(alpha=1, beta=5))
    book.set(1, 4, ReputationView(alpha=5, beta=1))
    book.set(1, 5, ReputationView(alpha=3, beta=3), Provenance.HEARSAY)
    book.set(2, 1, ReputationView(alpha=9, beta=1))

    assert book.known_subjects(1) == [2, 3, 4, 5]
    assert book.most_trusted(1, 3) == [(2, pytest.approx(5 / 6)), (4, pytest.approx(5 / 6)), (5, 0.5)]
    assert book.is_trusted(1, 2, threshold=0.8)


def test_entries_are_ordered():
    book = ReputationBook()
    book.view(2, 1)
    book.view(1, 3, Provenance.HEARSAY)
    book.view(1, 3)

    keys = [key for key, _ in book.entries()]

    assert keys == [
        (1, 3, Provenance.FIRST_HAND),
        (1, 3, Provenance.HEARSAY),
        (2, 1, Provenance.FIRST_HAND),
    ]
