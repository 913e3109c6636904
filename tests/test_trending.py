"""Tests for trending score calculation."""

import pytest

from helpers import CLEAN_DRAFT, submit_and_approve
from slangdex.glossary.models import TrendDirection
from slangdex.glossary.trending import TrendingCalculator, classify_trend, trend_ratio


def _vote_many(engine, term_id, values, prefix="voter"):
    for i, value in enumerate(values):
        engine.ledger.cast_vote(term_id, f"{prefix}-{i}", value)


def test_trend_ratio():
    assert trend_ratio(3, 1, 4) == 0.5
    assert trend_ratio(0, 0, 0) == 0.0
    assert trend_ratio(0, 2, 2) == -1.0


@pytest.mark.parametrize(
    "score, expected",
    [
        (1.0, TrendDirection.rising),
        (0.99, TrendDirection.stable),
        (0.5, TrendDirection.stable),
        (0.0, TrendDirection.stable),
        (-0.5, TrendDirection.stable),
        (-1.0, TrendDirection.falling),
    ],
)
def test_classify_trend_only_saturated_bounds_move(score, expected):
    assert classify_trend(score) == expected


def test_refresh_mixed_votes(engine):
    term = submit_and_approve(engine, "rizz")
    _vote_many(engine, term.id, [1, 1, 1, -1])

    scores = engine.trending.refresh()

    assert scores[term.id] == 0.5
    assert engine.store.get_term(term.id).trending_score == 0.5
    assert classify_trend(scores[term.id]) == TrendDirection.stable


def test_refresh_without_votes_is_zero(engine):
    term = submit_and_approve(engine, "rizz")
    assert engine.trending.refresh() == {term.id: 0.0}


def test_votes_outside_window_are_ignored(engine, clock):
    term = submit_and_approve(engine, "rizz")
    _vote_many(engine, term.id, [-1, -1], prefix="old")
    clock.advance(hours=25)
    _vote_many(engine, term.id, [1], prefix="new")

    scores = engine.trending.refresh()

    assert scores[term.id] == 1.0
    # The all-time score still counts every vote.
    assert engine.store.get_term(term.id).score == -1


def test_all_votes_expire(engine, clock):
    term = submit_and_approve(engine, "rizz")
    _vote_many(engine, term.id, [1, 1])
    assert engine.trending.refresh()[term.id] == 1.0

    clock.advance(hours=24, seconds=1)
    assert engine.trending.refresh()[term.id] == 0.0


def test_refresh_is_idempotent(engine):
    first = submit_and_approve(engine, "rizz")
    second = submit_and_approve(engine, "bussin")
    _vote_many(engine, first.id, [1, -1, 1])
    _vote_many(engine, second.id, [-1])

    assert engine.trending.refresh() == engine.trending.refresh()


def test_refresh_covers_every_term_state(engine):
    pending = engine.lifecycle.submit(CLEAN_DRAFT)
    engine.ledger.cast_vote(pending.id, "10.0.0.1", -1)
    assert engine.trending.refresh()[pending.id] == -1.0


def test_custom_window(engine, clock):
    calculator = TrendingCalculator(engine.store, window_hours=1)
    term = submit_and_approve(engine, "rizz")
    engine.ledger.cast_vote(term.id, "10.0.0.1", 1)
    clock.advance(hours=2)
    assert calculator.refresh()[term.id] == 0.0


def test_window_boundary_is_inclusive(engine, clock):
    term = submit_and_approve(engine, "rizz")
    _vote_many(engine, term.id, [1, 1])

    clock.advance(hours=24)
    assert engine.trending.refresh()[term.id] == 1.0

    clock.advance(microseconds=1)
    assert engine.trending.refresh()[term.id] == 0.0
