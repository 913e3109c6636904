"""Tests for term submission and moderator decisions."""

import pytest

from helpers import CLEAN_DRAFT, get_moderator, submit_and_approve
from slangdex.errors import TermNotFound, ValidationError
from slangdex.glossary.models import TermDraft, TermState
from slangdex.moderation.models import ClassificationResult, NoteKind, TypedNote


def test_clean_submission_is_pending_without_note(engine):
    term = engine.lifecycle.submit(CLEAN_DRAFT)

    assert term.state == TermState.pending
    assert not term.is_approved
    assert term.moderation_note is None
    assert term.score == 0
    assert term.trending_score == 0.0
    assert term.created_at.startswith("2024-06-01T12:00:00")


def test_flagged_submission_is_pending_with_note(engine, classifier):
    classifier.classification = ClassificationResult(flagged=True, category_scores={"hate": 0.9})
    term = engine.lifecycle.submit(CLEAN_DRAFT)

    assert term.state == TermState.pending
    assert term.moderation_note == TypedNote(NoteKind.AI, "Content was flagged for: hate (90% confidence)")


def test_spam_submission_keeps_spam_note(engine):
    draft = TermDraft(
        text="great",
        definition="great great great great great great great great great great",
        example="That movie was great fun to watch",
    )
    term = engine.lifecycle.submit(draft)
    assert term.moderation_note.kind == NoteKind.SPAM
    assert engine.store.get_term(term.id).moderation_note.kind == NoteKind.SPAM


@pytest.mark.parametrize(
    "draft, message",
    [
        (TermDraft(text="", definition="d", example="e"), "text is required"),
        (TermDraft(text="   ", definition="d", example="e"), "text is required"),
        (TermDraft(text="x" * 51, definition="d", example="e"), "text must be at most 50 characters"),
        (TermDraft(text="t", definition="d" * 501, example="e"), "definition must be at most 500"),
        (TermDraft(text="t", definition="d", example=""), "example is required"),
        (TermDraft(text="t", definition="d", example="e" * 201), "example must be at most 200"),
    ],
)
def test_submission_validation(engine, classifier, draft, message):
    with pytest.raises(ValidationError, match=message):
        engine.lifecycle.submit(draft)
    assert classifier.classify_calls == []
    assert engine.lifecycle.list_pending() == []


def test_approve_publishes_term(engine, clock):
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    moderator = get_moderator(engine)
    clock.advance(minutes=5)

    approved = engine.lifecycle.approve_by_moderator(term.id, moderator.id)

    assert approved.state == TermState.approved
    assert approved.is_approved
    assert approved.moderated_by == moderator.id
    assert approved.moderated_at.startswith("2024-06-01T12:05:00")
    assert approved.moderation_note is None


def test_approve_with_note_replaces_automated_note(engine, classifier):
    classifier.classification = ClassificationResult(flagged=True, category_scores={"hate": 0.5})
    term = engine.lifecycle.submit(CLEAN_DRAFT)

    approved = engine.lifecycle.approve_by_moderator(term.id, get_moderator(engine).id, "False positive")

    assert approved.moderation_note == TypedNote(NoteKind.OTHER, "False positive")


def test_approve_with_blank_note_clears_note(engine, classifier):
    classifier.classification = ClassificationResult(flagged=True, category_scores={"hate": 0.5})
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    approved = engine.lifecycle.approve_by_moderator(term.id, get_moderator(engine).id, "   ")
    assert approved.moderation_note is None


def test_reject_requires_note(engine):
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    moderator = get_moderator(engine)

    for note in ("", "   "):
        with pytest.raises(ValidationError):
            engine.lifecycle.reject_by_moderator(term.id, moderator.id, note)

    assert engine.store.get_term(term.id).state == TermState.pending


def test_reject_stores_note(engine):
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    rejected = engine.lifecycle.reject_by_moderator(term.id, get_moderator(engine).id, "offensive")

    assert rejected.state == TermState.rejected
    assert rejected.moderation_note.serialize() == "[OTHER] offensive"


def test_reject_keeps_tagged_note(engine):
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    rejected = engine.lifecycle.reject_by_moderator(term.id, get_moderator(engine).id, "[SPAM] bot")
    assert rejected.moderation_note == TypedNote(NoteKind.SPAM, "bot")


def test_decisions_can_be_revisited(engine):
    moderator = get_moderator(engine)
    term = submit_and_approve(engine, "rizz")

    rejected = engine.lifecycle.reject_by_moderator(term.id, moderator.id, "dated")
    assert rejected.state == TermState.rejected
    assert engine.ranking.list_terms() == []

    approved = engine.lifecycle.approve_by_moderator(term.id, moderator.id)
    assert approved.state == TermState.approved
    assert [r.term.id for r in engine.ranking.list_terms()] == [term.id]


def test_decisions_on_unknown_term(engine):
    moderator = get_moderator(engine)
    with pytest.raises(TermNotFound):
        engine.lifecycle.approve_by_moderator(42, moderator.id)
    with pytest.raises(TermNotFound):
        engine.lifecycle.reject_by_moderator(42, moderator.id, "nope")


def test_list_pending_newest_first(engine, clock):
    first = engine.lifecycle.submit(CLEAN_DRAFT)
    clock.advance(minutes=1)
    second = engine.lifecycle.submit(
        TermDraft(text="bussin", definition="Extremely good, usually food", example="This pizza is bussin fr")
    )
    clock.advance(minutes=1)
    third = engine.lifecycle.submit(
        TermDraft(text="mid", definition="Mediocre or average at best", example="That movie was kinda mid")
    )
    engine.lifecycle.approve_by_moderator(second.id, get_moderator(engine).id)

    assert [t.id for t in engine.lifecycle.list_pending()] == [third.id, first.id]


def test_pending_order_breaks_ties_by_id(engine):
    first = engine.lifecycle.submit(CLEAN_DRAFT)
    second = engine.lifecycle.submit(CLEAN_DRAFT)
    assert [t.id for t in engine.lifecycle.list_pending()] == [second.id, first.id]


def test_audit_trail_records_lifecycle(engine):
    moderator = get_moderator(engine)
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    engine.lifecycle.reject_by_moderator(term.id, moderator.id, "nope")
    engine.lifecycle.approve_by_moderator(term.id, moderator.id)

    history = engine.audit.get_term_history(term.id)

    assert [e.action for e in history] == ["term.approved", "term.rejected", "term.submitted"]
    assert history[-1].actor == "anonymous"
    assert history[-1].details["auto_approved"] is True
    assert history[1].actor == str(moderator.id)
    assert history[1].details["note"] == "[OTHER] nope"


def test_audit_timestamps_follow_the_store_clock(engine, clock):
    term = engine.lifecycle.submit(CLEAN_DRAFT)
    clock.advance(minutes=3)
    approved = engine.lifecycle.approve_by_moderator(term.id, get_moderator(engine).id)

    latest, submitted = engine.audit.get_term_history(term.id)

    assert latest.timestamp == approved.moderated_at
    assert submitted.timestamp == term.created_at


def test_audit_write_failure_does_not_fail_the_decision(engine, monkeypatch):
    def broken(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(engine.audit, "log_event", broken)

    term = engine.lifecycle.submit(CLEAN_DRAFT)
    rejected = engine.lifecycle.reject_by_moderator(term.id, get_moderator(engine).id, "nope")

    assert rejected.state == TermState.rejected
    assert engine.store.get_term(term.id).state == TermState.rejected
