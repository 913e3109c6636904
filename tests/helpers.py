"""Test doubles and helpers shared across test modules."""

from datetime import datetime, timedelta, timezone

from slangdex.glossary.models import TermDraft
from slangdex.moderation.models import ClassificationResult, ProfanityResult


class FakeClassifier:
    """Deterministic stand-in for the external classifier."""

    def __init__(self):
        self.classification = ClassificationResult(flagged=False, category_scores={})
        self.profanity = ProfanityResult(is_profane=False, reason="")
        self.classify_error = None
        self.profanity_error = None
        self.classify_calls = []
        self.profanity_calls = []

    def classify(self, text):
        self.classify_calls.append(text)
        if self.classify_error is not None:
            raise self.classify_error
        return self.classification

    def detect_profanity(self, text):
        self.profanity_calls.append(text)
        if self.profanity_error is not None:
            raise self.profanity_error
        return self.profanity


class FakeClock:
    def __init__(self, start=None):
        self.current = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


CLEAN_DRAFT = TermDraft(
    text="rizz",
    definition="Charm or skill at attracting a romantic partner",
    example="He has so much rizz it is unreal",
)


def get_moderator(engine, username="admin"):
    existing = engine.moderators.get_by_username(username)
    return existing or engine.moderators.create_moderator(username, "admin123")


def submit_and_approve(engine, text, definition=None, example=None):
    """Submit a clean term and approve it; returns the approved term."""
    draft = TermDraft(
        text=text,
        definition=definition or f"The meaning of {text} in casual speech",
        example=example or f"You could say {text} when talking to friends",
    )
    term = engine.lifecycle.submit(draft)
    return engine.lifecycle.approve_by_moderator(term.id, get_moderator(engine).id)
