"""Staged moderation of newly submitted terms.

Stages run in order and stop at the first rejection:

1. spam heuristic (repeated tokens in the definition or example)
2. length gate (protects the classifier from oversized payloads)
3. external classification
4. external profanity check

Classifier failures fail closed: the term is rejected with an ``ERROR``
note and lands in the human review queue like any other flagged term.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Optional

from slangdex.config import Settings
from slangdex.errors import ClassifierUnavailable
from slangdex.glossary.models import TermDraft
from slangdex.moderation.classifier import ContentClassifier
from slangdex.moderation.models import ClassificationResult, NoteKind, Verdict
from slangdex.moderation.prompts import TERM_PAYLOAD

logger = logging.getLogger(__name__)

SPAM_MESSAGE = "Detected repetitive patterns or potential spam content"
LENGTH_MESSAGE = "Content exceeds maximum allowed length. Please be more concise."
CLASSIFIER_ERROR_MESSAGE = "Requires manual review due to AI service error"
PROFANITY_ERROR_MESSAGE = "Manual review required - unable to complete profanity check"


def is_spammy(text: str, max_ratio: float = 0.3) -> bool:
    """Return True if any single token makes up more than *max_ratio* of *text*."""
    tokens = text.lower().split()
    if not tokens:
        return False
    most_common = Counter(tokens).most_common(1)[0][1]
    return most_common > len(tokens) * max_ratio


def _percent(score: float) -> int:
    # Round half up, not half to even.
    return math.floor(score * 100 + 0.5)


def describe_categories(result: ClassificationResult, threshold: float) -> str:
    """Render the categories scoring above *threshold* for the ``AI`` note."""
    return ", ".join(
        f"{name} ({_percent(score)}% confidence)"
        for name, score in result.category_scores.items()
        if score > threshold
    )


class ModerationPipeline:
    """Runs a draft term through every moderation stage."""

    def __init__(
        self,
        classifier: ContentClassifier,
        spam_token_ratio: float = 0.3,
        max_content_length: int = 300,
        category_threshold: float = 0.1,
    ) -> None:
        self.classifier = classifier
        self.spam_token_ratio = spam_token_ratio
        self.max_content_length = max_content_length
        self.category_threshold = category_threshold

    @classmethod
    def from_settings(cls, classifier: ContentClassifier, settings: Settings) -> ModerationPipeline:
        return cls(
            classifier,
            spam_token_ratio=settings.spam_token_ratio,
            max_content_length=settings.max_content_length,
            category_threshold=settings.category_threshold,
        )

    # -- stages --------------------------------------------------------------

    def _check_spam(self, draft: TermDraft) -> Optional[Verdict]:
        if is_spammy(draft.definition, self.spam_token_ratio) or is_spammy(
            draft.example, self.spam_token_ratio
        ):
            return Verdict.reject(NoteKind.SPAM, SPAM_MESSAGE)
        return None

    def _check_length(self, draft: TermDraft) -> Optional[Verdict]:
        total = len(draft.text) + len(draft.definition) + len(draft.example)
        if total > self.max_content_length:
            return Verdict.reject(NoteKind.LENGTH, LENGTH_MESSAGE)
        return None

    def _check_classifier(self, payload: str) -> Optional[Verdict]:
        try:
            result = self.classifier.classify(payload)
        except ClassifierUnavailable as exc:
            logger.warning("Content classifier unavailable: %s", exc)
            return Verdict.reject(NoteKind.ERROR, CLASSIFIER_ERROR_MESSAGE)
        except Exception:
            logger.exception("Content classifier raised unexpectedly")
            return Verdict.reject(NoteKind.ERROR, CLASSIFIER_ERROR_MESSAGE)

        categories = describe_categories(result, self.category_threshold)
        if result.flagged or categories:
            return Verdict.reject(NoteKind.AI, f"Content was flagged for: {categories}")
        return None

    def _check_profanity(self, payload: str) -> Optional[Verdict]:
        try:
            result = self.classifier.detect_profanity(payload)
        except ClassifierUnavailable as exc:
            logger.warning("Profanity detector unavailable: %s", exc)
            return Verdict.reject(NoteKind.ERROR, PROFANITY_ERROR_MESSAGE)
        except Exception:
            logger.exception("Profanity detector raised unexpectedly")
            return Verdict.reject(NoteKind.ERROR, PROFANITY_ERROR_MESSAGE)

        if result.is_profane:
            return Verdict.reject(NoteKind.PROFANITY, result.reason)
        return None

    # -- public API ----------------------------------------------------------

    def moderate(self, draft: TermDraft) -> Verdict:
        """Return the verdict of the first failing stage, or an approval."""
        verdict = self._check_spam(draft) or self._check_length(draft)
        if verdict is None:
            payload = TERM_PAYLOAD.format(
                text=draft.text, definition=draft.definition, example=draft.example
            )
            verdict = self._check_classifier(payload) or self._check_profanity(payload)

        if verdict is None:
            logger.info("Term %r passed moderation", draft.text)
            return Verdict.approve()

        logger.info("Term %r flagged: %s", draft.text, verdict.note)
        return verdict
