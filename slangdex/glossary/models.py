"""Domain models for glossary terms and votes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from slangdex.errors import ValidationError
from slangdex.moderation.models import TypedNote

MAX_TEXT_LENGTH = 50
MAX_DEFINITION_LENGTH = 500
MAX_EXAMPLE_LENGTH = 200


class TermState(str, Enum):
    """Lifecycle state of a term.  Only approved terms are publicly listed."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class SortKey(str, Enum):
    score = "score"
    trending = "trending"


class TrendDirection(str, Enum):
    rising = "rising"
    stable = "stable"
    falling = "falling"


@dataclass(frozen=True)
class TermDraft:
    """A term as submitted, before it is stored."""

    text: str
    definition: str
    example: str

    def validate(self) -> None:
        """Raise :class:`ValidationError` if any field is blank or too long."""
        for name, value, limit in (
            ("text", self.text, MAX_TEXT_LENGTH),
            ("definition", self.definition, MAX_DEFINITION_LENGTH),
            ("example", self.example, MAX_EXAMPLE_LENGTH),
        ):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{name} is required")
            if len(value) > limit:
                raise ValidationError(f"{name} must be at most {limit} characters")


@dataclass
class Term:
    """A stored glossary entry."""

    id: int
    text: str
    definition: str
    example: str
    created_at: str
    score: int = 0
    trending_score: float = 0.0
    state: TermState = TermState.pending
    moderation_note: Optional[TypedNote] = None
    moderated_at: Optional[str] = None
    moderated_by: Optional[int] = None

    @property
    def is_approved(self) -> bool:
        return self.state is TermState.approved


@dataclass(frozen=True)
class Vote:
    """A single ledger entry.  Immutable once recorded."""

    id: int
    term_id: int
    voter_identity: str
    value: int
    created_at: str


@dataclass
class RankedTerm:
    """A term together with its 1-based position in the full ordering."""

    term: Term
    rank: int


@dataclass
class TrendingTerm:
    """A term with its refreshed trending score and classification."""

    term: Term
    trend: TrendDirection
