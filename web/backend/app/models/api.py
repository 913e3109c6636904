"""Pydantic models for API request/response serialization.

These models mirror the slangdex dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, StrictInt

from slangdex.glossary.models import (
    MAX_DEFINITION_LENGTH,
    MAX_EXAMPLE_LENGTH,
    MAX_TEXT_LENGTH,
    RankedTerm,
    Term,
    TrendingTerm,
)


# ---------------------------------------------------------------------------
# Term models
# ---------------------------------------------------------------------------


class TermCreateRequest(BaseModel):
    """Body of ``POST /api/terms``."""

    text: str = Field(min_length=1, max_length=MAX_TEXT_LENGTH)
    definition: str = Field(min_length=1, max_length=MAX_DEFINITION_LENGTH)
    example: str = Field(min_length=1, max_length=MAX_EXAMPLE_LENGTH)


class TermResponse(BaseModel):
    """Mirrors slangdex.glossary.models.Term."""

    id: int
    text: str
    definition: str
    example: str
    created_at: str
    score: int = 0
    trending_score: float = 0.0
    state: str = "pending"
    is_approved: bool = False
    moderation_note: Optional[str] = None
    moderation_kind: Optional[str] = None
    moderated_at: Optional[str] = None
    moderated_by: Optional[int] = None

    @classmethod
    def from_term(cls, term: Term, **extra: Any) -> TermResponse:
        note = term.moderation_note
        return cls(
            id=term.id,
            text=term.text,
            definition=term.definition,
            example=term.example,
            created_at=term.created_at,
            score=term.score,
            trending_score=term.trending_score,
            state=term.state.value,
            is_approved=term.is_approved,
            moderation_note=note.serialize() if note else None,
            moderation_kind=note.kind.value if note else None,
            moderated_at=term.moderated_at,
            moderated_by=term.moderated_by,
            **extra,
        )


class RankedTermResponse(TermResponse):
    """A listed term with its rank in the full ordering."""

    rank: int

    @classmethod
    def from_ranked(cls, ranked: RankedTerm) -> RankedTermResponse:
        return cls.from_term(ranked.term, rank=ranked.rank)


class InsightResponse(TermResponse):
    """A term with its refreshed trending score and direction."""

    trend: str

    @classmethod
    def from_trending(cls, item: TrendingTerm) -> InsightResponse:
        return cls.from_term(item.term, trend=item.trend.value)


class VoteRequest(BaseModel):
    """Body of ``POST /api/terms/{id}/vote``.  ``value`` must be -1 or 1."""

    value: StrictInt


# ---------------------------------------------------------------------------
# Moderator models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=6)


class LoginResponse(BaseModel):
    """Bearer session token for the moderation endpoints."""

    token: str
    username: str
    expires_at: str


class ApproveRequest(BaseModel):
    note: Optional[str] = None


class RejectRequest(BaseModel):
    note: str


class AuditEntryResponse(BaseModel):
    """Mirrors slangdex.security.audit_log.AuditEntry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------


class AboutResponse(BaseModel):
    github: str
    about: str
    version: str
    author: str
