"""Moderation router -- moderator login and the review queue."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from slangdex.auth.models import Moderator
from slangdex.config import Settings
from slangdex.errors import Unauthorized
from slangdex.glossary.engine import GlossaryEngine
from web.backend.app.dependencies import get_engine, get_settings
from web.backend.app.middleware.auth import bearer_token, get_current_moderator
from web.backend.app.models.api import (
    ApproveRequest,
    AuditEntryResponse,
    LoginRequest,
    LoginResponse,
    RejectRequest,
    TermResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mod", tags=["moderation"])


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse, summary="Log in as a moderator")
def login(
    body: LoginRequest,
    engine: GlossaryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """Exchange moderator credentials for a bearer session token."""
    moderator = engine.moderators.authenticate(body.username, body.password)
    if moderator is None:
        raise Unauthorized("Invalid credentials")
    session = engine.moderators.create_session(moderator.id, settings.session_hours)
    if engine.audit is not None:
        try:
            engine.audit.log_event(str(moderator.id), "moderator.login", "moderator", str(moderator.id))
        except OSError:
            logger.exception("Failed to write login audit event for moderator %s", moderator.id)
    return LoginResponse(token=session.token, username=moderator.username, expires_at=session.expires_at)


@router.post("/logout", summary="End the current moderator session")
def logout(
    authorization: Optional[str] = Header(None),
    moderator: Moderator = Depends(get_current_moderator),
    engine: GlossaryEngine = Depends(get_engine),
):
    """Invalidate the bearer token used for this request."""
    engine.moderators.delete_session(bearer_token(authorization))
    return {"ok": True}


# ---------------------------------------------------------------------------
# Review queue
# ---------------------------------------------------------------------------


@router.get("/terms", response_model=list[TermResponse], summary="List pending terms")
def pending_terms(
    moderator: Moderator = Depends(get_current_moderator),
    engine: GlossaryEngine = Depends(get_engine),
):
    """Return terms awaiting review, newest first."""
    return [TermResponse.from_term(t) for t in engine.lifecycle.list_pending()]


@router.post("/terms/{term_id}/approve", response_model=TermResponse, summary="Approve a term")
def approve_term(
    term_id: int,
    body: Optional[ApproveRequest] = None,
    moderator: Moderator = Depends(get_current_moderator),
    engine: GlossaryEngine = Depends(get_engine),
):
    """Publish a term.  An optional note replaces any automated note."""
    note = body.note if body else None
    term = engine.lifecycle.approve_by_moderator(term_id, moderator.id, note)
    return TermResponse.from_term(term)


@router.post("/terms/{term_id}/reject", response_model=TermResponse, summary="Reject a term")
def reject_term(
    term_id: int,
    body: RejectRequest,
    moderator: Moderator = Depends(get_current_moderator),
    engine: GlossaryEngine = Depends(get_engine),
):
    """Reject a term.  The note is required and must not be blank."""
    term = engine.lifecycle.reject_by_moderator(term_id, moderator.id, body.note)
    return TermResponse.from_term(term)


@router.get("/audit", response_model=list[AuditEntryResponse], summary="Moderation audit trail")
def audit_trail(
    term_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = Query(200, ge=1, le=10_000),
    moderator: Moderator = Depends(get_current_moderator),
    engine: GlossaryEngine = Depends(get_engine),
):
    """Return audit events, newest first, optionally for a single term."""
    if engine.audit is None:
        return []
    entries = engine.audit.get_events(
        action=action,
        resource_type="term" if term_id is not None else None,
        resource_id=str(term_id) if term_id is not None else None,
        limit=limit,
    )
    return [AuditEntryResponse(**asdict(e)) for e in entries]
