"""Public terms router -- submission, voting, ranked listing, and insights."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from slangdex.config import Settings
from slangdex.glossary.engine import GlossaryEngine
from slangdex.glossary.models import SortKey, TermDraft
from web.backend.app.dependencies import get_engine, get_settings, get_voter_identity
from web.backend.app.models.api import (
    InsightResponse,
    RankedTermResponse,
    TermCreateRequest,
    TermResponse,
    VoteRequest,
)

router = APIRouter(prefix="/api/terms", tags=["terms"])


@router.get(
    "",
    response_model=list[RankedTermResponse],
    summary="List approved terms by score or trend",
)
def list_terms(
    q: Optional[str] = None,
    sort: SortKey = SortKey.score,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    engine: GlossaryEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """Return one page of the ranked listing.  Ranks span the whole result set."""
    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    ranked = engine.ranking.list_terms(search=q, sort_key=sort, limit=page_size, offset=offset)
    return [RankedTermResponse.from_ranked(r) for r in ranked]


@router.get(
    "/insights",
    response_model=list[InsightResponse],
    summary="Refresh and list trending scores",
)
def term_insights(q: Optional[str] = None, engine: GlossaryEngine = Depends(get_engine)):
    """Recompute trending scores, then return approved terms by trend strength."""
    return [InsightResponse.from_trending(t) for t in engine.ranking.insights(search=q)]


@router.post(
    "",
    response_model=TermResponse,
    summary="Submit a new term",
    status_code=status.HTTP_201_CREATED,
)
def submit_term(body: TermCreateRequest, engine: GlossaryEngine = Depends(get_engine)):
    """Run the moderation pipeline and queue the term for review."""
    term = engine.lifecycle.submit(
        TermDraft(text=body.text, definition=body.definition, example=body.example)
    )
    return TermResponse.from_term(term)


@router.post(
    "/{term_id}/vote",
    response_model=TermResponse,
    summary="Vote a term up or down",
)
def vote_term(
    term_id: int,
    body: VoteRequest,
    engine: GlossaryEngine = Depends(get_engine),
    voter: str = Depends(get_voter_identity),
):
    """Record one vote per voter identity and return the updated term."""
    term = engine.ledger.cast_vote(term_id, voter, body.value)
    return TermResponse.from_term(term)
