"""FastAPI application for the slangdex glossary.

Provides REST API endpoints wrapping the slangdex package for:
- Term submission with automated moderation
- Voting and ranked listings
- Trending insights
- Moderator review of pending terms
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from slangdex import __version__
from slangdex.config import Settings
from slangdex.errors import (
    DuplicateVote,
    GlossaryError,
    NotFound,
    StorageFailure,
    Unauthorized,
    ValidationError,
)
from web.backend.app.dependencies import get_settings
from web.backend.app.models.api import AboutResponse
from web.backend.app.routers import moderation, terms

logger = logging.getLogger(__name__)

app = FastAPI(
    title="slangdex API",
    description=(
        "REST API for a community-curated slang glossary. "
        "Provides endpoints for submitting and voting on terms, "
        "ranked and trending listings, and moderator review."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(terms.router)
app.include_router(moderation.router)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR: list[tuple[type[GlossaryError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DuplicateVote, status.HTTP_400_BAD_REQUEST),
    (Unauthorized, status.HTTP_401_UNAUTHORIZED),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (StorageFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


@app.exception_handler(GlossaryError)
async def glossary_error_handler(request: Request, exc: GlossaryError) -> JSONResponse:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            code = mapped
            break

    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        detail = "Internal storage error"
    else:
        detail = str(exc)

    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=code, content={"detail": detail}, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


# ---------------------------------------------------------------------------
# Root, about, and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "slangdex API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/api/about", response_model=AboutResponse, tags=["meta"])
async def about(settings: Settings = Depends(get_settings)):
    """Project links and credits shown on the about page."""
    return AboutResponse(
        github=settings.github_url,
        about=settings.about_text,
        version=settings.version,
        author=settings.author_name,
    )


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
