"""Shared singletons for the running process.

Routers obtain the engine and settings through these FastAPI dependencies
so tests can swap them with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request

from slangdex.config import Settings, load_settings
from slangdex.glossary.engine import GlossaryEngine

_settings: Optional[Settings] = None
_engine: Optional[GlossaryEngine] = None


def get_settings() -> Settings:
    """Return the singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def get_engine(settings: Settings = Depends(get_settings)) -> GlossaryEngine:
    """Return the singleton GlossaryEngine instance."""
    global _engine
    if _engine is None:
        _engine = GlossaryEngine.from_settings(settings)
    return _engine


def get_voter_identity(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Identify a voter by network address.

    Behind a trusted proxy the first ``X-Forwarded-For`` hop is used.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"
