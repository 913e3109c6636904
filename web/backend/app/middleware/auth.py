"""Auth middleware -- FastAPI dependency for extracting the current moderator.

Moderators authenticate with ``Authorization: Bearer <session_token>``,
where the token comes from ``POST /api/mod/login``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from slangdex.auth.models import Moderator
from slangdex.errors import Unauthorized
from slangdex.glossary.engine import GlossaryEngine
from web.backend.app.dependencies import get_engine


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def get_current_moderator(
    authorization: Optional[str] = Header(None),
    engine: GlossaryEngine = Depends(get_engine),
) -> Moderator:
    """FastAPI dependency that validates the moderator session.

    Raises :class:`Unauthorized` (mapped to ``401``) if the token is
    missing, unknown, or expired.
    """
    token = bearer_token(authorization)
    if token is not None:
        moderator = engine.moderators.validate_session(token)
        if moderator is not None:
            return moderator
    raise Unauthorized("Not authenticated")
