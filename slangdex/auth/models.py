"""Auth domain models for moderators and their sessions."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Moderator:
    """A human moderator who can approve or reject terms."""

    id: int
    username: str
    password_hash: str = field(default="", repr=False)
    created_at: str = ""


@dataclass
class ModeratorSession:
    """An active moderator login."""

    token: str = field(repr=False)
    moderator_id: int = 0
    created_at: str = ""
    expires_at: str = ""
