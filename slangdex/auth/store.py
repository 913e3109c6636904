"""Moderator accounts and login sessions.

Stored in the same SQLite database as the glossary.  Passwords are kept
only as salted PBKDF2 hashes; session tokens are random and expire.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
import sqlite3
from datetime import timedelta
from typing import Optional

from slangdex.auth.models import Moderator, ModeratorSession
from slangdex.errors import ValidationError
from slangdex.glossary.store import GlossaryStore, to_timestamp

logger = logging.getLogger(__name__)

_HASH_ALGORITHM = "pbkdf2_sha256"
_HASH_ITERATIONS = 260_000
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, iterations: int = _HASH_ITERATIONS) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{_HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != _HASH_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), rounds)
    return hmac.compare_digest(digest.hex(), expected)


def _moderator_from_row(row: sqlite3.Row) -> Moderator:
    return Moderator(
        id=row["id"],
        username=row["username"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )


class ModeratorStore:
    """Moderator CRUD, credential checks, and session tokens."""

    def __init__(self, store: GlossaryStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Moderators
    # ------------------------------------------------------------------

    def create_moderator(self, username: str, password: str) -> Moderator:
        """Create a moderator.  Raises ValidationError on a taken username."""
        username = username.strip()
        if not username:
            raise ValidationError("Username is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        with self.store.transaction() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO moderators (username, password_hash, created_at) VALUES (?, ?, ?)",
                    (username, hash_password(password), self.store.now()),
                )
            except sqlite3.IntegrityError as exc:
                raise ValidationError(f"Moderator '{username}' already exists") from exc
            row = conn.execute("SELECT * FROM moderators WHERE id = ?", (cursor.lastrowid,)).fetchone()

        logger.info("Created moderator %s", username)
        return _moderator_from_row(row)

    def get_moderator(self, moderator_id: int) -> Optional[Moderator]:
        with self.store.read() as conn:
            row = conn.execute("SELECT * FROM moderators WHERE id = ?", (moderator_id,)).fetchone()
        return _moderator_from_row(row) if row else None

    def get_by_username(self, username: str) -> Optional[Moderator]:
        with self.store.read() as conn:
            row = conn.execute(
                "SELECT * FROM moderators WHERE username = ?", (username,)
            ).fetchone()
        return _moderator_from_row(row) if row else None

    def authenticate(self, username: str, password: str) -> Optional[Moderator]:
        """Return the moderator if the credentials match, else None."""
        moderator = self.get_by_username(username)
        if moderator is None or not verify_password(password, moderator.password_hash):
            logger.info("Failed login for %s", username)
            return None
        return moderator

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, moderator_id: int, expires_in_hours: int = 24) -> ModeratorSession:
        now = self.store.clock()
        session = ModeratorSession(
            token=secrets.token_urlsafe(48),
            moderator_id=moderator_id,
            created_at=to_timestamp(now),
            expires_at=to_timestamp(now + timedelta(hours=expires_in_hours)),
        )
        with self.store.transaction() as conn:
            conn.execute(
                "INSERT INTO moderator_sessions (token, moderator_id, created_at, expires_at) "
                "VALUES (?, ?, ?, ?)",
                (session.token, session.moderator_id, session.created_at, session.expires_at),
            )
        return session

    def validate_session(self, token: str) -> Optional[Moderator]:
        """Return the moderator owning *token*, or None if unknown or expired."""
        with self.store.read() as conn:
            row = conn.execute(
                "SELECT * FROM moderator_sessions WHERE token = ?", (token,)
            ).fetchone()
        if row is None:
            return None
        if row["expires_at"] < self.store.now():
            self.delete_session(token)
            return None
        return self.get_moderator(row["moderator_id"])

    def delete_session(self, token: str) -> bool:
        with self.store.transaction() as conn:
            cursor = conn.execute("DELETE FROM moderator_sessions WHERE token = ?", (token,))
            deleted = cursor.rowcount > 0
        return deleted
