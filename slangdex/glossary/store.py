"""SQLite-backed storage for terms, votes, and moderators.

Provides a small unit-of-work interface over a database file under
``~/.slangdex/`` (or *base_dir*):

- ``transaction()`` -- write transaction holding the database write lock
  from its first statement (``BEGIN IMMEDIATE``)
- ``read()`` -- read-only snapshot

Every unit of work gets its own connection, so the store may be shared
across request threads.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from slangdex.errors import StorageFailure, TermNotFound
from slangdex.glossary.models import Term, TermState, Vote
from slangdex.moderation.models import TypedNote

logger = logging.getLogger(__name__)

DB_FILENAME = "glossary.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS moderators (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS moderator_sessions (
    token TEXT PRIMARY KEY,
    moderator_id INTEGER NOT NULL REFERENCES moderators(id),
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS terms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    text TEXT NOT NULL,
    definition TEXT NOT NULL,
    example TEXT NOT NULL,
    created_at TEXT NOT NULL,
    score INTEGER NOT NULL DEFAULT 0,
    trending_score REAL NOT NULL DEFAULT 0,
    state TEXT NOT NULL DEFAULT 'pending'
        CHECK (state IN ('pending', 'approved', 'rejected')),
    moderation_note TEXT,
    moderated_at TEXT,
    moderated_by INTEGER REFERENCES moderators(id)
);

CREATE INDEX IF NOT EXISTS ix_terms_state ON terms(state);

CREATE TABLE IF NOT EXISTS votes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    term_id INTEGER NOT NULL REFERENCES terms(id),
    voter_identity TEXT NOT NULL,
    value INTEGER NOT NULL CHECK (value IN (-1, 1)),
    created_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_votes_term_voter ON votes(term_id, voter_identity);
CREATE INDEX IF NOT EXISTS ix_votes_created_at ON votes(created_at);
"""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp(dt: datetime) -> str:
    """Serialize *dt* so that string order matches chronological order."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def term_from_row(row: sqlite3.Row) -> Term:
    return Term(
        id=row["id"],
        text=row["text"],
        definition=row["definition"],
        example=row["example"],
        created_at=row["created_at"],
        score=row["score"],
        trending_score=row["trending_score"],
        state=TermState(row["state"]),
        moderation_note=TypedNote.from_optional(row["moderation_note"]),
        moderated_at=row["moderated_at"],
        moderated_by=row["moderated_by"],
    )


def vote_from_row(row: sqlite3.Row) -> Vote:
    return Vote(
        id=row["id"],
        term_id=row["term_id"],
        voter_identity=row["voter_identity"],
        value=row["value"],
        created_at=row["created_at"],
    )


class GlossaryStore:
    """SQLite storage shared by every glossary component.

    Storage path: ``~/.slangdex/glossary.db`` unless *base_dir* is given.
    *clock* supplies "now" for every timestamp the core records.
    """

    def __init__(
        self,
        base_dir: Optional[str | Path] = None,
        clock: Callable[[], datetime] = utcnow,
        timeout: float = 5.0,
    ) -> None:
        if base_dir is None:
            self._base = Path.home() / ".slangdex"
        else:
            self._base = Path(base_dir)
        self._base.mkdir(parents=True, exist_ok=True)
        self.path = self._base / DB_FILENAME
        self.clock = clock
        self._timeout = timeout
        self._init_schema()

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                self.path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
            )
        except sqlite3.Error as exc:
            raise StorageFailure(f"Failed to open {self.path}: {exc}", cause=exc) from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("casefold", 1, lambda s: s.casefold() if s else s, deterministic=True)
        return conn

    def _init_schema(self) -> None:
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode = WAL")
            conn.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StorageFailure(f"Failed to initialize schema: {exc}", cause=exc) from exc
        finally:
            conn.close()

    @contextmanager
    def _unit_of_work(self, begin: str) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            conn.execute(begin)
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            logger.error("Storage error: %s", exc)
            raise StorageFailure(str(exc), cause=exc) from exc
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def transaction(self):
        """Write transaction; the write lock is held from the first statement."""
        return self._unit_of_work("BEGIN IMMEDIATE")

    def read(self):
        """Read transaction over one consistent snapshot."""
        return self._unit_of_work("BEGIN DEFERRED")

    # ------------------------------------------------------------------
    # Helpers shared by components
    # ------------------------------------------------------------------

    def now(self) -> str:
        return to_timestamp(self.clock())

    @staticmethod
    def fetch_term(conn: sqlite3.Connection, term_id: int) -> Term:
        row = conn.execute("SELECT * FROM terms WHERE id = ?", (term_id,)).fetchone()
        if row is None:
            raise TermNotFound(term_id)
        return term_from_row(row)

    def get_term(self, term_id: int) -> Term:
        with self.read() as conn:
            return self.fetch_term(conn, term_id)

    def list_votes(self, term_id: int) -> list[Vote]:
        with self.read() as conn:
            rows = conn.execute(
                "SELECT * FROM votes WHERE term_id = ? ORDER BY id", (term_id,)
            ).fetchall()
        return [vote_from_row(r) for r in rows]
