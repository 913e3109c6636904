"""Vote ledger and score aggregation.

Each (term, voter identity) pair may vote once.  A term's ``score`` is the
running total of its ledger values, updated in the same transaction as the
ledger insert so reads never need to re-sum the ledger.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from slangdex.errors import DuplicateVote, InvalidVote, ValidationError
from slangdex.glossary.models import Term
from slangdex.glossary.store import GlossaryStore

logger = logging.getLogger(__name__)

VALID_VOTE_VALUES = (-1, 1)


@dataclass
class ScoreDrift:
    """A term whose maintained score disagrees with its ledger."""

    term_id: int
    maintained: int
    ledger: int


class VoteLedger:
    """Append-only record of votes, plus the score counter it drives."""

    def __init__(self, store: GlossaryStore) -> None:
        self.store = store

    def cast_vote(self, term_id: int, voter_identity: str, value: int) -> Term:
        """Record one vote and return the term with its updated score.

        The duplicate check, the ledger insert, and the score update run in
        one write transaction, so concurrent votes from the same identity
        are serialized and only the first is accepted.
        """
        if isinstance(value, bool) or not isinstance(value, int) or value not in VALID_VOTE_VALUES:
            raise InvalidVote(f"Vote value must be -1 or 1, got {value!r}")
        if not voter_identity:
            raise ValidationError("voter identity is required")

        with self.store.transaction() as conn:
            self.store.fetch_term(conn, term_id)

            existing = conn.execute(
                "SELECT 1 FROM votes WHERE term_id = ? AND voter_identity = ?",
                (term_id, voter_identity),
            ).fetchone()
            if existing is not None:
                raise DuplicateVote(f"Already voted on term '{term_id}'")

            try:
                conn.execute(
                    "INSERT INTO votes (term_id, voter_identity, value, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (term_id, voter_identity, value, self.store.now()),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateVote(f"Already voted on term '{term_id}'") from exc

            conn.execute("UPDATE terms SET score = score + ? WHERE id = ?", (value, term_id))
            term = self.store.fetch_term(conn, term_id)

        logger.info("Vote %+d recorded on term %s", value, term_id)
        return term

    # ------------------------------------------------------------------
    # Consistency checks
    # ------------------------------------------------------------------

    def recompute_score(self, term_id: int) -> int:
        """Sum the ledger for *term_id* from scratch."""
        with self.store.read() as conn:
            self.store.fetch_term(conn, term_id)
            row = conn.execute(
                "SELECT COALESCE(SUM(value), 0) AS total FROM votes WHERE term_id = ?",
                (term_id,),
            ).fetchone()
        return row["total"]

    def find_score_drift(self) -> list[ScoreDrift]:
        """Return every term whose maintained score diverges from its ledger."""
        with self.store.read() as conn:
            rows = conn.execute(
                """
                SELECT t.id, t.score, COALESCE(SUM(v.value), 0) AS ledger
                FROM terms t
                LEFT JOIN votes v ON v.term_id = t.id
                GROUP BY t.id
                HAVING t.score != COALESCE(SUM(v.value), 0)
                ORDER BY t.id
                """
            ).fetchall()
        return [ScoreDrift(term_id=r["id"], maintained=r["score"], ledger=r["ledger"]) for r in rows]
