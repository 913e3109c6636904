"""Term lifecycle: submission and moderator decisions.

Every submission starts out pending, whatever the automated verdict.  The
verdict only decides whether the term arrives in the review queue with a
note attached; a moderator must approve it before it is listed.
Approve and reject are valid from any state, so a decision can be revisited.
"""

from __future__ import annotations

import logging
from typing import Optional

from slangdex.errors import ValidationError
from slangdex.glossary.models import Term, TermDraft, TermState
from slangdex.glossary.store import GlossaryStore, term_from_row
from slangdex.moderation.models import TypedNote
from slangdex.moderation.pipeline import ModerationPipeline
from slangdex.security.audit_log import AuditLogger

logger = logging.getLogger(__name__)


class TermLifecycle:
    """Owns every write to a term's state and moderation fields."""

    def __init__(
        self,
        store: GlossaryStore,
        pipeline: ModerationPipeline,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.store = store
        self.pipeline = pipeline
        self.audit = audit

    def _record(self, actor: str, action: str, term: Term, **details) -> None:
        """Append to the audit trail.  Best-effort: the term change is already committed."""
        if self.audit is None:
            return
        try:
            self.audit.log_event(
                actor=actor,
                action=action,
                resource_type="term",
                resource_id=str(term.id),
                details=details,
            )
        except OSError:
            logger.exception("Failed to write audit event %s for term %s", action, term.id)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, draft: TermDraft) -> Term:
        """Moderate and store a new term in the pending state."""
        draft.validate()
        verdict = self.pipeline.moderate(draft)
        note = verdict.note.serialize() if verdict.note else None

        with self.store.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO terms (text, definition, example, created_at, state, moderation_note) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    draft.text,
                    draft.definition,
                    draft.example,
                    self.store.now(),
                    TermState.pending.value,
                    note,
                ),
            )
            term = self.store.fetch_term(conn, cursor.lastrowid)

        logger.info("Term %s submitted (auto verdict: %s)", term.id, "clean" if verdict.approved else note)
        self._record(
            "anonymous",
            "term.submitted",
            term,
            auto_approved=verdict.approved,
            note=note,
        )
        return term

    # ------------------------------------------------------------------
    # Moderator decisions
    # ------------------------------------------------------------------

    def _decide(
        self,
        term_id: int,
        moderator_id: int,
        state: TermState,
        note: Optional[TypedNote],
    ) -> Term:
        with self.store.transaction() as conn:
            self.store.fetch_term(conn, term_id)
            conn.execute(
                "UPDATE terms SET state = ?, moderated_at = ?, moderated_by = ?, moderation_note = ? "
                "WHERE id = ?",
                (
                    state.value,
                    self.store.now(),
                    moderator_id,
                    note.serialize() if note else None,
                    term_id,
                ),
            )
            term = self.store.fetch_term(conn, term_id)

        logger.info("Term %s %s by moderator %s", term_id, state.value, moderator_id)
        self._record(
            str(moderator_id),
            f"term.{state.value}",
            term,
            note=note.serialize() if note else None,
        )
        return term

    def approve_by_moderator(
        self, term_id: int, moderator_id: int, note: Optional[str] = None
    ) -> Term:
        """Publish a term.  The optional note replaces any automated note."""
        typed = TypedNote.parse(note.strip()) if note and note.strip() else None
        return self._decide(term_id, moderator_id, TermState.approved, typed)

    def reject_by_moderator(self, term_id: int, moderator_id: int, note: str) -> Term:
        """Reject a term.  A non-empty note is required."""
        if not note or not note.strip():
            raise ValidationError("A note is required when rejecting a term")
        return self._decide(term_id, moderator_id, TermState.rejected, TypedNote.parse(note.strip()))

    # ------------------------------------------------------------------
    # Review queue
    # ------------------------------------------------------------------

    def list_pending(self) -> list[Term]:
        """Return pending terms, newest first."""
        with self.store.read() as conn:
            rows = conn.execute(
                "SELECT * FROM terms WHERE state = ? ORDER BY created_at DESC, id DESC",
                (TermState.pending.value,),
            ).fetchall()
        return [term_from_row(r) for r in rows]

    def get_term(self, term_id: int) -> Term:
        return self.store.get_term(term_id)
