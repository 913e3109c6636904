"""Trending score calculation.

A term's trending score is its net sentiment over the recent window::

    (upvotes - downvotes) / total      # 0 when there are no recent votes

which always lies in [-1, 1].  Unlike ``score`` it is not maintained per
vote: :meth:`TrendingCalculator.refresh` recomputes every term from the
ledger in one pass, and re-running it without new votes reproduces the
same values.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from slangdex.glossary.models import TrendDirection
from slangdex.glossary.store import GlossaryStore, to_timestamp

logger = logging.getLogger(__name__)

WINDOW_HOURS = 24


def trend_ratio(upvotes: int, downvotes: int, total: int) -> float:
    if total == 0:
        return 0.0
    return (upvotes - downvotes) / total


def classify_trend(trending_score: float) -> TrendDirection:
    """Map a trending score to a direction.

    Only the saturated bounds count as rising or falling: a term needs every
    recent vote to agree.  Anything strictly inside (-1, 1) is stable.
    """
    if trending_score >= 1:
        return TrendDirection.rising
    if trending_score <= -1:
        return TrendDirection.falling
    return TrendDirection.stable


class TrendingCalculator:
    """Recomputes ``trending_score`` for every term from the vote ledger."""

    def __init__(self, store: GlossaryStore, window_hours: int = WINDOW_HOURS) -> None:
        self.store = store
        self.window_hours = window_hours

    def refresh(self) -> dict[int, float]:
        """Recompute all trending scores and return them keyed by term id.

        The ledger read and the updates share one write transaction, so each
        score reflects a single snapshot of the ledger even while votes are
        arriving.
        """
        cutoff = to_timestamp(self.store.clock() - timedelta(hours=self.window_hours))

        with self.store.transaction() as conn:
            rows = conn.execute(
                """
                SELECT t.id AS term_id,
                       COUNT(v.id) AS total,
                       COALESCE(SUM(CASE WHEN v.value > 0 THEN 1 ELSE 0 END), 0) AS upvotes,
                       COALESCE(SUM(CASE WHEN v.value < 0 THEN 1 ELSE 0 END), 0) AS downvotes
                FROM terms t
                LEFT JOIN votes v ON v.term_id = t.id AND v.created_at >= ?
                GROUP BY t.id
                """,
                (cutoff,),
            ).fetchall()

            scores = {
                r["term_id"]: trend_ratio(r["upvotes"], r["downvotes"], r["total"]) for r in rows
            }
            conn.executemany(
                "UPDATE terms SET trending_score = ? WHERE id = ?",
                [(score, term_id) for term_id, score in scores.items()],
            )

        logger.info("Refreshed trending scores for %d terms (window %dh)", len(scores), self.window_hours)
        return scores
