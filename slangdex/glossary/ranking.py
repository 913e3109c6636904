"""Public views over approved terms.

Ranks are computed over the whole filtered result set before pagination,
so a row's rank is its position in the full ordering rather than within
the returned page.  Ties are broken by term id for stable pages.
"""

from __future__ import annotations

import logging
from typing import Optional

from slangdex.errors import ValidationError
from slangdex.glossary.models import RankedTerm, SortKey, TermState, TrendingTerm
from slangdex.glossary.store import GlossaryStore, term_from_row
from slangdex.glossary.trending import TrendingCalculator, classify_trend

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    SortKey.score: "score",
    SortKey.trending: "trending_score",
}


class RankingQuery:
    """Paginated, searchable listings of approved terms."""

    def __init__(self, store: GlossaryStore, trending: TrendingCalculator) -> None:
        self.store = store
        self.trending = trending

    def list_terms(
        self,
        search: Optional[str] = None,
        sort_key: SortKey | str = SortKey.score,
        limit: int = 25,
        offset: int = 0,
    ) -> list[RankedTerm]:
        """Return the ``[offset, offset + limit)`` slice of the ranked listing."""
        try:
            sort_key = SortKey(sort_key)
        except ValueError as exc:
            raise ValidationError(f"Unknown sort key: {sort_key!r}") from exc
        if limit < 1:
            raise ValidationError("limit must be at least 1")
        if offset < 0:
            raise ValidationError("offset must not be negative")

        column = _SORT_COLUMNS[sort_key]
        params: list = [TermState.approved.value]
        where = "state = ?"
        if search:
            where += " AND instr(casefold(text), ?) > 0"
            params.append(search.casefold())

        sql = f"""
            SELECT * FROM (
                SELECT terms.*,
                       ROW_NUMBER() OVER (ORDER BY {column} DESC, id ASC) AS rank
                FROM terms
                WHERE {where}
            )
            ORDER BY rank
            LIMIT ? OFFSET ?
        """
        with self.store.read() as conn:
            rows = conn.execute(sql, (*params, limit, offset)).fetchall()
        return [RankedTerm(term=term_from_row(r), rank=r["rank"]) for r in rows]

    def insights(self, search: Optional[str] = None) -> list[TrendingTerm]:
        """Refresh trending scores, then list approved terms by trend strength.

        *search* matches the term text or its definition.
        """
        self.trending.refresh()

        params: list = [TermState.approved.value]
        where = "state = ?"
        if search:
            where += " AND (instr(casefold(text), ?) > 0 OR instr(casefold(definition), ?) > 0)"
            params.extend([search.casefold()] * 2)

        with self.store.read() as conn:
            rows = conn.execute(
                f"SELECT * FROM terms WHERE {where} ORDER BY ABS(trending_score) DESC, id ASC",
                params,
            ).fetchall()

        results = []
        for row in rows:
            term = term_from_row(row)
            results.append(TrendingTerm(term=term, trend=classify_trend(term.trending_score)))
        return results
