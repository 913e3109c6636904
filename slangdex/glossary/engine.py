"""Wiring of the glossary components.

:class:`GlossaryEngine` builds every component over one shared store so the
web backend and the CLI use identical plumbing.  The classifier is injected,
which lets tests substitute a deterministic fake.
"""

from __future__ import annotations

from typing import Optional

from slangdex.auth.store import ModeratorStore
from slangdex.config import Settings
from slangdex.glossary.lifecycle import TermLifecycle
from slangdex.glossary.ranking import RankingQuery
from slangdex.glossary.store import GlossaryStore
from slangdex.glossary.trending import TrendingCalculator
from slangdex.glossary.votes import VoteLedger
from slangdex.moderation.classifier import ContentClassifier, RemoteClassifier
from slangdex.moderation.pipeline import ModerationPipeline
from slangdex.security.audit_log import AuditLogger


class GlossaryEngine:
    """Every glossary component, sharing one store."""

    def __init__(
        self,
        store: GlossaryStore,
        classifier: ContentClassifier,
        settings: Optional[Settings] = None,
        audit: Optional[AuditLogger] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store
        self.audit = audit
        self.pipeline = ModerationPipeline.from_settings(classifier, self.settings)
        self.ledger = VoteLedger(store)
        self.trending = TrendingCalculator(store, self.settings.trending_window_hours)
        self.lifecycle = TermLifecycle(store, self.pipeline, audit)
        self.ranking = RankingQuery(store, self.trending)
        self.moderators = ModeratorStore(store)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        classifier: Optional[ContentClassifier] = None,
    ) -> GlossaryEngine:
        """Build an engine rooted at ``settings.data_dir``."""
        store = GlossaryStore(settings.data_dir)
        return cls(
            store=store,
            classifier=classifier or RemoteClassifier.from_settings(settings),
            settings=settings,
            audit=AuditLogger(settings.data_dir / "audit_logs", clock=store.clock),
        )
