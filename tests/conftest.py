"""Shared fixtures: a fake classifier, a controllable clock, and a temp engine."""

import tempfile
from pathlib import Path

import pytest

from helpers import FakeClassifier, FakeClock
from slangdex.config import Settings
from slangdex.glossary.engine import GlossaryEngine
from slangdex.glossary.store import GlossaryStore
from slangdex.security.audit_log import AuditLogger


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(classifier, clock):
    with tempfile.TemporaryDirectory() as tmpdir:
        store = GlossaryStore(Path(tmpdir) / "db", clock=clock)
        audit = AuditLogger(Path(tmpdir) / "audit", clock=clock)
        yield GlossaryEngine(store, classifier, settings=Settings(data_dir=Path(tmpdir)), audit=audit)
