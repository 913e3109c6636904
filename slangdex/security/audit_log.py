"""Moderation audit trail.

Every submission verdict and moderator decision is appended as one JSON line
to a daily file under ``~/.slangdex/audit_logs/``.  Entries are never
rewritten; the log is the history of how each term reached its state.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from collections.abc import Callable
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class AuditEntry:
    """A single audit log entry."""

    id: str
    timestamp: str
    actor: str
    action: str
    resource_type: str
    resource_id: str
    details: dict[str, Any] = field(default_factory=dict)


class AuditLogger:
    """Append-only JSON-lines audit log, one file per UTC day."""

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._base_dir = Path(base_dir) if base_dir else Path.home() / ".slangdex" / "audit_logs"
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = threading.Lock()

    def _log_file(self, now: datetime) -> Path:
        return self._base_dir / f"{now.astimezone(timezone.utc).strftime('%Y-%m-%d')}.jsonl"

    def _read_all_entries(self) -> list[AuditEntry]:
        entries: list[AuditEntry] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
                if not line.strip():
                    continue
                try:
                    entries.append(AuditEntry(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Skipping unreadable audit line %s:%d", path.name, lineno)
        return entries

    def log_event(
        self,
        actor: str,
        action: str,
        resource_type: str,
        resource_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEntry:
        """Record an audit event and return the created entry."""
        now = self._clock()
        entry = AuditEntry(
            id=uuid.uuid4().hex[:16],
            timestamp=now.astimezone(timezone.utc).isoformat(timespec="microseconds"),
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
        )
        with self._lock, self._log_file(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(entry)) + "\n")
        return entry

    def get_events(
        self,
        *,
        actor: Optional[str] = None,
        action: Optional[str] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        limit: int = 200,
    ) -> list[AuditEntry]:
        """Return filtered audit events, newest first."""
        entries = self._read_all_entries()

        if actor:
            entries = [e for e in entries if e.actor == actor]
        if action:
            entries = [e for e in entries if e.action == action]
        if resource_type:
            entries = [e for e in entries if e.resource_type == resource_type]
        if resource_id:
            entries = [e for e in entries if e.resource_id == resource_id]

        # Stable sort, then reverse: equal timestamps keep newest-written first.
        entries.sort(key=lambda e: e.timestamp)
        entries.reverse()
        return entries[:limit]

    def get_term_history(self, term_id: int) -> list[AuditEntry]:
        """Return every recorded event for one term, newest first."""
        return self.get_events(resource_type="term", resource_id=str(term_id), limit=10_000)
