"""Data models for the content moderation pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class NoteKind(str, Enum):
    """Category of a moderation note.  The dashboard colors flags by kind."""

    SPAM = "SPAM"
    LENGTH = "LENGTH"
    AI = "AI"
    PROFANITY = "PROFANITY"
    ERROR = "ERROR"
    OTHER = "OTHER"


_NOTE_PATTERN = re.compile(r"^\[([A-Z]+)\]\s?(.*)$", re.DOTALL)


@dataclass(frozen=True)
class TypedNote:
    """A moderation note tagged with its kind.

    Serialized as ``"[KIND] message"`` at the storage/API boundary.
    """

    kind: NoteKind
    message: str

    def serialize(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __str__(self) -> str:
        return self.serialize()

    @classmethod
    def parse(cls, raw: str) -> TypedNote:
        """Parse a stored note.  Untagged or unknown-tag text becomes ``OTHER``."""
        match = _NOTE_PATTERN.match(raw)
        if match:
            try:
                return cls(NoteKind(match.group(1)), match.group(2))
            except ValueError:
                pass
        return cls(NoteKind.OTHER, raw)

    @classmethod
    def from_optional(cls, raw: Optional[str]) -> Optional[TypedNote]:
        return cls.parse(raw) if raw else None


@dataclass(frozen=True)
class Verdict:
    """Outcome of the moderation pipeline.

    Approved verdicts carry no note; rejected verdicts carry exactly one.
    """

    approved: bool
    note: Optional[TypedNote] = None

    def __post_init__(self) -> None:
        if self.approved and self.note is not None:
            raise ValueError("an approved verdict cannot carry a note")
        if not self.approved and self.note is None:
            raise ValueError("a rejected verdict requires a note")

    @classmethod
    def approve(cls) -> Verdict:
        return cls(approved=True)

    @classmethod
    def reject(cls, kind: NoteKind, message: str) -> Verdict:
        return cls(approved=False, note=TypedNote(kind, message))


@dataclass
class ClassificationResult:
    """Response of the external content classifier."""

    flagged: bool
    category_scores: dict[str, float] = field(default_factory=dict)


@dataclass
class ProfanityResult:
    """Response of the external profanity detector."""

    is_profane: bool
    reason: str = ""
