"""Error taxonomy for the glossary core.

The web layer maps these onto HTTP status codes; the core never raises
``HTTPException`` itself.
"""

from __future__ import annotations


class GlossaryError(Exception):
    """Base class for all slangdex errors."""


class ValidationError(GlossaryError):
    """Malformed or out-of-range input. User-correctable."""


class InvalidVote(ValidationError):
    """A vote value outside {-1, +1}."""


class DuplicateVote(GlossaryError):
    """The voter identity has already voted on this term."""


class NotFound(GlossaryError):
    """A referenced entity does not exist."""


class TermNotFound(NotFound):
    def __init__(self, term_id: int) -> None:
        super().__init__(f"Term '{term_id}' not found")
        self.term_id = term_id


class Unauthorized(GlossaryError):
    """Missing or invalid moderator credentials."""


class ClassifierUnavailable(GlossaryError):
    """The external content classifier failed, timed out, or is not configured."""


class StorageFailure(GlossaryError):
    """The underlying store raised an error."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
