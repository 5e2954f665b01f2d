"""Error taxonomy shared by the simulation and tournament layers."""

from __future__ import annotations


class BrawlerError(Exception):
    """Base class for all domain errors raised by brawler."""


class ValidationError(BrawlerError):
    """Raised when caller input is invalid (too few fighters, bad ids, bad limits)."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(BrawlerError):
    """Raised when a tournament or fighter cannot be located."""


class NoPendingMatchError(BrawlerError):
    """Signals that a tournament has no actionable match left.

    This is a terminal signal rather than a failure: callers advancing a
    tournament in a loop should stop when they see it.
    """

    def __init__(self, tournament_id: str) -> None:
        super().__init__(f"Tournament '{tournament_id}' has no pending match.")
        self.tournament_id = tournament_id


class PersistenceFailure(BrawlerError):
    """Raised when a tournament record could not be written or read."""


class BracketError(BrawlerError):
    """Raised when a persisted bracket violates its structural invariants."""


class ExternalGenerationFailure(Exception):
    """Base class for failures of externally generated content (narration)."""


__all__ = [
    "BrawlerError",
    "ValidationError",
    "NotFoundError",
    "NoPendingMatchError",
    "PersistenceFailure",
    "BracketError",
    "ExternalGenerationFailure",
]
