"""Domain layer: records, configuration artifacts and the error taxonomy."""

from __future__ import annotations

from .errors import (
    BracketError,
    BrawlerError,
    ExternalGenerationFailure,
    NoPendingMatchError,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from .models import (
    DEFAULT_ARENA,
    DRAW,
    Arena,
    BattleOutcome,
    BattleResult,
    BattleRound,
    Bracket,
    Build,
    Decision,
    Fighter,
    MatchRecord,
    MatchStatus,
    NarratedRound,
    Seeding,
    Size,
    StatProfile,
    Tournament,
    TournamentMatch,
    TournamentStatus,
    check_fighter_id,
)

__all__ = [
    "BracketError",
    "BrawlerError",
    "ExternalGenerationFailure",
    "NoPendingMatchError",
    "NotFoundError",
    "PersistenceFailure",
    "ValidationError",
    "DEFAULT_ARENA",
    "DRAW",
    "check_fighter_id",
    "Arena",
    "BattleOutcome",
    "BattleResult",
    "BattleRound",
    "Bracket",
    "Build",
    "Decision",
    "Fighter",
    "MatchRecord",
    "MatchStatus",
    "NarratedRound",
    "Seeding",
    "Size",
    "StatProfile",
    "Tournament",
    "TournamentMatch",
    "TournamentStatus",
]
