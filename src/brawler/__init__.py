"""Turn-based combat simulation and single-elimination tournaments."""

from __future__ import annotations

from .domain import (
    DEFAULT_ARENA,
    DRAW,
    Arena,
    BattleOutcome,
    BattleResult,
    BattleRound,
    BracketError,
    BrawlerError,
    ExternalGenerationFailure,
    Fighter,
    NoPendingMatchError,
    NotFoundError,
    PersistenceFailure,
    StatProfile,
    Tournament,
    TournamentMatch,
    TournamentStatus,
    ValidationError,
)
from .engine import BattleSimulator, CombatResolver, resolve_battle

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_ARENA",
    "DRAW",
    "Arena",
    "BattleOutcome",
    "BattleResult",
    "BattleRound",
    "BattleSimulator",
    "BracketError",
    "BrawlerError",
    "CombatResolver",
    "ExternalGenerationFailure",
    "Fighter",
    "NoPendingMatchError",
    "NotFoundError",
    "PersistenceFailure",
    "StatProfile",
    "Tournament",
    "TournamentMatch",
    "TournamentStatus",
    "ValidationError",
    "resolve_battle",
]
