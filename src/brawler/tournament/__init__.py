"""Bracket construction, status transitions and tournament orchestration."""

from __future__ import annotations

from .bracket import BracketGenerator, bye_slots, round_sizes, total_rounds
from .controller import AdvanceResult, TournamentController, TournamentRunResult
from .reporting import Standing, TournamentProgress, tournament_progress, tournament_standings
from .state_machine import TournamentStateMachine

__all__ = [
    "AdvanceResult",
    "BracketGenerator",
    "Standing",
    "TournamentController",
    "TournamentProgress",
    "TournamentRunResult",
    "TournamentStateMachine",
    "bye_slots",
    "round_sizes",
    "total_rounds",
    "tournament_progress",
    "tournament_standings",
]
