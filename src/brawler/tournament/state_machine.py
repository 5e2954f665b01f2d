"""Tournament and match status transitions."""

from __future__ import annotations

from typing import Callable

from rich.console import Console

from brawler.domain.errors import NoPendingMatchError
from brawler.domain.models import (
    BattleOutcome,
    Decision,
    MatchRecord,
    Tournament,
    TournamentMatch,
    TournamentStatus,
)

from .bracket import advance_winner, check_structure, is_bye, is_ready

MatchResolver = Callable[[Tournament, TournamentMatch], MatchRecord]

_DECISIONS = {
    BattleOutcome.KNOCKOUT: Decision.KNOCKOUT,
    BattleOutcome.DECISION: Decision.DECISION,
    BattleOutcome.DRAW: Decision.DRAW_TIEBREAK,
}


def draw_tiebreak(record: MatchRecord, match: TournamentMatch) -> str:
    """Advance the fighter who dealt more damage; fighter A on equal damage."""

    assert match.fighter_a is not None and match.fighter_b is not None
    dealt_a = record.result.damage_dealt(match.fighter_a)
    dealt_b = record.result.damage_dealt(match.fighter_b)
    return match.fighter_b if dealt_b > dealt_a else match.fighter_a


class TournamentStateMachine:
    """Resolves exactly one match per :meth:`advance_one` call.

    The machine mutates the tournament it is given and never persists it;
    callers hold the per-tournament lock and save the result. Battles are
    obtained through ``resolve_match`` so cached results can be replayed.
    """

    def __init__(self, resolve_match: MatchResolver, *, console: Console | None = None) -> None:
        self.resolve_match = resolve_match
        self.console = console or Console()

    def next_pending_match(self, tournament: Tournament) -> TournamentMatch | None:
        if tournament.status is TournamentStatus.COMPLETED:
            return None
        for match in tournament.iter_matches():
            if is_ready(tournament.brackets, match):
                return match
        return None

    def advance_one(self, tournament: Tournament) -> TournamentMatch:
        check_structure(tournament.brackets, len(tournament.fighters))
        match = self.next_pending_match(tournament)
        if match is None:
            raise NoPendingMatchError(tournament.id)

        if is_bye(tournament.brackets, match):
            assert match.fighter_a is not None
            self.console.log(f"[dim]{match.id}[/dim] bye → {match.fighter_a}")
            match.complete(match.fighter_a, Decision.BYE)
        else:
            record = self.resolve_match(tournament, match)
            decided_by = _DECISIONS[record.result.outcome]
            if record.result.is_draw:
                winner = draw_tiebreak(record, match)
            else:
                winner = record.result.winner
            match.battle_log = list(record.battle_log)
            match.summary = record.summary
            match.narration_degraded = record.narration_degraded
            match.complete(winner, decided_by)

        self._after_completion(tournament, match)
        return match

    def _after_completion(self, tournament: Tournament, match: TournamentMatch) -> None:
        assert match.winner is not None
        if match.round == tournament.total_rounds:
            tournament.winner = match.winner
            tournament.current_round = tournament.total_rounds
            tournament.set_status(TournamentStatus.COMPLETED)
            self.console.log(f"[bold green]{tournament.id}[/bold green] won by {match.winner}")
            return

        advance_winner(tournament.brackets, match)
        tournament.set_status(TournamentStatus.IN_PROGRESS)
        tournament.current_round = self._lowest_pending_round(tournament)

    def _lowest_pending_round(self, tournament: Tournament) -> int:
        for bracket in tournament.brackets:
            if any(not m.is_completed for m in bracket.matches):
                return bracket.round
        return tournament.total_rounds


__all__ = ["MatchResolver", "TournamentStateMachine", "draw_tiebreak"]
