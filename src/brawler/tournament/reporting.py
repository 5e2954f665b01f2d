"""Progress and standings views over a tournament record."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List

from brawler.domain.models import Decision, Tournament

from .bracket import is_ready


@dataclass(frozen=True)
class TournamentProgress:
    current_round: int
    total_rounds: int
    completed_matches: int
    total_matches: int
    next_match_id: str | None

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class Standing:
    fighter_id: str
    name: str
    wins: int = 0
    losses: int = 0
    rounds_advanced: int = 0
    eliminated: bool = False
    damage_dealt: int = 0
    damage_taken: int = 0

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def tournament_progress(tournament: Tournament) -> TournamentProgress:
    matches = list(tournament.iter_matches())
    next_id = None
    if tournament.winner is None:
        next_id = next((m.id for m in matches if is_ready(tournament.brackets, m)), None)
    return TournamentProgress(
        current_round=tournament.current_round,
        total_rounds=tournament.total_rounds,
        completed_matches=sum(1 for m in matches if m.is_completed),
        total_matches=len(matches),
        next_match_id=next_id,
    )


def tournament_standings(tournament: Tournament) -> List[Standing]:
    """Per-fighter record, best first.

    A bye counts as advancing a round but not as a win.
    """

    table = {f.id: Standing(fighter_id=f.id, name=f.name) for f in tournament.fighters}
    for match in tournament.iter_matches():
        if not match.is_completed or match.winner is None:
            continue
        table[match.winner].rounds_advanced += 1
        if match.decided_by is Decision.BYE:
            continue
        table[match.winner].wins += 1
        for loser in match.entrants:
            if loser != match.winner:
                table[loser].losses += 1
                table[loser].eliminated = True
        for entry in match.battle_log:
            battle_round = entry.round
            table[battle_round.attacker_id].damage_dealt += battle_round.damage
            table[battle_round.defender_id].damage_taken += battle_round.damage

    return sorted(
        table.values(),
        key=lambda s: (-s.rounds_advanced, -s.wins, s.eliminated, s.fighter_id),
    )


__all__ = ["Standing", "TournamentProgress", "tournament_progress", "tournament_standings"]
