"""Tests for tournament status transitions."""

from __future__ import annotations

from typing import List

import pytest
from rich.console import Console

from brawler.domain.errors import BracketError, NoPendingMatchError
from brawler.domain.models import (
    BattleOutcome,
    BattleResult,
    BattleRound,
    Decision,
    Fighter,
    MatchRecord,
    MatchStatus,
    StatProfile,
    Tournament,
    TournamentMatch,
    TournamentStatus,
)
from brawler.tournament.bracket import BracketGenerator, total_rounds
from brawler.tournament.state_machine import TournamentStateMachine, draw_tiebreak


def _tournament(count: int) -> Tournament:
    fighters = tuple(
        Fighter(
            id=f"f{i}",
            name=f"Fighter {i}",
            stats=StatProfile(health=100, max_health=100, strength=10, agility=10, defense=5, luck=5),
        )
        for i in range(1, count + 1)
    )
    return Tournament(
        id="cup",
        name="Cup",
        created_at="2025-01-01T00:00:00+00:00",
        fighters=fighters,
        brackets=BracketGenerator().generate([f.id for f in fighters]),
        total_rounds=total_rounds(count),
    )


def _round(number: int, attacker: str, defender: str, damage: int) -> BattleRound:
    return BattleRound(
        round_number=number,
        attacker_id=attacker,
        defender_id=defender,
        damage=damage,
        stats_used={},
        attacker_health=100,
        defender_health=100 - damage,
    )


def _record(match: TournamentMatch, *, winner: str | None = None, outcome=BattleOutcome.KNOCKOUT, rounds=()) -> MatchRecord:
    result = BattleResult(
        fighter_a_id=match.fighter_a,
        fighter_b_id=match.fighter_b,
        rounds=tuple(rounds),
        winner=winner or match.fighter_a,
        outcome=outcome,
        max_rounds=6,
    )
    return MatchRecord(result=result, battle_log=(), summary=f"{match.id} done", narration_degraded=False)


class RecordingResolver:
    """Fighter A always wins; remembers which matches were played."""

    def __init__(self) -> None:
        self.played: List[str] = []

    def __call__(self, tournament: Tournament, match: TournamentMatch) -> MatchRecord:
        self.played.append(match.id)
        return _record(match)


def _machine(resolver) -> TournamentStateMachine:
    return TournamentStateMachine(resolver, console=Console(quiet=True))


def test_five_fighter_tournament_runs_in_bracket_order() -> None:
    tournament = _tournament(5)
    resolver = RecordingResolver()
    machine = _machine(resolver)
    assert tournament.status is TournamentStatus.SETUP

    resolved = []
    statuses = [tournament.status]
    while True:
        try:
            match = machine.advance_one(tournament)
        except NoPendingMatchError:
            break
        resolved.append((match.id, match.decided_by))
        statuses.append(tournament.status)

    assert resolved == [
        ("match-1-1", Decision.KNOCKOUT),
        ("match-1-2", Decision.KNOCKOUT),
        ("match-2-1", Decision.KNOCKOUT),
        ("match-2-2", Decision.BYE),
        ("match-3-1", Decision.KNOCKOUT),
    ]
    assert resolver.played == ["match-1-1", "match-1-2", "match-2-1", "match-3-1"]
    assert tournament.status is TournamentStatus.COMPLETED
    assert tournament.winner == "f1"
    assert tournament.match("match-3-1").entrants == ["f1", "f5"]
    assert all(m.status is MatchStatus.COMPLETED for m in tournament.iter_matches())

    order = [TournamentStatus.SETUP, TournamentStatus.IN_PROGRESS, TournamentStatus.COMPLETED]
    ranks = [order.index(status) for status in statuses]
    assert ranks == sorted(ranks)


def test_each_advance_resolves_exactly_one_match() -> None:
    tournament = _tournament(4)
    machine = _machine(RecordingResolver())
    machine.advance_one(tournament)
    completed = [m.id for m in tournament.iter_matches() if m.is_completed]
    assert completed == ["match-1-1"]
    assert tournament.status is TournamentStatus.IN_PROGRESS
    assert tournament.current_round == 1
    assert tournament.match("match-2-1").fighter_a == "f1"

    machine.advance_one(tournament)
    assert tournament.current_round == 2
    assert tournament.winner is None


def test_match_output_is_copied_onto_the_match() -> None:
    tournament = _tournament(2)
    machine = _machine(RecordingResolver())
    match = machine.advance_one(tournament)
    assert match.summary == "match-1-1 done"
    assert match.winner == "f1"
    assert tournament.winner == "f1"
    assert tournament.status is TournamentStatus.COMPLETED


def test_completed_tournament_has_no_pending_match() -> None:
    tournament = _tournament(2)
    machine = _machine(RecordingResolver())
    machine.advance_one(tournament)
    assert machine.next_pending_match(tournament) is None
    with pytest.raises(NoPendingMatchError) as excinfo:
        machine.advance_one(tournament)
    assert excinfo.value.tournament_id == "cup"
    with pytest.raises(BracketError):
        tournament.set_status(TournamentStatus.IN_PROGRESS)


def test_drawn_match_advances_the_bigger_hitter() -> None:
    tournament = _tournament(2)
    rounds = [_round(1, "f1", "f2", 3), _round(2, "f2", "f1", 7)]

    def resolver(t: Tournament, match: TournamentMatch) -> MatchRecord:
        return _record(match, winner="draw", outcome=BattleOutcome.DRAW, rounds=rounds)

    match = _machine(resolver).advance_one(tournament)
    assert match.winner == "f2"
    assert match.decided_by is Decision.DRAW_TIEBREAK
    assert tournament.winner == "f2"


def test_draw_tiebreak_falls_back_to_fighter_a() -> None:
    match = TournamentMatch(id="match-1-1", round=1, index=1, fighter_a="f1", fighter_b="f2")
    even = _record(
        match,
        winner="draw",
        outcome=BattleOutcome.DRAW,
        rounds=[_round(1, "f1", "f2", 4), _round(2, "f2", "f1", 4)],
    )
    assert draw_tiebreak(even, match) == "f1"


def test_corrupted_bracket_is_rejected_before_advancing() -> None:
    tournament = _tournament(4)
    tournament.brackets[1].matches.append(TournamentMatch(id="match-2-2", round=2, index=2))
    resolver = RecordingResolver()
    with pytest.raises(BracketError):
        _machine(resolver).advance_one(tournament)
    assert resolver.played == []


def test_knockout_winner_advances_even_when_outdamaged() -> None:
    tournament = _tournament(2)
    # f1 deals far more damage but is the one knocked out.
    rounds = [_round(1, "f1", "f2", 90), _round(2, "f2", "f1", 20)]

    def resolver(t: Tournament, match: TournamentMatch) -> MatchRecord:
        return _record(match, winner="f2", outcome=BattleOutcome.KNOCKOUT, rounds=rounds)

    match = _machine(resolver).advance_one(tournament)
    assert match.winner == "f2"
    assert match.decided_by is Decision.KNOCKOUT
    assert tournament.winner == "f2"
