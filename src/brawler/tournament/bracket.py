"""Single-elimination bracket construction and slot bookkeeping."""

from __future__ import annotations

import random
from typing import List, Sequence

from brawler.domain.errors import BracketError, ValidationError
from brawler.domain.models import Bracket, Decision, Seeding, TournamentMatch, check_fighter_id


def total_rounds(fighter_count: int) -> int:
    """``ceil(log2(n))`` computed on integers."""

    return (fighter_count - 1).bit_length()


def round_sizes(fighter_count: int) -> List[int]:
    """Match count per round: ``ceil(n/2)`` then halving (rounded up) to 1."""

    sizes = [-(-fighter_count // 2)]
    while sizes[-1] > 1:
        sizes.append(-(-sizes[-1] // 2))
    return sizes


def bye_slots(fighter_count: int) -> int:
    """Empty seats in the full power-of-two bracket for *fighter_count*."""

    return 2 ** total_rounds(fighter_count) - fighter_count


def match_id(round_index: int, match_index: int) -> str:
    return f"match-{round_index}-{match_index}"


# ---------------------------------------------------------------------------
# Tree navigation
# ---------------------------------------------------------------------------
def feeder_matches(brackets: Sequence[Bracket], match: TournamentMatch) -> List[TournamentMatch]:
    """Matches of the previous round whose winners are seated in *match*."""

    if match.round <= 1:
        return []
    previous = brackets[match.round - 2].matches
    first = 2 * match.index - 1
    return [m for m in previous if m.index in (first, first + 1)]


def next_match(brackets: Sequence[Bracket], match: TournamentMatch) -> TournamentMatch | None:
    """The match *match*'s winner moves into, or ``None`` for the final."""

    if match.round >= len(brackets):
        return None
    target = (match.index + 1) // 2
    for candidate in brackets[match.round].matches:
        if candidate.index == target:
            return candidate
    raise BracketError(f"Match '{match.id}' has no successor in round {match.round + 1}.")


def is_bye(brackets: Sequence[Bracket], match: TournamentMatch) -> bool:
    """True when *match* holds one fighter and nobody else can arrive."""

    if match.fighter_a is None or match.fighter_b is not None:
        return False
    feeders = feeder_matches(brackets, match)
    return len(feeders) <= 1 and all(f.is_completed for f in feeders)


def is_ready(brackets: Sequence[Bracket], match: TournamentMatch) -> bool:
    if match.is_completed:
        return False
    if match.fighter_a is not None and match.fighter_b is not None:
        return True
    return is_bye(brackets, match)


def advance_winner(brackets: Sequence[Bracket], match: TournamentMatch) -> TournamentMatch | None:
    """Seat the winner of a completed *match* in the next round."""

    if not match.is_completed or match.winner is None:
        raise BracketError(f"Match '{match.id}' has no winner to advance.")
    successor = next_match(brackets, match)
    if successor is None:
        return None
    if match.winner in successor.entrants:
        raise BracketError(f"Fighter '{match.winner}' is already seated in '{successor.id}'.")
    successor.seat(match.winner)
    return successor


def check_structure(brackets: Sequence[Bracket], fighter_count: int) -> None:
    """Raise BracketError when *brackets* is not a well-formed tree."""

    expected = round_sizes(fighter_count)
    if len(brackets) != len(expected):
        raise BracketError(f"Expected {len(expected)} rounds, found {len(brackets)}.")
    for round_index, (bracket, size) in enumerate(zip(brackets, expected), start=1):
        if bracket.round != round_index or len(bracket.matches) != size:
            raise BracketError(
                f"Round {round_index} should hold {size} matches, found {len(bracket.matches)}."
            )
        for match_index, match in enumerate(bracket.matches, start=1):
            if match.round != round_index or match.index != match_index:
                raise BracketError(f"Match '{match.id}' is out of position.")
            if (match.winner is not None) != match.is_completed:
                raise BracketError(f"Match '{match.id}' has inconsistent winner/status.")


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------
class BracketGenerator:
    """Seeds a roster into a single-elimination tree.

    Round one pairs fighters in roster order (or a seeded shuffle of it);
    a trailing odd fighter receives a bye that is resolved on the spot and
    seated in round two. Later rounds start empty.
    """

    def __init__(self, *, seeding: Seeding = Seeding.ORDERED, seed: int = 42) -> None:
        self.seeding = seeding
        self.seed = seed

    def generate(self, fighter_ids: Sequence[str]) -> List[Bracket]:
        roster = self._seeded(self._validate(fighter_ids))
        sizes = round_sizes(len(roster))

        brackets: List[Bracket] = []
        for round_index, size in enumerate(sizes, start=1):
            matches = [
                TournamentMatch(id=match_id(round_index, i), round=round_index, index=i)
                for i in range(1, size + 1)
            ]
            brackets.append(Bracket(round=round_index, matches=matches))

        for match in brackets[0].matches:
            pair = roster[2 * (match.index - 1): 2 * match.index]
            match.fighter_a = pair[0]
            match.fighter_b = pair[1] if len(pair) > 1 else None

        for match in brackets[0].matches:
            if match.fighter_b is None:
                match.complete(match.fighter_a, Decision.BYE)
                advance_winner(brackets, match)
        return brackets

    def _validate(self, fighter_ids: Sequence[str]) -> List[str]:
        roster = [str(fid) for fid in fighter_ids]
        if len(roster) < 2:
            raise ValidationError("A tournament needs at least two fighters.", field="fighters")
        seen: set[str] = set()
        for fid in roster:
            check_fighter_id(fid)
            if fid in seen:
                raise ValidationError(f"Fighter '{fid}' appears more than once.", field="fighters")
            seen.add(fid)
        return roster

    def _seeded(self, roster: List[str]) -> List[str]:
        if self.seeding is Seeding.SHUFFLED:
            rng = random.Random(f"{self.seed}:seeding")
            shuffled = roster.copy()
            rng.shuffle(shuffled)
            return shuffled
        return roster


__all__ = [
    "BracketGenerator",
    "advance_winner",
    "bye_slots",
    "check_structure",
    "feeder_matches",
    "is_bye",
    "is_ready",
    "match_id",
    "next_match",
    "round_sizes",
    "total_rounds",
]
