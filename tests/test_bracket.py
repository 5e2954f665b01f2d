"""Tests for bracket construction."""

from __future__ import annotations

import math

import pytest

from brawler.domain.errors import BracketError, ValidationError
from brawler.domain.models import Decision, MatchStatus, Seeding
from brawler.tournament.bracket import (
    BracketGenerator,
    bye_slots,
    check_structure,
    feeder_matches,
    is_bye,
    next_match,
    round_sizes,
    total_rounds,
)


def _ids(count: int) -> list[str]:
    return [f"f{i}" for i in range(1, count + 1)]


@pytest.mark.parametrize("count", range(2, 34))
def test_bracket_shape(count: int) -> None:
    brackets = BracketGenerator().generate(_ids(count))

    expected_rounds = math.ceil(math.log2(count))
    assert total_rounds(count) == expected_rounds
    assert len(brackets) == expected_rounds
    assert bye_slots(count) == 2**expected_rounds - count

    assert len(brackets[0].matches) == math.ceil(count / 2)
    for previous, current in zip(brackets, brackets[1:]):
        assert len(current.matches) == math.ceil(len(previous.matches) / 2)
    assert len(brackets[-1].matches) == 1
    assert [len(b.matches) for b in brackets] == round_sizes(count)

    byes = [m for m in brackets[0].matches if m.decided_by is Decision.BYE]
    assert len(byes) == count % 2
    seated = [fid for m in brackets[0].matches for fid in m.entrants]
    assert sorted(seated) == sorted(_ids(count))
    check_structure(brackets, count)


def test_five_fighters_get_one_round_one_bye() -> None:
    brackets = BracketGenerator().generate(_ids(5))
    assert round_sizes(5) == [3, 2, 1]
    assert bye_slots(5) == 3

    first_round = brackets[0].matches
    assert [(m.fighter_a, m.fighter_b) for m in first_round] == [("f1", "f2"), ("f3", "f4"), ("f5", None)]
    bye = first_round[2]
    assert bye.status is MatchStatus.COMPLETED
    assert bye.winner == "f5"
    assert bye.decided_by is Decision.BYE

    second_round = brackets[1].matches
    assert second_round[1].fighter_a == "f5"
    assert second_round[1].fighter_b is None
    assert is_bye(brackets, second_round[1])
    assert not is_bye(brackets, second_round[0])
    assert all(m.status is MatchStatus.PENDING for m in second_round)
    assert brackets[2].matches[0].entrants == []


def test_three_fighters_seat_the_bye_in_the_final() -> None:
    brackets = BracketGenerator().generate(_ids(3))
    final = brackets[1].matches[0]
    assert final.fighter_a == "f3"
    assert final.fighter_b is None
    # The other semi-final has not been played, so this is not a bye yet.
    assert not is_bye(brackets, final)


def test_navigation_between_rounds() -> None:
    brackets = BracketGenerator().generate(_ids(8))
    quarter = brackets[0].matches
    semi = brackets[1].matches
    assert [m.id for m in feeder_matches(brackets, semi[1])] == [quarter[2].id, quarter[3].id]
    assert next_match(brackets, quarter[3]) is semi[1]
    assert next_match(brackets, brackets[2].matches[0]) is None
    assert feeder_matches(brackets, quarter[0]) == []


def test_shuffled_seeding_is_reproducible() -> None:
    roster = _ids(8)
    first = BracketGenerator(seeding=Seeding.SHUFFLED, seed=7).generate(roster)
    second = BracketGenerator(seeding=Seeding.SHUFFLED, seed=7).generate(roster)
    pairs = [(m.fighter_a, m.fighter_b) for m in first[0].matches]
    assert pairs == [(m.fighter_a, m.fighter_b) for m in second[0].matches]
    assert sorted(fid for m in first[0].matches for fid in m.entrants) == sorted(roster)
    assert roster == _ids(8)


@pytest.mark.parametrize("roster", [[], ["solo"], ["a", "b", "a"], ["draw", "b"]])
def test_invalid_rosters_are_rejected(roster: list[str]) -> None:
    with pytest.raises(ValidationError):
        BracketGenerator().generate(roster)


def test_check_structure_detects_damage() -> None:
    brackets = BracketGenerator().generate(_ids(4))
    brackets[1].matches.clear()
    with pytest.raises(BracketError):
        check_structure(brackets, 4)

    brackets = BracketGenerator().generate(_ids(4))
    brackets[0].matches[0].winner = "f1"
    with pytest.raises(BracketError):
        check_structure(brackets, 4)
