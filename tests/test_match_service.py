"""Tests for match resolution and narration fan-out."""

from __future__ import annotations

import threading
import time

from rich.console import Console

from brawler.application.match_service import MatchContext, MatchService
from brawler.domain.models import DEFAULT_ARENA, BattleRound, Fighter, StatProfile, Tournament
from brawler.infrastructure.narrators.base import CommentaryGateway, NarratorServerError
from brawler.infrastructure.narrators.static import StaticNarrator, fallback_commentary
from brawler.tournament.bracket import BracketGenerator


def _durable(fid: str) -> Fighter:
    return Fighter(
        id=fid,
        name=fid.title(),
        stats=StatProfile(health=1000, max_health=1000, strength=1, agility=10, defense=10, luck=0),
    )


def _context(max_rounds: int = 4) -> MatchContext:
    return MatchContext(
        tournament_id="cup",
        match_id="match-1-1",
        fighter_a=_durable("left"),
        fighter_b=_durable("right"),
        arena=DEFAULT_ARENA,
        max_rounds=max_rounds,
        seed="42:match:match-1-1",
    )


def _service(narrator: CommentaryGateway, **kwargs) -> MatchService:
    return MatchService(narrator=narrator, console=Console(quiet=True), **kwargs)


class EchoNarrator:
    name = "echo"

    def __init__(self, delay_for=None) -> None:
        self.delay_for = delay_for or (lambda battle_round: 0.0)
        self.calls = 0
        self._lock = threading.Lock()

    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        with self._lock:
            self.calls += 1
        time.sleep(self.delay_for(battle_round))
        side = "attack" if is_attack_side else "defense"
        return f"round {battle_round.round_number} {side}"


class FailingNarrator:
    name = "failing"

    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        if battle_round.round_number == 1 and is_attack_side:
            raise NarratorServerError("upstream 503")
        return "  live commentary  "


class BlankNarrator:
    name = "blank"

    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        return "   "


def test_static_narration_is_never_degraded() -> None:
    record = _service(StaticNarrator()).play(_context())
    assert record.result.total_rounds == 4
    assert not record.narration_degraded
    assert [entry.round for entry in record.battle_log] == list(record.result.rounds)
    assert record.summary == (
        "left and right are level after 4 rounds; the judges could not separate them."
    )


def test_narration_keeps_round_order() -> None:
    # Later rounds answer first.
    narrator = EchoNarrator(delay_for=lambda battle_round: (5 - battle_round.round_number) * 0.02)
    record = _service(narrator, narration_workers=8).play(_context())
    assert [entry.round.round_number for entry in record.battle_log] == [1, 2, 3, 4]
    for entry in record.battle_log:
        number = entry.round.round_number
        assert entry.attack_commentary == f"round {number} attack"
        assert entry.defense_commentary == f"round {number} defense"
    assert narrator.calls == 8
    assert not record.narration_degraded


def test_failed_side_falls_back_to_static_text() -> None:
    record = _service(FailingNarrator()).play(_context())
    first = record.battle_log[0]
    assert first.fallback_used
    assert first.attack_commentary == fallback_commentary(first.round, is_attack_side=True)
    assert first.defense_commentary == "live commentary"
    assert not any(entry.fallback_used for entry in record.battle_log[1:])
    assert record.narration_degraded


def test_blank_narration_counts_as_failure() -> None:
    record = _service(BlankNarrator()).play(_context(max_rounds=2))
    assert record.narration_degraded
    assert all(entry.fallback_used for entry in record.battle_log)
    assert record.battle_log[0].defense_commentary.startswith("right absorbs the blow")


def test_slow_narrator_hits_the_deadline() -> None:
    release = threading.Event()

    class StuckNarrator:
        name = "stuck"

        def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
            if battle_round.round_number == 2 and is_attack_side:
                release.wait(5)
            return "quick take"

    try:
        started = time.monotonic()
        record = _service(StuckNarrator(), narration_timeout_s=0.3).play(_context())
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 3
    assert record.narration_degraded
    flags = [entry.fallback_used for entry in record.battle_log]
    assert flags == [False, True, False, False]
    assert record.battle_log[1].defense_commentary == "quick take"


def test_narration_does_not_change_the_battle() -> None:
    static = _service(StaticNarrator()).play(_context())
    failing = _service(FailingNarrator()).play(_context())
    assert static.result == failing.result


def test_resolve_replays_cached_record() -> None:
    fighters = (_durable("left"), _durable("right"))
    tournament = Tournament(
        id="cup",
        name="Cup",
        created_at="",
        fighters=fighters,
        brackets=BracketGenerator().generate(["left", "right"]),
        total_rounds=1,
        max_rounds=4,
    )
    narrator = EchoNarrator()
    service = _service(narrator)
    match = tournament.match("match-1-1")

    first = service.resolve(tournament, match)
    second = service.resolve(tournament, match)
    assert first is second
    assert narrator.calls == 8
    assert ("cup", "match-1-1") in service.cache
