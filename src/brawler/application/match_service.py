"""Application service responsible for resolving matches."""

from __future__ import annotations

import random
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from rich.console import Console

from brawler.domain.errors import BracketError
from brawler.domain.models import (
    Arena,
    BattleRound,
    Fighter,
    MatchRecord,
    NarratedRound,
    Tournament,
    TournamentMatch,
)
from brawler.engine.simulator import BattleSimulator
from brawler.infrastructure.narrators.base import CommentaryGateway
from brawler.infrastructure.narrators.static import (
    StaticNarrator,
    fallback_commentary,
    summarise_result,
)

from .match_cache import MatchCache

Side = Tuple[int, bool]


@dataclass(frozen=True)
class MatchContext:
    tournament_id: str
    match_id: str
    fighter_a: Fighter
    fighter_b: Fighter
    arena: Arena
    max_rounds: int
    seed: str

    @classmethod
    def for_match(cls, tournament: Tournament, match: TournamentMatch) -> MatchContext:
        if match.fighter_a is None or match.fighter_b is None:
            raise BracketError(f"Match '{match.id}' is missing a fighter.")
        return cls(
            tournament_id=tournament.id,
            match_id=match.id,
            fighter_a=tournament.fighter(match.fighter_a),
            fighter_b=tournament.fighter(match.fighter_b),
            arena=tournament.arena,
            max_rounds=tournament.max_rounds,
            seed=f"{tournament.seed}:match:{match.id}",
        )


class MatchService:
    """Simulates matches and attaches narration to every round.

    Narration requests for all rounds and both sides run concurrently on a
    small thread pool under one deadline per match. Any narrator failure or
    a missed deadline yields the static text for that side; the battle
    result itself never depends on narration.
    """

    def __init__(
        self,
        *,
        narrator: CommentaryGateway | None = None,
        cache: MatchCache | None = None,
        console: Console | None = None,
        narration_timeout_s: float = 30.0,
        narration_workers: int = 4,
    ) -> None:
        self.narrator = narrator or StaticNarrator()
        self.cache = cache if cache is not None else MatchCache()
        self.console = console or Console()
        self.narration_timeout_s = narration_timeout_s
        self.narration_workers = max(1, narration_workers)

    def resolve(self, tournament: Tournament, match: TournamentMatch) -> MatchRecord:
        """Return the record for *match*, computing it at most once."""

        context = MatchContext.for_match(tournament, match)
        return self.cache.get_or_compute(
            context.tournament_id,
            context.match_id,
            lambda: self.play(context),
        )

    def play(self, context: MatchContext) -> MatchRecord:
        self.console.log(
            f"[bold]{context.match_id}[/bold] {context.fighter_a.id} vs {context.fighter_b.id}"
        )
        start_time = time.monotonic()
        simulator = BattleSimulator(random.Random(context.seed), console=self.console)
        result = simulator.simulate(
            context.fighter_a,
            context.fighter_b,
            context.arena,
            context.max_rounds,
        )
        battle_log = self.narrate(result.rounds)
        degraded = any(entry.fallback_used for entry in battle_log)
        elapsed = time.monotonic() - start_time
        self.console.log(
            f"[bold]{context.match_id}[/bold] winner={result.winner} "
            f"outcome={result.outcome.value} rounds={result.total_rounds} ({elapsed:.2f}s)"
        )
        return MatchRecord(
            result=result,
            battle_log=tuple(battle_log),
            summary=summarise_result(result),
            narration_degraded=degraded,
        )

    # ------------------------------------------------------------------
    def narrate(self, rounds: Sequence[BattleRound]) -> List[NarratedRound]:
        """Fan narration out per round and side; reassemble in round order."""

        if not rounds:
            return []

        texts: Dict[Side, str] = {}
        failed: set[int] = set()
        executor = ThreadPoolExecutor(
            max_workers=self.narration_workers,
            thread_name_prefix="narrator",
        )
        try:
            futures: Dict[Future[str], Side] = {}
            for index, battle_round in enumerate(rounds):
                for is_attack_side in (True, False):
                    future = executor.submit(
                        self.narrator.narrate, battle_round, is_attack_side=is_attack_side
                    )
                    futures[future] = (index, is_attack_side)

            done, not_done = wait(futures, timeout=self.narration_timeout_s)
            for future in done:
                index, is_attack_side = futures[future]
                try:
                    text = future.result()
                except Exception as exc:
                    self._warn(rounds[index], f"{type(exc).__name__}: {exc}")
                    failed.add(index)
                    continue
                if not isinstance(text, str) or not text.strip():
                    self._warn(rounds[index], "empty narration")
                    failed.add(index)
                    continue
                texts[(index, is_attack_side)] = text.strip()
            for future in not_done:
                index, _ = futures[future]
                self._warn(rounds[index], f"timed out after {self.narration_timeout_s:.1f}s")
                failed.add(index)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        narrated: List[NarratedRound] = []
        for index, battle_round in enumerate(rounds):
            attack = texts.get((index, True)) or fallback_commentary(battle_round, is_attack_side=True)
            defense = texts.get((index, False)) or fallback_commentary(battle_round, is_attack_side=False)
            narrated.append(
                NarratedRound(
                    round=battle_round,
                    attack_commentary=attack,
                    defense_commentary=defense,
                    fallback_used=index in failed,
                )
            )
        return narrated

    def _warn(self, battle_round: BattleRound, reason: str) -> None:
        self.console.print(
            f"[yellow]Narration fallback for round {battle_round.round_number} "
            f"({battle_round.attacker_id} → {battle_round.defender_id}): {reason}[/yellow]"
        )


__all__ = ["MatchContext", "MatchService"]
