"""Round-by-round battle simulation."""

from __future__ import annotations

import random
from typing import Any

from rich.console import Console

from brawler.domain.errors import ValidationError
from brawler.domain.models import (
    DRAW,
    Arena,
    BattleOutcome,
    BattleResult,
    BattleRound,
    Fighter,
    check_fighter_id,
)

from .resolver import CombatResolver, opening_order


def _validate_inputs(fighter_a: Any, fighter_b: Any, max_rounds: Any) -> None:
    if fighter_a is None or fighter_b is None:
        raise ValidationError("Both fighters are required to simulate a battle.", field="fighter")
    for label, fighter in (("fighter_a", fighter_a), ("fighter_b", fighter_b)):
        if not isinstance(fighter, Fighter):
            raise ValidationError(f"{label} must be a Fighter, got {type(fighter).__name__}.", field=label)
        check_fighter_id(fighter.id, field=label)
        if not fighter.stats.alive:
            raise ValidationError(f"Fighter '{fighter.id}' starts the battle with no health.", field=label)
    if fighter_a.id == fighter_b.id:
        raise ValidationError(f"A fighter cannot battle itself ('{fighter_a.id}').", field="fighter_b")
    if isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds <= 0:
        raise ValidationError(f"max_rounds must be a positive integer, got {max_rounds!r}.", field="max_rounds")


def _decide(fighter_a: Fighter, fighter_b: Fighter) -> tuple[str, BattleOutcome]:
    """Pick the winner from the final health snapshots."""

    a, b = fighter_a.stats, fighter_b.stats
    if not a.alive:
        return fighter_b.id, BattleOutcome.KNOCKOUT
    if not b.alive:
        return fighter_a.id, BattleOutcome.KNOCKOUT
    # Compare health fractions without float rounding.
    lhs = a.health * b.max_health
    rhs = b.health * a.max_health
    if lhs > rhs:
        return fighter_a.id, BattleOutcome.DECISION
    if rhs > lhs:
        return fighter_b.id, BattleOutcome.DECISION
    return DRAW, BattleOutcome.DRAW


class BattleSimulator:
    """Drives CombatResolver until a knockout or the round limit.

    The opening attacker is chosen by :func:`opening_order`; roles then
    alternate every round. If the limit is reached with both sides standing
    the higher remaining health fraction wins, and equal fractions are a draw.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        *,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        self.rng = rng or random.Random()
        self.console = console or Console()
        self.verbose = verbose

    def simulate(
        self,
        fighter_a: Fighter,
        fighter_b: Fighter,
        arena: Arena,
        max_rounds: int,
    ) -> BattleResult:
        _validate_inputs(fighter_a, fighter_b, max_rounds)
        resolver = CombatResolver(self.rng)

        attacker, defender = opening_order(fighter_a, fighter_b)
        rounds: list[BattleRound] = []
        for round_number in range(1, max_rounds + 1):
            battle_round = resolver.resolve(attacker, defender, arena, round_number)
            rounds.append(battle_round)
            defender = defender.with_health(battle_round.defender_health)
            if self.verbose:
                self.console.log(
                    f"[dim]round {round_number}[/dim] {attacker.id} → {defender.id} "
                    f"dmg={battle_round.damage} hp={defender.stats.health}"
                )
            if not defender.stats.alive:
                break
            attacker, defender = defender, attacker

        final = {attacker.id: attacker, defender.id: defender}
        winner, outcome = _decide(final[fighter_a.id], final[fighter_b.id])
        return BattleResult(
            fighter_a_id=fighter_a.id,
            fighter_b_id=fighter_b.id,
            rounds=tuple(rounds),
            winner=winner,
            outcome=outcome,
            max_rounds=max_rounds,
        )


def resolve_battle(
    fighter_a: Fighter,
    fighter_b: Fighter,
    arena: Arena,
    max_rounds: int,
    *,
    seed: int | str | None = None,
    rng: random.Random | None = None,
) -> BattleResult:
    """Simulate one battle without touching any store.

    Pass either *rng* or *seed*; with neither the outcome is not reproducible.
    """

    if rng is None:
        rng = random.Random(seed)
    return BattleSimulator(rng).simulate(fighter_a, fighter_b, arena, max_rounds)


__all__ = ["BattleSimulator", "resolve_battle"]
