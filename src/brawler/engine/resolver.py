"""Resolution of a single attack exchange between two fighters."""

from __future__ import annotations

import random
from typing import Tuple

from brawler.domain.errors import ValidationError
from brawler.domain.models import Arena, BattleRound, Fighter, StatProfile

# =========================
# TUNING
# =========================

LUCKY_SWING_CAP = 0.5
LUCKY_BASE_BONUS = 0.1
LUCKY_SPREAD = 0.15
NORMAL_SWING = (0.85, 1.1)

DEFENSE_MITIGATION = 0.5
MIN_DAMAGE = 1

EVENT_BASE_CHANCE = 0.05
EVENT_PER_OBJECT = 0.03
EVENT_OBJECT_CAP = 0.15
EVENT_STAT_DIVISOR = 1000
EVENT_CHANCE_CAP = 0.5
EVENT_BONUS = 1.25
EVENT_PENALTY = 0.75

RandomEvent = Tuple[str, Tuple[str, ...], float]


def opening_order(fighter_a: Fighter, fighter_b: Fighter) -> tuple[Fighter, Fighter]:
    """Return ``(first_attacker, first_defender)``.

    Higher agility strikes first, ties go to higher luck, and a full tie
    keeps input order.
    """

    a, b = fighter_a.stats, fighter_b.stats
    if (b.agility, b.luck) > (a.agility, a.luck):
        return fighter_b, fighter_a
    return fighter_a, fighter_b


class CombatResolver:
    """Computes one BattleRound from two fighters' current stat snapshots.

    All randomness is drawn from the injected generator in a fixed order,
    so a seeded generator reproduces every round exactly. Inputs are never
    mutated; the new health values travel on the returned round.
    """

    def __init__(self, rng: random.Random) -> None:
        self.rng = rng

    def resolve(
        self,
        attacker: Fighter,
        defender: Fighter,
        arena: Arena,
        round_number: int,
    ) -> BattleRound:
        if round_number < 1:
            raise ValidationError("round_number must be 1 or greater.", field="round_number")

        atk = attacker.stats
        dfn = defender.stats

        multiplier = self._luck_multiplier(atk.luck)
        raw = atk.strength * multiplier - dfn.defense * DEFENSE_MITIGATION
        damage = max(MIN_DAMAGE, round(raw))

        event = self._random_event(atk, dfn, arena)
        random_event: str | None = None
        objects_used: tuple[str, ...] = ()
        if event is not None:
            random_event, objects_used, factor = event
            damage = max(MIN_DAMAGE, round(damage * factor))

        applied = min(damage, dfn.health)
        return BattleRound(
            round_number=round_number,
            attacker_id=attacker.id,
            defender_id=defender.id,
            damage=applied,
            stats_used={
                "attacker_strength": atk.strength,
                "attacker_agility": atk.agility,
                "attacker_luck": atk.luck,
                "defender_defense": dfn.defense,
                "defender_agility": dfn.agility,
            },
            random_event=random_event,
            arena_objects_used=objects_used,
            attacker_health=atk.health,
            defender_health=dfn.health - applied,
        )

    # ------------------------------------------------------------------
    def _luck_multiplier(self, luck: int) -> float:
        lucky_chance = min(LUCKY_SWING_CAP, luck / 100)
        if self.rng.random() < lucky_chance:
            return 1.0 + LUCKY_BASE_BONUS + self.rng.uniform(0.0, LUCKY_SPREAD + luck / 100)
        return self.rng.uniform(*NORMAL_SWING)

    def _random_event(self, atk: StatProfile, dfn: StatProfile, arena: Arena) -> RandomEvent | None:
        objects = arena.sorted_objects()
        chance = (
            EVENT_BASE_CHANCE
            + min(EVENT_OBJECT_CAP, EVENT_PER_OBJECT * len(objects))
            + (atk.agility + atk.luck) / EVENT_STAT_DIVISOR
        )
        if self.rng.random() >= min(EVENT_CHANCE_CAP, chance):
            return None

        luck_total = atk.luck + dfn.luck
        bonus_chance = atk.luck / luck_total if luck_total else 0.5
        favourable = self.rng.random() < bonus_chance
        factor = EVENT_BONUS if favourable else EVENT_PENALTY

        if objects:
            used = (self.rng.choice(objects),)
            tag = "environmental_advantage" if favourable else "environmental_mishap"
        else:
            used = ()
            tag = "lucky_break" if favourable else "stumble"
        return tag, used, factor


__all__ = ["CombatResolver", "opening_order", "MIN_DAMAGE"]
