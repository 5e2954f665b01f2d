"""Deterministic narration used offline and whenever a narrator fails."""

from __future__ import annotations

from dataclasses import dataclass

from brawler.domain.models import BattleOutcome, BattleResult, BattleRound

_EVENT_PHRASES = {
    "environmental_advantage": "uses the {obj} to their advantage",
    "environmental_mishap": "is hampered by the {obj}",
    "lucky_break": "catches a lucky break",
    "stumble": "stumbles mid-swing",
}


def fallback_commentary(battle_round: BattleRound, *, is_attack_side: bool) -> str:
    """Static text for one side of *battle_round*; identical input gives identical text."""

    attacker = battle_round.attacker_id
    defender = battle_round.defender_id
    if is_attack_side:
        text = f"{attacker} attacks {defender} for {battle_round.damage} damage!"
        if battle_round.random_event:
            obj = battle_round.arena_objects_used[0] if battle_round.arena_objects_used else "arena"
            phrase = _EVENT_PHRASES.get(battle_round.random_event, "triggers {obj} chaos")
            text = f"{text} {attacker} {phrase.format(obj=obj)}."
        return text
    if battle_round.defender_health == 0:
        return f"{defender} goes down and cannot continue!"
    return f"{defender} absorbs the blow and stays up with {battle_round.defender_health} health."


def summarise_result(result: BattleResult) -> str:
    """One-line match summary stored alongside the battle log."""

    rounds = result.total_rounds
    plural = "round" if rounds == 1 else "rounds"
    if result.is_draw:
        return (
            f"{result.fighter_a_id} and {result.fighter_b_id} are level after {rounds} {plural}; "
            "the judges could not separate them."
        )
    loser = result.fighter_b_id if result.winner == result.fighter_a_id else result.fighter_a_id
    how = "by knockout" if result.outcome is BattleOutcome.KNOCKOUT else "on the judges' decision"
    return f"{result.winner} defeats {loser} {how} after {rounds} {plural}."


@dataclass(frozen=True)
class StaticNarrator:
    """Narrator that never leaves the process."""

    name: str = "static"

    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        return fallback_commentary(battle_round, is_attack_side=is_attack_side)


__all__ = ["StaticNarrator", "fallback_commentary", "summarise_result"]
