"""Commentary gateway protocol, narrator errors and prompt helpers."""

from __future__ import annotations

from typing import Dict, List, Literal, Protocol, runtime_checkable

from brawler.domain.errors import ExternalGenerationFailure
from brawler.domain.models import BattleRound

Role = Literal["system", "user", "assistant"]
Message = Dict[str, str]


class NarratorUnavailable(ExternalGenerationFailure):
    """Raised when a narrator cannot be reached or is disabled."""


class NarratorAuthError(ExternalGenerationFailure):
    """Raised when authentication with the narration provider fails."""


class NarratorRateLimit(ExternalGenerationFailure):
    """Raised when the provider rate limits the request."""


class NarratorServerError(ExternalGenerationFailure):
    """Raised when the provider encounters an internal error."""


class NarratorValidationError(ExternalGenerationFailure):
    """Raised when the request payload or a narrator hook is invalid."""


class NarratorEmptyResponse(ExternalGenerationFailure):
    """Raised when the provider returns no usable text."""


@runtime_checkable
class CommentaryGateway(Protocol):
    """Supplies text for one side of a resolved battle round.

    Implementations may block on the network and may raise; callers
    always hold a fallback.
    """

    name: str

    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        """Return commentary for the attacking or defending side of *battle_round*."""


SYSTEM_PROMPT = (
    "You are a ringside commentator for a fantasy fighting tournament. "
    "Reply with one or two vivid sentences, present tense, no lists and no headings."
)


def make_message(role: Role, content: str) -> Message:
    return {"role": role, "content": content}


def describe_round(battle_round: BattleRound, *, is_attack_side: bool) -> str:
    """Plain-text facts about *battle_round* for a narration request."""

    lines = [
        f"Round {battle_round.round_number}.",
        f"Attacker: {battle_round.attacker_id} (health {battle_round.attacker_health}).",
        f"Defender: {battle_round.defender_id} (health {battle_round.defender_health} after the hit).",
        f"Damage dealt: {battle_round.damage}.",
    ]
    if battle_round.random_event:
        lines.append(f"Random event: {battle_round.random_event.replace('_', ' ')}.")
    if battle_round.arena_objects_used:
        lines.append(f"Arena objects involved: {', '.join(battle_round.arena_objects_used)}.")
    if battle_round.defender_health == 0:
        lines.append("The defender is knocked out.")
    side = "the attack" if is_attack_side else "the defense"
    lines.append(f"Describe {side} only.")
    return "\n".join(lines)


def build_messages(battle_round: BattleRound, *, is_attack_side: bool) -> List[Message]:
    return [
        make_message("system", SYSTEM_PROMPT),
        make_message("user", describe_round(battle_round, is_attack_side=is_attack_side)),
    ]


__all__ = [
    "Role",
    "Message",
    "CommentaryGateway",
    "NarratorUnavailable",
    "NarratorAuthError",
    "NarratorRateLimit",
    "NarratorServerError",
    "NarratorValidationError",
    "NarratorEmptyResponse",
    "SYSTEM_PROMPT",
    "make_message",
    "describe_round",
    "build_messages",
]
