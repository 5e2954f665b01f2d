"""Domain models for combat simulation and single-elimination tournaments.

Every record serialises to a plain JSON-compatible dictionary via
``to_dict`` and is rebuilt with ``from_dict``. Those dictionaries are the
persisted record shape; storage backends never see the dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator, Mapping

from .errors import BracketError, NotFoundError, ValidationError

DRAW = "draw"


def check_fighter_id(fighter_id: str, field: str = "fighters") -> None:
    """Reject ids that collide with the draw marker in battle results."""

    if fighter_id == DRAW:
        raise ValidationError(f"'{DRAW}' is reserved and cannot be used as a fighter id.", field=field)


class Size(str, Enum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"


class Build(str, Enum):
    THIN = "thin"
    AVERAGE = "average"
    MUSCULAR = "muscular"
    HEAVY = "heavy"


class MatchStatus(str, Enum):
    PENDING = "pending"
    # Reserved for hosts that want to display a running match; the state
    # machine never gates on it.
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TournamentStatus(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class BattleOutcome(str, Enum):
    KNOCKOUT = "knockout"
    DECISION = "decision"
    DRAW = "draw"


class Decision(str, Enum):
    """How a tournament match winner was determined."""

    BYE = "bye"
    KNOCKOUT = "knockout"
    DECISION = "decision"
    DRAW_TIEBREAK = "draw_tiebreak"


class Seeding(str, Enum):
    ORDERED = "ordered"
    SHUFFLED = "shuffled"


def _coerce_enum(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field_name} '{value}'. Expected one of: {allowed}.",
            field=field_name,
        ) from exc


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


# ---------------------------------------------------------------------------
# Combatants
# ---------------------------------------------------------------------------
@dataclass(frozen=True, kw_only=True)
class StatProfile:
    """Immutable snapshot of a combatant's numeric attributes.

    ``health`` is clamped into ``[0, max_health]`` on construction, so a
    snapshot can never hold a negative or overflowing health value.
    """

    health: int
    max_health: int
    strength: int
    agility: int
    defense: int
    luck: int
    magic: int | None = None
    ranged: int | None = None
    intelligence: int | None = None
    unique_abilities: frozenset[str] = frozenset()
    size: Size = Size.MEDIUM
    build: Build = Build.AVERAGE
    age: int = 25

    def __post_init__(self) -> None:
        if self.max_health <= 0:
            raise ValidationError("max_health must be positive.", field="max_health")
        for name in ("strength", "agility", "defense", "luck"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name} must not be negative.", field=name)
        object.__setattr__(self, "health", max(0, min(int(self.health), self.max_health)))
        object.__setattr__(self, "unique_abilities", frozenset(self.unique_abilities))
        object.__setattr__(self, "size", _coerce_enum(Size, self.size, "size"))
        object.__setattr__(self, "build", _coerce_enum(Build, self.build, "build"))

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def health_fraction(self) -> float:
        return self.health / self.max_health

    def with_health(self, health: int) -> StatProfile:
        """Return a copy with *health* replaced (and clamped)."""

        return replace(self, health=health)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "health": self.health,
            "max_health": self.max_health,
            "strength": self.strength,
            "agility": self.agility,
            "defense": self.defense,
            "luck": self.luck,
            "size": self.size.value,
            "build": self.build.value,
            "age": self.age,
        }
        for optional in ("magic", "ranged", "intelligence"):
            value = getattr(self, optional)
            if value is not None:
                payload[optional] = value
        if self.unique_abilities:
            payload["unique_abilities"] = sorted(self.unique_abilities)
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StatProfile:
        """Build a profile, accepting both snake_case and camelCase keys."""

        try:
            health = int(data["health"])
            return cls(
                health=health,
                max_health=int(_pick(data, "max_health", "maxHealth", default=health)),
                strength=int(data["strength"]),
                agility=int(data["agility"]),
                defense=int(data["defense"]),
                luck=int(data["luck"]),
                magic=_optional_int(data.get("magic")),
                ranged=_optional_int(data.get("ranged")),
                intelligence=_optional_int(data.get("intelligence")),
                unique_abilities=frozenset(
                    _pick(data, "unique_abilities", "uniqueAbilities", default=())
                ),
                size=data.get("size") or Size.MEDIUM,
                build=data.get("build") or Build.AVERAGE,
                age=int(data.get("age") or 25),
            )
        except KeyError as exc:
            raise ValidationError(f"Stat profile is missing '{exc.args[0]}'.", field=exc.args[0]) from exc
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Stat profile is malformed: {exc}") from exc


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


@dataclass(frozen=True, kw_only=True)
class Fighter:
    id: str
    name: str
    stats: StatProfile
    description: str = ""

    def with_health(self, health: int) -> Fighter:
        return replace(self, stats=self.stats.with_health(health))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Fighter:
        if "id" not in data or "stats" not in data:
            raise ValidationError("Fighter records require 'id' and 'stats'.")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            description=str(data.get("description") or ""),
            stats=StatProfile.from_dict(data["stats"]),
        )


@dataclass(frozen=True, kw_only=True)
class Arena:
    name: str
    description: str = ""
    environmental_objects: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "environmental_objects", frozenset(self.environmental_objects))

    def sorted_objects(self) -> list[str]:
        """Objects in a stable order so seeded draws are reproducible."""

        return sorted(self.environmental_objects)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "environmental_objects": self.sorted_objects(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Arena:
        return cls(
            name=str(data["name"]),
            description=str(data.get("description") or ""),
            environmental_objects=frozenset(
                _pick(data, "environmental_objects", "environmentalObjects", default=())
            ),
        )


DEFAULT_ARENA = Arena(
    name="Tournament Arena",
    description=(
        "A dynamic battleground featuring a marble throne, a broken column and "
        "sand-covered ground."
    ),
    environmental_objects=frozenset({"marble throne", "broken column", "sand-covered ground"}),
)


# ---------------------------------------------------------------------------
# Battles
# ---------------------------------------------------------------------------
@dataclass(frozen=True, kw_only=True)
class BattleRound:
    round_number: int
    attacker_id: str
    defender_id: str
    damage: int
    stats_used: Mapping[str, int]
    attacker_health: int
    defender_health: int
    random_event: str | None = None
    arena_objects_used: tuple[str, ...] = ()

    def health_of(self, fighter_id: str) -> int:
        if fighter_id == self.attacker_id:
            return self.attacker_health
        if fighter_id == self.defender_id:
            return self.defender_health
        raise NotFoundError(f"Fighter '{fighter_id}' did not take part in round {self.round_number}.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "round": self.round_number,
            "attacker": self.attacker_id,
            "defender": self.defender_id,
            "damage": self.damage,
            "stats_used": dict(self.stats_used),
            "random_event": self.random_event,
            "arena_objects_used": list(self.arena_objects_used),
            "health_after": {
                "attacker": self.attacker_health,
                "defender": self.defender_health,
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BattleRound:
        health_after = data.get("health_after") or {}
        return cls(
            round_number=int(data["round"]),
            attacker_id=str(data["attacker"]),
            defender_id=str(data["defender"]),
            damage=int(data["damage"]),
            stats_used={str(k): int(v) for k, v in (data.get("stats_used") or {}).items()},
            random_event=data.get("random_event"),
            arena_objects_used=tuple(data.get("arena_objects_used") or ()),
            attacker_health=int(health_after.get("attacker", 0)),
            defender_health=int(health_after.get("defender", 0)),
        )


@dataclass(frozen=True, kw_only=True)
class BattleResult:
    fighter_a_id: str
    fighter_b_id: str
    rounds: tuple[BattleRound, ...]
    winner: str
    outcome: BattleOutcome
    max_rounds: int

    @property
    def total_rounds(self) -> int:
        return len(self.rounds)

    @property
    def is_draw(self) -> bool:
        return self.outcome is BattleOutcome.DRAW

    def damage_dealt(self, fighter_id: str) -> int:
        return sum(r.damage for r in self.rounds if r.attacker_id == fighter_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fighter_a": self.fighter_a_id,
            "fighter_b": self.fighter_b_id,
            "winner": self.winner,
            "outcome": self.outcome.value,
            "max_rounds": self.max_rounds,
            "total_rounds": self.total_rounds,
            "rounds": [r.to_dict() for r in self.rounds],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BattleResult:
        return cls(
            fighter_a_id=str(data["fighter_a"]),
            fighter_b_id=str(data["fighter_b"]),
            rounds=tuple(BattleRound.from_dict(r) for r in data.get("rounds", [])),
            winner=str(data["winner"]),
            outcome=_coerce_enum(BattleOutcome, data["outcome"], "outcome"),
            max_rounds=int(data["max_rounds"]),
        )


@dataclass(frozen=True, kw_only=True)
class NarratedRound:
    """A battle round with the commentary attached for each side."""

    round: BattleRound
    attack_commentary: str
    defense_commentary: str
    fallback_used: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload = self.round.to_dict()
        payload["attack_commentary"] = self.attack_commentary
        payload["defense_commentary"] = self.defense_commentary
        payload["fallback_used"] = self.fallback_used
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NarratedRound:
        return cls(
            round=BattleRound.from_dict(data),
            attack_commentary=str(data.get("attack_commentary", "")),
            defense_commentary=str(data.get("defense_commentary", "")),
            fallback_used=bool(data.get("fallback_used", False)),
        )


@dataclass(frozen=True, kw_only=True)
class MatchRecord:
    """Simulation output plus generated text for one match; written once."""

    result: BattleResult
    battle_log: tuple[NarratedRound, ...]
    summary: str
    narration_degraded: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "result": self.result.to_dict(),
            "battle_log": [entry.to_dict() for entry in self.battle_log],
            "summary": self.summary,
            "narration_degraded": self.narration_degraded,
        }


# ---------------------------------------------------------------------------
# Tournaments
# ---------------------------------------------------------------------------
@dataclass(kw_only=True)
class TournamentMatch:
    id: str
    round: int
    index: int
    fighter_a: str | None = None
    fighter_b: str | None = None
    winner: str | None = None
    status: MatchStatus = MatchStatus.PENDING
    decided_by: Decision | None = None
    battle_log: list[NarratedRound] = field(default_factory=list)
    summary: str | None = None
    narration_degraded: bool = False

    @property
    def is_completed(self) -> bool:
        return self.status is MatchStatus.COMPLETED

    @property
    def entrants(self) -> list[str]:
        return [fid for fid in (self.fighter_a, self.fighter_b) if fid is not None]

    def complete(self, winner: str, decided_by: Decision) -> None:
        """Record *winner*; winner is set exactly when the match completes."""

        if self.is_completed:
            raise BracketError(f"Match '{self.id}' is already completed.")
        if winner not in self.entrants:
            raise BracketError(f"Winner '{winner}' is not an entrant of match '{self.id}'.")
        self.winner = winner
        self.decided_by = decided_by
        self.status = MatchStatus.COMPLETED

    def seat(self, fighter_id: str) -> None:
        """Place *fighter_id* in the first free slot."""

        if self.fighter_a is None:
            self.fighter_a = fighter_id
        elif self.fighter_b is None:
            self.fighter_b = fighter_id
        else:
            raise BracketError(f"Match '{self.id}' already has two fighters.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "round": self.round,
            "index": self.index,
            "fighter_a": self.fighter_a,
            "fighter_b": self.fighter_b,
            "winner": self.winner,
            "status": self.status.value,
            "decided_by": self.decided_by.value if self.decided_by else None,
            "battle_log": [entry.to_dict() for entry in self.battle_log],
            "summary": self.summary,
            "narration_degraded": self.narration_degraded,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TournamentMatch:
        decided_by = data.get("decided_by")
        match = cls(
            id=str(data["id"]),
            round=int(data["round"]),
            index=int(data["index"]),
            fighter_a=data.get("fighter_a"),
            fighter_b=data.get("fighter_b"),
            winner=data.get("winner"),
            status=_coerce_enum(MatchStatus, data.get("status", "pending"), "status"),
            decided_by=_coerce_enum(Decision, decided_by, "decided_by") if decided_by else None,
            battle_log=[NarratedRound.from_dict(e) for e in data.get("battle_log") or []],
            summary=data.get("summary"),
            narration_degraded=bool(data.get("narration_degraded", False)),
        )
        if (match.winner is not None) != match.is_completed:
            raise BracketError(f"Match '{match.id}' has inconsistent winner/status.")
        return match


@dataclass(kw_only=True)
class Bracket:
    round: int
    matches: list[TournamentMatch]

    def to_dict(self) -> dict[str, Any]:
        return {"round": self.round, "matches": [m.to_dict() for m in self.matches]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Bracket:
        return cls(
            round=int(data["round"]),
            matches=[TournamentMatch.from_dict(m) for m in data.get("matches", [])],
        )


@dataclass(kw_only=True)
class Tournament:
    id: str
    name: str
    created_at: str
    fighters: tuple[Fighter, ...]
    brackets: list[Bracket]
    total_rounds: int
    arena: Arena = DEFAULT_ARENA
    max_rounds: int = 6
    seed: int = 42
    status: TournamentStatus = TournamentStatus.SETUP
    current_round: int = 1
    winner: str | None = None

    def fighter(self, fighter_id: str) -> Fighter:
        for fighter in self.fighters:
            if fighter.id == fighter_id:
                return fighter
        raise NotFoundError(f"Fighter '{fighter_id}' is not part of tournament '{self.id}'.")

    def bracket(self, round_index: int) -> Bracket:
        if 1 <= round_index <= len(self.brackets):
            return self.brackets[round_index - 1]
        raise NotFoundError(f"Tournament '{self.id}' has no round {round_index}.")

    def match(self, match_id: str) -> TournamentMatch:
        for match in self.iter_matches():
            if match.id == match_id:
                return match
        raise NotFoundError(f"Match '{match_id}' not found in tournament '{self.id}'.")

    def iter_matches(self) -> Iterator[TournamentMatch]:
        for bracket in self.brackets:
            yield from bracket.matches

    def set_status(self, status: TournamentStatus) -> None:
        if self.status is TournamentStatus.COMPLETED and status is not TournamentStatus.COMPLETED:
            raise BracketError(f"Tournament '{self.id}' is completed and cannot move to '{status.value}'.")
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "fighters": [f.to_dict() for f in self.fighters],
            "brackets": [b.to_dict() for b in self.brackets],
            "arena": self.arena.to_dict(),
            "max_rounds": self.max_rounds,
            "seed": self.seed,
            "status": self.status.value,
            "current_round": self.current_round,
            "total_rounds": self.total_rounds,
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tournament:
        tournament = cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            created_at=str(data.get("created_at", "")),
            fighters=tuple(Fighter.from_dict(f) for f in data["fighters"]),
            brackets=[Bracket.from_dict(b) for b in data["brackets"]],
            arena=Arena.from_dict(data["arena"]) if data.get("arena") else DEFAULT_ARENA,
            max_rounds=int(data.get("max_rounds", 6)),
            seed=int(data.get("seed", 42)),
            status=_coerce_enum(TournamentStatus, data.get("status", "setup"), "status"),
            current_round=int(data.get("current_round", 1)),
            total_rounds=int(data["total_rounds"]),
            winner=data.get("winner"),
        )
        if (tournament.winner is not None) != (tournament.status is TournamentStatus.COMPLETED):
            raise BracketError(f"Tournament '{tournament.id}' has inconsistent winner/status.")
        return tournament

    def copy(self) -> Tournament:
        return Tournament.from_dict(self.to_dict())


__all__ = [
    "DRAW",
    "check_fighter_id",
    "Size",
    "Build",
    "MatchStatus",
    "TournamentStatus",
    "BattleOutcome",
    "Decision",
    "Seeding",
    "StatProfile",
    "Fighter",
    "Arena",
    "DEFAULT_ARENA",
    "BattleRound",
    "BattleResult",
    "NarratedRound",
    "MatchRecord",
    "TournamentMatch",
    "Bracket",
    "Tournament",
]
