"""Domain models representing configuration artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .models import Arena, Fighter, Seeding, StatProfile


class ConfigError(Exception):
    """Raised when configuration files fail validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


@dataclass(frozen=True, kw_only=True)
class FighterCfg:
    path: Path = field(repr=False, compare=False)
    name: str
    display_name: str
    stats: StatProfile
    description: str = ""
    notes: str | None = None

    def to_fighter(self) -> Fighter:
        return Fighter(
            id=self.name,
            name=self.display_name,
            stats=self.stats,
            description=self.description,
        )


@dataclass(frozen=True, kw_only=True)
class ArenaCfg:
    path: Path = field(repr=False, compare=False)
    name: str
    description: str
    environmental_objects: list[str]
    notes: str | None = None

    def to_arena(self) -> Arena:
        return Arena(
            name=self.name,
            description=self.description,
            environmental_objects=frozenset(self.environmental_objects),
        )


@dataclass(frozen=True, kw_only=True)
class NarratorCfg:
    path: Path = field(repr=False, compare=False)
    name: str
    adapter: str
    model_id: str
    runtime: Mapping[str, Any] | None = None
    preprocess: str | None = None
    postprocess: str | None = None
    notes: str | None = None


@dataclass(frozen=True, kw_only=True)
class TournamentSettings:
    max_rounds: int = 6
    seeding: Seeding = Seeding.ORDERED
    output_dir: str = "results"
    narration_timeout_s: float = 30.0
    narration_workers: int = 4
    seed: int = 42


@dataclass(frozen=True, kw_only=True)
class TournamentCfg:
    path: Path = field(repr=False, compare=False)
    name: str
    description: str
    fighters: list[str]
    arena: str | None
    narrator: str | None
    settings: TournamentSettings
    notes: str | None = None


__all__ = [
    "ConfigError",
    "FighterCfg",
    "ArenaCfg",
    "NarratorCfg",
    "TournamentSettings",
    "TournamentCfg",
]
