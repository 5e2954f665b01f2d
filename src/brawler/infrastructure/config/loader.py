"""Config loading utilities coordinating schema validation and parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml

from brawler.detectors.heuristics import did_you_mean
from brawler.domain.config import (
    ArenaCfg,
    ConfigError,
    FighterCfg,
    NarratorCfg,
    TournamentCfg,
    TournamentSettings,
)
from brawler.domain.errors import ValidationError
from brawler.domain.models import Seeding, StatProfile

from .validators import build_validator, format_error, validate_configs, validate_with_schema

__all__ = ["ConfigSet", "collect_configs", "load_configs", "load_tournament", "validate_configs"]


@dataclass(frozen=True)
class ConfigSet:
    fighters: Dict[str, FighterCfg] = field(default_factory=dict)
    arenas: Dict[str, ArenaCfg] = field(default_factory=dict)
    narrators: Dict[str, NarratorCfg] = field(default_factory=dict)
    tournaments: Dict[str, TournamentCfg] = field(default_factory=dict)

    def fighter(self, name: str) -> FighterCfg:
        try:
            return self.fighters[name]
        except KeyError as exc:
            raise ConfigError(f"Fighter '{name}' is not defined.{did_you_mean(name, self.fighters)}") from exc

    def arena(self, name: str) -> ArenaCfg:
        try:
            return self.arenas[name]
        except KeyError as exc:
            raise ConfigError(f"Arena '{name}' is not defined.{did_you_mean(name, self.arenas)}") from exc

    def narrator(self, name: str) -> NarratorCfg:
        try:
            return self.narrators[name]
        except KeyError as exc:
            raise ConfigError(f"Narrator '{name}' is not defined.{did_you_mean(name, self.narrators)}") from exc


def _read_yaml(path: Path) -> Mapping[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem error propagation
        raise ConfigError(format_error(path, "<file>", str(exc))) from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(format_error(path, "<root>", f"Invalid YAML: {exc}")) from exc
    if not isinstance(data, Mapping):
        raise ConfigError(format_error(path, "<root>", "Top-level document must be a mapping."))
    return data


def _ensure_unique(name: str, seen: Dict[str, Path], path: Path, kind: str) -> None:
    existing = seen.get(name)
    if existing is not None:
        raise ConfigError(
            format_error(
                path,
                "name",
                f"Duplicate {kind} identifier '{name}' already defined in {existing}",
            )
        )
    seen[name] = path


def _build_fighter(data: Mapping[str, Any], path: Path) -> FighterCfg:
    raw_stats = data["stats"]
    max_health = raw_stats.get("max_health")
    if max_health is not None and raw_stats["health"] > max_health:
        raise ConfigError(format_error(path, "stats/health", "health must not exceed max_health."))
    try:
        stats = StatProfile.from_dict(raw_stats)
    except ValidationError as exc:
        raise ConfigError(format_error(path, f"stats/{exc.field or ''}".rstrip("/"), str(exc))) from exc
    return FighterCfg(
        path=path,
        name=str(data["name"]),
        display_name=str(data["display_name"]),
        stats=stats,
        description=str(data.get("description") or ""),
        notes=data.get("notes"),
    )


def _build_arena(data: Mapping[str, Any], path: Path) -> ArenaCfg:
    return ArenaCfg(
        path=path,
        name=str(data["name"]),
        description=str(data["description"]),
        environmental_objects=[str(obj) for obj in data.get("environmental_objects") or []],
        notes=data.get("notes"),
    )


def _build_narrator(data: Mapping[str, Any], path: Path) -> NarratorCfg:
    runtime = data.get("runtime")
    if runtime is not None and not isinstance(runtime, Mapping):
        raise ConfigError(format_error(path, "runtime", "Runtime must be a mapping when provided."))
    return NarratorCfg(
        path=path,
        name=str(data["name"]),
        adapter=str(data["adapter"]),
        model_id=str(data["model_id"]),
        runtime=dict(runtime) if isinstance(runtime, Mapping) else None,
        preprocess=data.get("preprocess"),
        postprocess=data.get("postprocess"),
        notes=data.get("notes"),
    )


def _build_settings(data: Mapping[str, Any] | None) -> TournamentSettings:
    data = data or {}
    defaults = TournamentSettings()
    return TournamentSettings(
        max_rounds=int(data.get("max_rounds", defaults.max_rounds)),
        seeding=Seeding(data.get("seeding", defaults.seeding.value)),
        output_dir=str(data.get("output_dir", defaults.output_dir)),
        narration_timeout_s=float(data.get("narration_timeout_s", defaults.narration_timeout_s)),
        narration_workers=int(data.get("narration_workers", defaults.narration_workers)),
        seed=int(data.get("seed", defaults.seed)),
    )


def _build_tournament(data: Mapping[str, Any], path: Path) -> TournamentCfg:
    return TournamentCfg(
        path=path,
        name=str(data["name"]),
        description=str(data["description"]),
        fighters=[str(name) for name in data["fighters"]],
        arena=data.get("arena"),
        narrator=data.get("narrator"),
        settings=_build_settings(data.get("settings")),
        notes=data.get("notes"),
    )


def _gather(directory: Path, *, required: bool) -> Iterable[Path]:
    if not directory.exists():
        if required:
            raise ConfigError(format_error(directory, "<dir>", "Required configuration directory is missing."))
        return []
    return sorted([*directory.glob("*.yaml"), *directory.glob("*.yml")])


_SECTIONS = (
    ("fighters", "#/$defs/fighter", _build_fighter, True),
    ("arenas", "#/$defs/arena", _build_arena, False),
    ("narrators", "#/$defs/narrator", _build_narrator, False),
    ("tournaments", "#/$defs/tournament", _build_tournament, True),
)


def collect_configs(base_dir: Path) -> ConfigSet:
    """Read and schema-check every YAML file under *base_dir*."""

    base_dir = Path(base_dir).resolve()
    validator = build_validator()
    collected: Dict[str, Dict[str, Any]] = {}

    for section, ref, builder, required in _SECTIONS:
        configs: Dict[str, Any] = {}
        seen: Dict[str, Path] = {}
        for path in _gather(base_dir / section, required=required):
            data = _read_yaml(path)
            validate_with_schema(validator, data, ref, path)
            cfg = builder(data, path)
            _ensure_unique(cfg.name, seen, path, section.rstrip("s"))
            configs[cfg.name] = cfg
        collected[section] = configs

    return ConfigSet(**collected)


def load_configs(base_dir: Path) -> ConfigSet:
    """Collect configs and run cross-reference validation."""

    configs = collect_configs(base_dir)
    validate_configs(configs.fighters, configs.arenas, configs.narrators, configs.tournaments)
    return configs


def load_tournament(identifier: str | Path, base_dir: Path | None = None) -> TournamentCfg:
    """Load a tournament configuration by path or name."""

    base_dir = Path(base_dir or Path.cwd())
    tournaments = load_configs(base_dir).tournaments

    if isinstance(identifier, str) and identifier in tournaments:
        return tournaments[identifier]

    candidate = Path(identifier)
    candidate = candidate if candidate.is_absolute() else base_dir / "tournaments" / candidate
    candidate = candidate.resolve()

    for cfg in tournaments.values():
        if cfg.path.resolve() == candidate:
            return cfg

    hint = did_you_mean(str(identifier), tournaments)
    raise ConfigError(format_error(candidate, "name", f"Tournament not found.{hint}"))
