"""Validation helpers for configuration domain objects."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator, ValidationError

from brawler.detectors.heuristics import did_you_mean
from brawler.domain.config import ArenaCfg, ConfigError, FighterCfg, NarratorCfg, TournamentCfg
from brawler.domain.models import DRAW

from .schema import load_schema


def build_validator() -> Draft202012Validator:
    return Draft202012Validator(load_schema())


def format_error(path: Path, field: str, message: str) -> str:
    location = f"[cyan]{path}[/cyan]"
    target = f" → [magenta]{field}[/magenta]" if field else ""
    return f"[bold red]Config error[/bold red]: {location}{target} {message}"


def validate_with_schema(
    validator: Draft202012Validator,
    instance: Mapping[str, object],
    ref: str,
    path: Path,
) -> None:
    try:
        validator.evolve(schema={"$ref": ref}).validate(instance)
    except ValidationError as exc:
        field = "/".join(str(part) for part in exc.path)
        raise ConfigError(format_error(path, field or "<root>", exc.message)) from exc


def _check_reference(path: Path, field: str, name: str, known: Mapping[str, object], kind: str) -> None:
    if name not in known:
        raise ConfigError(
            format_error(path, field, f"Referenced {kind} '{name}' is not defined.{did_you_mean(name, known)}")
        )


def validate_configs(
    fighters: Mapping[str, FighterCfg],
    arenas: Mapping[str, ArenaCfg],
    narrators: Mapping[str, NarratorCfg],
    tournaments: Mapping[str, TournamentCfg],
) -> None:
    """Cross-reference checks the schema cannot express."""

    for name, fighter_cfg in fighters.items():
        if name == DRAW:
            raise ConfigError(format_error(fighter_cfg.path, "name", f"'{DRAW}' is reserved and cannot name a fighter."))

    for cfg in tournaments.values():
        seen: set[str] = set()
        for name in cfg.fighters:
            _check_reference(cfg.path, f"fighters[{name}]", name, fighters, "fighter")
            if name in seen:
                raise ConfigError(format_error(cfg.path, f"fighters[{name}]", "Fighter is listed more than once."))
            seen.add(name)
        if len(seen) < 2:
            raise ConfigError(format_error(cfg.path, "fighters", "At least two distinct fighters are required."))
        if cfg.arena:
            _check_reference(cfg.path, "arena", cfg.arena, arenas, "arena")
        if cfg.narrator:
            _check_reference(cfg.path, "narrator", cfg.narrator, narrators, "narrator")


__all__ = [
    "build_validator",
    "format_error",
    "validate_with_schema",
    "validate_configs",
]
