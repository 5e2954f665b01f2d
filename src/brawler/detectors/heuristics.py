"""Heuristic checks and fuzzy lookups that complement schema validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Mapping

from rapidfuzz import fuzz, process

from brawler.domain.config import FighterCfg, TournamentCfg
from brawler.domain.models import StatProfile


@dataclass(frozen=True)
class HeuristicIssue:
    """Structured representation of a heuristic finding."""

    severity: Literal["info", "warning", "error"]
    message: str


__all__ = [
    "HeuristicIssue",
    "STAT_RANGES",
    "canonicalize",
    "check_stat_ranges",
    "detect_config_issues",
    "suggest",
    "did_you_mean",
]

STAT_RANGES: dict[str, tuple[int, int]] = {
    "health": (0, 1000),
    "strength": (1, 200),
    "agility": (1, 100),
    "defense": (1, 100),
    "luck": (1, 50),
    "magic": (1, 100),
    "ranged": (1, 100),
    "intelligence": (1, 100),
}


def canonicalize(text: str) -> str:
    """Normalize *text* for matching."""

    return " ".join(text.lower().replace("_", " ").replace("-", " ").split())


def suggest(name: str, candidates: Iterable[str], *, threshold: float = 70.0) -> str | None:
    """Return the closest candidate to *name*, or ``None`` below *threshold*."""

    choices = {canonicalize(c): c for c in candidates}
    if not choices or not name:
        return None
    best = process.extractOne(canonicalize(name), list(choices), scorer=fuzz.WRatio)
    if best is None:
        return None
    match, score, _ = best
    return choices[match] if score >= threshold else None


def did_you_mean(name: str, candidates: Iterable[str]) -> str:
    """Suffix for error messages; empty when nothing is close."""

    hint = suggest(name, candidates)
    return f" Did you mean '{hint}'?" if hint else ""


def check_stat_ranges(label: str, stats: StatProfile) -> list[HeuristicIssue]:
    issues: list[HeuristicIssue] = []
    for stat, (low, high) in STAT_RANGES.items():
        value = getattr(stats, stat)
        if value is None:
            continue
        if not low <= value <= high:
            issues.append(
                HeuristicIssue(
                    severity="warning",
                    message=f"{label}: {stat}={value} is outside the usual range {low}-{high}.",
                )
            )
    if stats.max_health > STAT_RANGES["health"][1]:
        issues.append(
            HeuristicIssue(
                severity="warning",
                message=f"{label}: max_health={stats.max_health} exceeds {STAT_RANGES['health'][1]}.",
            )
        )
    return issues


def detect_config_issues(
    config: TournamentCfg,
    fighters: Mapping[str, FighterCfg] | None = None,
) -> list[HeuristicIssue]:
    """Run lightweight checks on a tournament and the fighters it references."""

    issues: list[HeuristicIssue] = []
    settings = config.settings

    if settings.max_rounds > 50:
        issues.append(
            HeuristicIssue(
                severity="info",
                message="High max_rounds detected; most battles end well before 50 rounds.",
            )
        )

    count = len(config.fighters)
    if count >= 2 and count & (count - 1):
        full = 1 << (count - 1).bit_length()
        issues.append(
            HeuristicIssue(
                severity="info",
                message=f"{count} fighters is not a power of two; the bracket has {full - count} empty seats.",
            )
        )

    if settings.narration_workers > 16:
        issues.append(
            HeuristicIssue(
                severity="info",
                message="Many narration workers may trip provider rate limits.",
            )
        )

    if fighters:
        roster = [fighters[name] for name in config.fighters if name in fighters]
        for fighter in roster:
            issues.extend(check_stat_ranges(fighter.name, fighter.stats))
        healths = [f.stats.max_health for f in roster]
        if healths and min(healths) * 5 < max(healths):
            issues.append(
                HeuristicIssue(
                    severity="info",
                    message="Roster max_health varies more than fivefold; expect lopsided matches.",
                )
            )

    return issues
