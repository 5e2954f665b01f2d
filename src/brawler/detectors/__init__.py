from __future__ import annotations

from .heuristics import (
    STAT_RANGES,
    HeuristicIssue,
    canonicalize,
    check_stat_ranges,
    detect_config_issues,
    did_you_mean,
    suggest,
)

__all__ = [
    "STAT_RANGES",
    "HeuristicIssue",
    "canonicalize",
    "check_stat_ranges",
    "detect_config_issues",
    "did_you_mean",
    "suggest",
]
