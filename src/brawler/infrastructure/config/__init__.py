from __future__ import annotations

from .loader import ConfigSet, collect_configs, load_configs, load_tournament
from .validators import format_error, validate_configs

__all__ = [
    "ConfigSet",
    "collect_configs",
    "format_error",
    "load_configs",
    "load_tournament",
    "validate_configs",
]
