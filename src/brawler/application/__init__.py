from __future__ import annotations

from .match_cache import MatchCache
from .match_service import MatchContext, MatchService

__all__ = ["MatchCache", "MatchContext", "MatchService"]
