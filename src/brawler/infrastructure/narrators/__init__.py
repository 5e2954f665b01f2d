"""Commentary gateways: the static fallback and LLM-backed narrators."""

from __future__ import annotations

from .base import (
    CommentaryGateway,
    NarratorAuthError,
    NarratorEmptyResponse,
    NarratorRateLimit,
    NarratorServerError,
    NarratorUnavailable,
    NarratorValidationError,
)
from .static import StaticNarrator, fallback_commentary, summarise_result

__all__ = [
    "CommentaryGateway",
    "NarratorAuthError",
    "NarratorEmptyResponse",
    "NarratorRateLimit",
    "NarratorServerError",
    "NarratorUnavailable",
    "NarratorValidationError",
    "StaticNarrator",
    "fallback_commentary",
    "summarise_result",
]
