"""Narrator registry for vendor selection."""

from __future__ import annotations

from typing import Callable, Dict

from rich.console import Console

from brawler.domain.config import NarratorCfg
from brawler.utils.hooks import attach_narrator_hooks

from .anthropic_adapt import AnthropicNarrator
from .base import CommentaryGateway, NarratorUnavailable
from .ollama_adapt import OllamaNarrator
from .openai_adapt import OpenAINarrator
from .static import StaticNarrator

NarratorFactory = Callable[..., CommentaryGateway]

REGISTRY: Dict[str, NarratorFactory] = {
    "openai": OpenAINarrator,
    "anthropic": AnthropicNarrator,
    "ollama": OllamaNarrator,
    "static": StaticNarrator,
}


def create_narrator(cfg: NarratorCfg | None, *, console: Console | None = None) -> CommentaryGateway:
    """Instantiate the narrator described by *cfg*; ``None`` gives the static narrator."""

    if cfg is None:
        return StaticNarrator()

    key = cfg.adapter.lower()
    try:
        factory = REGISTRY[key]
    except KeyError as exc:
        raise NarratorUnavailable(f"Unknown narrator adapter '{cfg.adapter}'.") from exc

    if factory is StaticNarrator:
        return StaticNarrator()

    preprocess_fn, postprocess_fn = attach_narrator_hooks(cfg)
    return factory(
        cfg,
        preprocess_fn=preprocess_fn,
        postprocess_fn=postprocess_fn,
        console=console,
        max_tries=int((cfg.runtime or {}).get("max_tries", 2)),
    )


__all__ = ["REGISTRY", "NarratorFactory", "create_narrator"]
