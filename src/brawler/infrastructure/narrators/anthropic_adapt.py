"""Anthropic narrator implementation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List

try:  # pragma: no cover - optional dependency
    from anthropic import Anthropic, APIConnectionError, APIStatusError, AuthenticationError, RateLimitError
except ImportError as exc:  # pragma: no cover - handled at runtime
    Anthropic = None  # type: ignore[assignment]
    _IMPORT_ERROR: Exception | None = exc
else:
    _IMPORT_ERROR = None

from rich.console import Console

from brawler.domain.config import NarratorCfg
from brawler.domain.models import BattleRound
from brawler.utils.hooks import PostprocessFn, PreprocessFn, run_postprocess, run_preprocess

from .base import (
    Message,
    NarratorAuthError,
    NarratorEmptyResponse,
    NarratorRateLimit,
    NarratorUnavailable,
    build_messages,
)
from .util import ensure_non_empty_reply, map_status_code, retry_send


@dataclass
class AnthropicNarrator:
    """Narrator that proxies requests to the Anthropic Messages API."""

    narrator_cfg: NarratorCfg
    preprocess_fn: PreprocessFn | None = field(default=None, repr=False)
    postprocess_fn: PostprocessFn | None = field(default=None, repr=False)
    console: Console | None = field(default=None, repr=False)
    max_tries: int = 2
    name: str = "anthropic"

    def __post_init__(self) -> None:
        if _IMPORT_ERROR is not None or Anthropic is None:  # pragma: no cover - import guard
            raise NarratorUnavailable(
                "anthropic package is not installed. Install the official anthropic client to use this narrator."
            ) from _IMPORT_ERROR

        api_key = os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise NarratorAuthError("ANTHROPIC_API_KEY environment variable is required for the Anthropic narrator.")

        try:
            self._client = Anthropic(api_key=api_key)
        except Exception as exc:  # pragma: no cover - defensive
            raise NarratorUnavailable("Failed to initialise Anthropic client.") from exc

        self._model_id = self.narrator_cfg.model_id
        self._runtime = dict(self.narrator_cfg.runtime or {})

    # ------------------------------------------------------------------
    def narrate(self, battle_round: BattleRound, *, is_attack_side: bool) -> str:
        messages, runtime = run_preprocess(
            self.preprocess_fn,
            messages=build_messages(battle_round, is_attack_side=is_attack_side),
            runtime=self._runtime,
        )
        text = retry_send(
            lambda: self._complete(messages, runtime or {}),
            max_tries=self.max_tries,
            console=self.console,
        )
        return ensure_non_empty_reply(run_postprocess(self.postprocess_fn, text))

    def _complete(self, messages: List[Message], runtime: Dict[str, object]) -> str:
        system_prompt = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        request_kwargs: Dict[str, object] = {
            "model": self._model_id,
            "messages": [m for m in messages if m["role"] != "system"],
            "max_tokens": int(runtime.get("max_tokens", 256)),
            "timeout": float(runtime.get("timeout_s", 20.0)),
        }
        if system_prompt:
            request_kwargs["system"] = system_prompt
        if "temperature" in runtime:
            request_kwargs["temperature"] = float(runtime["temperature"])
        if "top_p" in runtime:
            request_kwargs["top_p"] = float(runtime["top_p"])

        try:
            response = self._client.messages.create(**request_kwargs)
        except AuthenticationError as exc:
            raise NarratorAuthError(str(exc)) from exc
        except RateLimitError as exc:
            raise NarratorRateLimit(str(exc)) from exc
        except APIConnectionError as exc:
            raise NarratorUnavailable(str(exc)) from exc
        except APIStatusError as exc:
            raise map_status_code(getattr(exc, "status_code", None), str(exc)) from exc

        text = _extract_text(response)
        if not text:
            raise NarratorEmptyResponse("Anthropic API returned empty response content.")
        return text


def _extract_text(response: object) -> str:
    parts: List[str] = []
    for block in getattr(response, "content", []) or []:
        if getattr(block, "type", None) == "text":
            parts.append(getattr(block, "text", ""))
    return "".join(parts).strip()


__all__ = ["AnthropicNarrator"]
