"""OpenAI narrator implementation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List

try:  # pragma: no cover - import guard
    from openai import (
        APIConnectionError,
        APIStatusError,
        AuthenticationError,
        BadRequestError,
        OpenAI,
        OpenAIError,
        RateLimitError,
    )
except ImportError as exc:  # pragma: no cover - handled at runtime
    OpenAI = None  # type: ignore[assignment]
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
    NarratorValidationError,
    build_messages,
)
from .util import ensure_non_empty_reply, map_status_code, retry_send


@dataclass
class OpenAINarrator:
    """Narrator backed by the OpenAI chat completions API."""

    narrator_cfg: NarratorCfg
    preprocess_fn: PreprocessFn | None = field(default=None, repr=False)
    postprocess_fn: PostprocessFn | None = field(default=None, repr=False)
    console: Console | None = field(default=None, repr=False)
    max_tries: int = 2
    name: str = "openai"

    def __post_init__(self) -> None:
        if _IMPORT_ERROR is not None or OpenAI is None:  # pragma: no cover - import guard
            raise NarratorUnavailable(
                "openai package is not installed. Install the official openai client to use this narrator."
            ) from _IMPORT_ERROR

        api_key = os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise NarratorAuthError("OPENAI_API_KEY environment variable is required for the OpenAI narrator.")

        client_kwargs: Dict[str, object] = {"api_key": api_key}
        base_url = os.getenv("OPENAI_BASE_URL")
        if base_url:
            client_kwargs["base_url"] = base_url
        try:
            self._client = OpenAI(**client_kwargs)
        except OpenAIError as exc:  # pragma: no cover - defensive
            raise NarratorUnavailable("Failed to initialise OpenAI client.") from exc

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
        request_kwargs: Dict[str, object] = {
            "model": self._model_id,
            "messages": messages,
            "timeout": float(runtime.get("timeout_s", 20.0)),
        }
        if "temperature" in runtime:
            request_kwargs["temperature"] = float(runtime["temperature"])
        if "max_tokens" in runtime:
            request_kwargs["max_tokens"] = int(runtime["max_tokens"])
        if "top_p" in runtime:
            request_kwargs["top_p"] = float(runtime["top_p"])

        try:
            completion = self._client.chat.completions.create(**request_kwargs)
        except AuthenticationError as exc:
            raise NarratorAuthError(str(exc)) from exc
        except RateLimitError as exc:
            raise NarratorRateLimit(str(exc)) from exc
        except BadRequestError as exc:
            raise NarratorValidationError(str(exc)) from exc
        except APIConnectionError as exc:
            raise NarratorUnavailable(str(exc)) from exc
        except APIStatusError as exc:
            raise map_status_code(getattr(exc, "status_code", None), str(exc)) from exc
        except OpenAIError as exc:  # pragma: no cover - defensive
            raise NarratorUnavailable(str(exc)) from exc

        choices = getattr(completion, "choices", None) or []
        if not choices:
            raise NarratorEmptyResponse("OpenAI chat completion returned no choices.")
        content = getattr(choices[0].message, "content", None)
        if not content:
            raise NarratorEmptyResponse("OpenAI chat completion returned empty content.")
        return content.strip()


__all__ = ["OpenAINarrator"]
