"""Ollama narrator implementation (HTTP chat endpoint)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List

from rich.console import Console

from brawler.domain.config import NarratorCfg
from brawler.domain.models import BattleRound
from brawler.utils.hooks import PostprocessFn, PreprocessFn, run_postprocess, run_preprocess

from .base import Message, NarratorEmptyResponse, build_messages
from .http_utils import post_json
from .util import ensure_non_empty_reply, retry_send


@dataclass
class OllamaNarrator:
    """Narrator for local Ollama servers."""

    narrator_cfg: NarratorCfg
    preprocess_fn: PreprocessFn | None = field(default=None, repr=False)
    postprocess_fn: PostprocessFn | None = field(default=None, repr=False)
    console: Console | None = field(default=None, repr=False)
    max_tries: int = 2
    name: str = "ollama"

    def __post_init__(self) -> None:
        self._model_id = self.narrator_cfg.model_id
        self._runtime = dict(self.narrator_cfg.runtime or {})
        self._base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

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
        # Reasoning models may emit <think> blocks; see hooks.strip_think:postprocess.
        return ensure_non_empty_reply(run_postprocess(self.postprocess_fn, text))

    def _complete(self, messages: List[Message], runtime: Dict[str, object]) -> str:
        url = f"{self._base_url.rstrip('/')}/api/chat"
        payload = {
            "model": self._model_id,
            "messages": messages,
            "options": self._options(runtime),
            "stream": False,
        }
        data = post_json(url, payload, timeout_s=float(runtime.get("timeout_s", 20.0)))
        text = _extract_text(data)
        if not text:
            raise NarratorEmptyResponse("Ollama response did not include message content.")
        return text

    @staticmethod
    def _options(runtime: Dict[str, object]) -> Dict[str, object]:
        options: Dict[str, object] = {}
        if "temperature" in runtime:
            options["temperature"] = float(runtime["temperature"])
        if "top_p" in runtime:
            options["top_p"] = float(runtime["top_p"])
        if "max_tokens" in runtime:
            options["num_predict"] = int(runtime["max_tokens"])
        return options


def _extract_text(data: Dict[str, object]) -> str:
    message = data.get("message") or {}
    content = message.get("content", "") if isinstance(message, dict) else ""
    return content.strip() if isinstance(content, str) else ""


__all__ = ["OllamaNarrator"]
