"""Pre-processing hook that asks small local models for shorter commentary."""

from __future__ import annotations

from typing import Optional

_DIRECTIVE = "Answer in at most twenty words."


def preprocess(messages: list[dict], runtime: Optional[dict]):
    """Append a length directive to the system message and cap ``max_tokens``."""

    updated = []
    for message in messages:
        if message.get("role") == "system" and not message["content"].endswith(_DIRECTIVE):
            message = {**message, "content": f"{message['content']}\n{_DIRECTIVE}"}
        updated.append(message)
    runtime = dict(runtime or {})
    runtime.setdefault("max_tokens", 60)
    return updated, runtime
