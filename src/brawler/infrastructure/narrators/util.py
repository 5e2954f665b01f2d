"""Retry and reply checks shared by the LLM-backed narrators.

A narrator call covers one side of one round. It gets a small number of
tries before the match service falls back to static commentary, so
backoff stays short and only transient provider failures are retried.
"""

from __future__ import annotations

import random
import time
from typing import Callable, Tuple, Type, TypeVar

from rich.console import Console

from .base import (
    NarratorAuthError,
    NarratorEmptyResponse,
    NarratorRateLimit,
    NarratorServerError,
    NarratorUnavailable,
    NarratorValidationError,
)

T = TypeVar("T")

_TRANSIENT: Tuple[Tuple[Type[Exception], str], ...] = (
    (NarratorEmptyResponse, "blank commentary"),
    (NarratorRateLimit, "rate limit"),
    (NarratorServerError, "provider error"),
    (NarratorUnavailable, "narrator unreachable"),
)


def _transient_reason(exc: Exception) -> str | None:
    for exc_type, reason in _TRANSIENT:
        if isinstance(exc, exc_type):
            return reason
    return None


def retry_send(
    send_fn: Callable[[], T],
    *,
    max_tries: int = 2,
    base_delay: float = 0.5,
    jitter: bool = True,
    console: Console | None = None,
) -> T:
    """Call *send_fn* until it returns commentary or *max_tries* is spent.

    Auth and validation failures surface at once. Errors outside the
    narrator family become :class:`NarratorUnavailable` on the last try.
    """

    console = console or Console()
    delay = base_delay
    for attempt in range(1, max_tries + 1):
        try:
            return send_fn()
        except (NarratorAuthError, NarratorValidationError):
            raise
        except Exception as exc:
            reason = _transient_reason(exc)
            if attempt >= max_tries:
                if reason is None:
                    raise NarratorUnavailable(f"Narrator failed: {type(exc).__name__}: {exc}") from exc
                raise
            console.print(
                f"[yellow]Commentary attempt {attempt}/{max_tries} failed "
                f"({reason or 'unexpected error'}): {exc}[/yellow]"
            )
        pause = delay * (1 + random.random()) if jitter else delay
        time.sleep(pause)
        delay *= 2
    raise NarratorUnavailable("Narrator was given no attempts.")


def ensure_non_empty_reply(text: str | None) -> str:
    """Reject commentary that is missing or only whitespace."""

    if text is None or not text.strip():
        raise NarratorEmptyResponse("Narrator returned no commentary.")
    return text


def map_status_code(status: int | None, message: str) -> Exception:
    if status in (401, 403):
        return NarratorAuthError(message)
    if status == 429:
        return NarratorRateLimit(message)
    if isinstance(status, int) and 500 <= status < 600:
        return NarratorServerError(message)
    return NarratorUnavailable(message)


__all__ = ["retry_send", "ensure_non_empty_reply", "map_status_code"]
