"""Shared HTTP helpers for narrators that talk plain JSON."""

from __future__ import annotations

from typing import Any, Dict

import requests

from .base import NarratorUnavailable
from .util import map_status_code


def post_json(
    url: str,
    payload: Dict[str, Any],
    *,
    headers: Dict[str, str] | None = None,
    timeout_s: float = 30.0,
) -> Dict[str, Any]:
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout_s)
    except requests.exceptions.RequestException as exc:
        raise NarratorUnavailable(str(exc)) from exc

    if response.status_code >= 400:
        raise map_status_code(response.status_code, response.text)
    try:
        return response.json()
    except ValueError as exc:
        raise NarratorUnavailable(f"Invalid JSON from {url}: {exc}") from exc


__all__ = ["post_json"]
