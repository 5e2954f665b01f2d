"""Helpers for timestamps, slugs and output directories."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path

TimestampStr = str

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def current_timestamp_str() -> TimestampStr:
    """Return the current timestamp as ``YYYYMMDDHHMMSS`` in the local timezone."""

    return datetime.now(timezone.utc).astimezone().strftime("%Y%m%d%H%M%S")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def slugify(value: str) -> str:
    return _NON_SLUG.sub("-", value.lower()).strip("-") or "unnamed"


def resolve_timestamped_output_dir(base: Path) -> Path:
    """Append a timestamped leaf directory to *base* and create it.

    A numeric suffix is added when two runs land in the same second.
    """

    stamp = current_timestamp_str()
    concrete = base / stamp
    suffix = 1
    while True:
        try:
            concrete.mkdir(parents=True, exist_ok=False)
            return concrete
        except FileExistsError:
            suffix += 1
            concrete = base / f"{stamp}-{suffix}"


__all__ = ["current_timestamp_str", "utc_now_iso", "slugify", "resolve_timestamped_output_dir"]
