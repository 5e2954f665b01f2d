"""Schema utilities for configuration validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Mapping

import yaml

SCHEMA_FILE = Path(__file__).resolve().parent / "schemas" / "config-schema.json"


@lru_cache(maxsize=1)
def load_schema() -> Mapping[str, object]:
    return yaml.safe_load(SCHEMA_FILE.read_text(encoding="utf-8"))


__all__ = ["load_schema", "SCHEMA_FILE"]
