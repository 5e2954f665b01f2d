"""Integration smoke test for the OpenAI narrator."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from brawler.domain.config import NarratorCfg
from brawler.domain.models import BattleRound
from brawler.infrastructure.narrators.registry import create_narrator


@pytest.mark.skipif(
    "OPENAI_API_KEY" not in os.environ,
    reason="OPENAI_API_KEY is not set; skipping live OpenAI narrator smoke test.",
)
def test_openai_narrator_returns_text() -> None:
    cfg = NarratorCfg(
        path=Path("config/narrators/openai-smoke.yaml"),
        name="openai-smoke",
        adapter="openai",
        model_id=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        runtime={"max_tokens": 60},
    )
    narrator = create_narrator(cfg)
    battle_round = BattleRound(
        round_number=1,
        attacker_id="storm-knight",
        defender_id="swamp-witch",
        damage=27,
        stats_used={"attacker_strength": 40},
        attacker_health=300,
        defender_health=153,
    )
    response = narrator.narrate(battle_round, is_attack_side=True)
    assert isinstance(response, str)
    assert response.strip()
