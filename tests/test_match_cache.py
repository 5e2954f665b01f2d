"""Tests for the write-once match cache."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from brawler.application.match_cache import MatchCache
from brawler.domain.models import BattleOutcome, BattleResult, MatchRecord


def _record(tag: str) -> MatchRecord:
    result = BattleResult(
        fighter_a_id="a",
        fighter_b_id="b",
        rounds=(),
        winner="a",
        outcome=BattleOutcome.KNOCKOUT,
        max_rounds=3,
    )
    return MatchRecord(result=result, battle_log=(), summary=tag, narration_degraded=False)


def test_record_is_computed_once() -> None:
    cache = MatchCache()
    calls = []

    def compute() -> MatchRecord:
        calls.append(1)
        return _record(f"call-{len(calls)}")

    first = cache.get_or_compute("cup", "match-1-1", compute)
    second = cache.get_or_compute("cup", "match-1-1", compute)
    assert first is second
    assert first.summary == "call-1"
    assert len(calls) == 1
    assert ("cup", "match-1-1") in cache
    assert len(cache) == 1


def test_keys_are_scoped_per_tournament() -> None:
    cache = MatchCache()
    cache.get_or_compute("cup", "match-1-1", lambda: _record("cup"))
    other = cache.get_or_compute("league", "match-1-1", lambda: _record("league"))
    assert other.summary == "league"
    assert cache.get("cup", "match-1-1").summary == "cup"
    assert cache.get("cup", "match-9-9") is None
    assert "not-a-key" not in cache


def test_concurrent_callers_share_one_computation() -> None:
    cache = MatchCache()
    started = threading.Event()
    calls = []
    lock = threading.Lock()

    def compute() -> MatchRecord:
        with lock:
            calls.append(1)
        started.set()
        time.sleep(0.1)
        return _record("shared")

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(cache.get_or_compute, "cup", "match-1-1", compute) for _ in range(8)]
        records = [f.result(timeout=5) for f in futures]

    assert started.is_set()
    assert len(calls) == 1
    assert all(record is records[0] for record in records)


def test_failures_are_not_cached() -> None:
    cache = MatchCache()

    def explode() -> MatchRecord:
        raise RuntimeError("simulator crashed")

    with pytest.raises(RuntimeError):
        cache.get_or_compute("cup", "match-1-1", explode)
    assert ("cup", "match-1-1") not in cache
    assert len(cache) == 0

    record = cache.get_or_compute("cup", "match-1-1", lambda: _record("retry"))
    assert record.summary == "retry"


def test_discard_drops_only_the_finished_tournament() -> None:
    cache = MatchCache()
    cache.get_or_compute("cup", "match-1-1", lambda: _record("cup-1"))
    cache.get_or_compute("cup", "match-2-1", lambda: _record("cup-2"))
    cache.get_or_compute("league", "match-1-1", lambda: _record("league-1"))

    assert cache.discard("cup") == 2
    assert cache.get("cup", "match-1-1") is None
    assert cache.get("league", "match-1-1").summary == "league-1"
    assert len(cache) == 1
    assert cache.discard("cup") == 0
