"""Tests for tournament record stores."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from brawler.domain.errors import NotFoundError, PersistenceFailure, ValidationError
from brawler.domain.models import Fighter, StatProfile, Tournament, TournamentStatus
from brawler.infrastructure.storage.store import (
    InMemoryTournamentStore,
    JsonFileTournamentStore,
    LockRegistry,
    TournamentStore,
)
from brawler.tournament.bracket import BracketGenerator


def _tournament(tournament_id: str = "cup") -> Tournament:
    fighters = tuple(
        Fighter(
            id=fid,
            name=fid.title(),
            stats=StatProfile(health=90, max_health=100, strength=10, agility=10, defense=5, luck=5),
        )
        for fid in ("red", "blue", "green")
    )
    return Tournament(
        id=tournament_id,
        name="Cup",
        created_at="2025-01-01T00:00:00+00:00",
        fighters=fighters,
        brackets=BracketGenerator().generate([f.id for f in fighters]),
        total_rounds=2,
    )


@pytest.mark.parametrize("factory", [InMemoryTournamentStore, None])
def test_round_trip_returns_independent_copies(tmp_path: Path, factory) -> None:
    store = factory() if factory else JsonFileTournamentStore(tmp_path / "store")
    assert isinstance(store, TournamentStore)
    original = _tournament()
    store.save(original)

    loaded = store.get("cup")
    assert loaded.to_dict() == original.to_dict()
    loaded.status = TournamentStatus.IN_PROGRESS
    loaded.match("match-1-1").winner = "red"
    assert store.get("cup").status is TournamentStatus.SETUP
    assert store.get("cup").match("match-1-1").winner is None
    assert store.list_ids() == ["cup"]


def test_missing_tournament_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        InMemoryTournamentStore().get("ghost")
    with pytest.raises(NotFoundError):
        JsonFileTournamentStore(tmp_path).get("ghost")


def test_json_store_replaces_file_atomically(tmp_path: Path) -> None:
    store = JsonFileTournamentStore(tmp_path)
    tournament = _tournament()
    store.save(tournament)
    tournament.current_round = 2
    store.save(tournament)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["cup.json"]
    data = json.loads((tmp_path / "cup.json").read_text(encoding="utf-8"))
    assert data["current_round"] == 2


def test_failed_write_keeps_previous_record(tmp_path: Path, monkeypatch) -> None:
    store = JsonFileTournamentStore(tmp_path)
    tournament = _tournament()
    store.save(tournament)

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    tournament.current_round = 2
    with pytest.raises(PersistenceFailure):
        store.save(tournament)
    monkeypatch.undo()

    assert store.get("cup").current_round == 1
    assert sorted(p.name for p in tmp_path.iterdir()) == ["cup.json"]


def test_corrupted_record_is_a_persistence_failure(tmp_path: Path) -> None:
    (tmp_path / "cup.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        JsonFileTournamentStore(tmp_path).get("cup")

    (tmp_path / "cup.json").write_text(json.dumps({"id": "cup"}), encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        JsonFileTournamentStore(tmp_path).get("cup")


def test_unsafe_ids_are_rejected(tmp_path: Path) -> None:
    store = JsonFileTournamentStore(tmp_path)
    for bad in ("", "../escape", ".hidden"):
        with pytest.raises(ValidationError):
            store.path_for(bad)


def test_lock_registry_hands_out_one_lock_per_tournament() -> None:
    locks = LockRegistry()
    assert locks.lock_for("cup") is locks.lock_for("cup")
    assert locks.lock_for("cup") is not locks.lock_for("league")
