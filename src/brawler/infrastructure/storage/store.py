"""Tournament record stores and the per-tournament lock registry."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Protocol, runtime_checkable

from brawler.domain.errors import BracketError, NotFoundError, PersistenceFailure, ValidationError
from brawler.domain.models import Tournament


@runtime_checkable
class TournamentStore(Protocol):
    """Persists whole tournament records; a save either fully lands or not at all."""

    def get(self, tournament_id: str) -> Tournament:
        """Return a fresh copy of the record or raise NotFoundError."""

    def save(self, tournament: Tournament) -> None:
        """Replace the stored record for ``tournament.id``."""

    def list_ids(self) -> List[str]:
        """Return stored tournament ids in sorted order."""


class InMemoryTournamentStore:
    """Keeps serialized records so callers never share mutable state with the store."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, tournament_id: str) -> Tournament:
        with self._lock:
            record = self._records.get(tournament_id)
        if record is None:
            raise NotFoundError(f"Tournament '{tournament_id}' not found.")
        return Tournament.from_dict(json.loads(json.dumps(record)))

    def save(self, tournament: Tournament) -> None:
        record = json.loads(json.dumps(tournament.to_dict()))
        with self._lock:
            self._records[tournament.id] = record

    def list_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._records)


class JsonFileTournamentStore:
    """One ``{id}.json`` file per tournament, replaced atomically on save."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, tournament_id: str) -> Path:
        if not tournament_id or "/" in tournament_id or "\\" in tournament_id or tournament_id.startswith("."):
            raise ValidationError(f"Invalid tournament id '{tournament_id}'.", field="tournament_id")
        return self.root / f"{tournament_id}.json"

    def get(self, tournament_id: str) -> Tournament:
        path = self.path_for(tournament_id)
        if not path.exists():
            raise NotFoundError(f"Tournament '{tournament_id}' not found in {self.root}.")
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except OSError as exc:
            raise PersistenceFailure(f"Failed to read {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise PersistenceFailure(f"Corrupted tournament record {path}: {exc}") from exc
        try:
            return Tournament.from_dict(data)
        except (KeyError, TypeError, ValueError, BracketError, ValidationError) as exc:
            raise PersistenceFailure(f"Invalid tournament record {path}: {exc}") from exc

    def save(self, tournament: Tournament) -> None:
        path = self.path_for(tournament.id)
        payload = json.dumps(tournament.to_dict(), indent=2)
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{tournament.id}.", suffix=".tmp", dir=self.root)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise PersistenceFailure(f"Failed to write {path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def list_ids(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))


class LockRegistry:
    """Hands out one lock per tournament id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def lock_for(self, tournament_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(tournament_id)
            if lock is None:
                lock = self._locks[tournament_id] = threading.Lock()
            return lock


__all__ = ["TournamentStore", "InMemoryTournamentStore", "JsonFileTournamentStore", "LockRegistry"]
