from __future__ import annotations

from .store import InMemoryTournamentStore, JsonFileTournamentStore, LockRegistry, TournamentStore

__all__ = ["InMemoryTournamentStore", "JsonFileTournamentStore", "LockRegistry", "TournamentStore"]
