"""Application-wide context for dependency resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rich.console import Console

from brawler.domain.config import NarratorCfg, TournamentSettings
from brawler.infrastructure.narrators.base import CommentaryGateway
from brawler.infrastructure.narrators.registry import create_narrator
from brawler.infrastructure.storage.store import (
    InMemoryTournamentStore,
    JsonFileTournamentStore,
    LockRegistry,
    TournamentStore,
)
from brawler.tournament.controller import TournamentController

from .match_cache import MatchCache
from .match_service import MatchService


@dataclass
class ApplicationContext:
    """Simple container that wires application services.

    One context owns one store, one match cache and one lock registry, so
    independent contexts never share tournament state.
    """

    console: Console
    store: TournamentStore
    cache: MatchCache = field(default_factory=MatchCache)
    locks: LockRegistry = field(default_factory=LockRegistry)

    @classmethod
    def create(cls, console: Optional[Console] = None, *, store_dir: Path | None = None) -> ApplicationContext:
        console = console or Console()
        store: TournamentStore
        if store_dir is not None:
            store = JsonFileTournamentStore(store_dir)
        else:
            store = InMemoryTournamentStore()
        return cls(console=console, store=store)

    def resolve_narrator(self, cfg: NarratorCfg | None) -> CommentaryGateway:
        return create_narrator(cfg, console=self.console)

    def match_service(
        self,
        *,
        narrator: CommentaryGateway | None = None,
        settings: TournamentSettings | None = None,
    ) -> MatchService:
        settings = settings or TournamentSettings()
        return MatchService(
            narrator=narrator,
            cache=self.cache,
            console=self.console,
            narration_timeout_s=settings.narration_timeout_s,
            narration_workers=settings.narration_workers,
        )

    def controller(
        self,
        *,
        narrator: CommentaryGateway | None = None,
        settings: TournamentSettings | None = None,
    ) -> TournamentController:
        return TournamentController(
            store=self.store,
            match_service=self.match_service(narrator=narrator, settings=settings),
            locks=self.locks,
            console=self.console,
        )


__all__ = ["ApplicationContext"]
