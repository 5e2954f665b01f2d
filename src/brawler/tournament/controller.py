"""Tournament orchestration: creation, advancement and artefact export."""

from __future__ import annotations

import csv
import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from rich.console import Console

from brawler.application.match_service import MatchService
from brawler.detectors.heuristics import did_you_mean
from brawler.domain.errors import NoPendingMatchError, ValidationError
from brawler.domain.models import (
    DEFAULT_ARENA,
    Arena,
    Fighter,
    Seeding,
    Tournament,
    TournamentMatch,
    TournamentStatus,
    check_fighter_id,
)
from brawler.infrastructure.storage.store import LockRegistry, TournamentStore
from brawler.utils.paths import slugify, utc_now_iso

from .bracket import BracketGenerator, total_rounds
from .reporting import tournament_progress, tournament_standings
from .state_machine import TournamentStateMachine


@dataclass(frozen=True)
class AdvanceResult:
    """The match resolved by one advance call and the tournament after it."""

    match: TournamentMatch
    tournament: Tournament


@dataclass(frozen=True)
class TournamentRunResult:
    """Container for tournament execution artefacts."""

    tournament: Tournament
    matches: List[TournamentMatch]
    summary_path: Path
    csv_path: Path
    matches_dir: Path
    aggregates: Dict[str, object]


__all__ = ["AdvanceResult", "TournamentController", "TournamentRunResult"]


class TournamentController:
    """Creates tournaments and advances them one match at a time.

    Every advance runs inside the tournament's lock: load a copy, mutate
    it, save it. A failed save leaves the stored record untouched, and the
    match cache makes the retry replay the same battle.
    """

    def __init__(
        self,
        *,
        store: TournamentStore,
        match_service: MatchService,
        locks: LockRegistry | None = None,
        console: Console | None = None,
    ) -> None:
        self.store = store
        self.match_service = match_service
        self.locks = locks or LockRegistry()
        self.console = console or Console()
        self.state_machine = TournamentStateMachine(match_service.resolve, console=self.console)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def create_tournament(
        self,
        fighters: Sequence[Fighter],
        *,
        name: str | None = None,
        tournament_id: str | None = None,
        arena: Arena = DEFAULT_ARENA,
        max_rounds: int = 6,
        seed: int = 42,
        seeding: Seeding = Seeding.ORDERED,
    ) -> Tournament:
        roster = tuple(fighters)
        if len(roster) < 2:
            raise ValidationError("A tournament needs at least two fighters.", field="fighters")
        for fighter in roster:
            check_fighter_id(fighter.id)
            if not fighter.stats.alive:
                raise ValidationError(f"Fighter '{fighter.id}' has no health left.", field="fighters")
        if isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds <= 0:
            raise ValidationError(f"max_rounds must be a positive integer, got {max_rounds!r}.", field="max_rounds")

        brackets = BracketGenerator(seeding=seeding, seed=seed).generate([f.id for f in roster])
        name = name or f"Tournament {utc_now_iso()}"
        tournament = Tournament(
            id=tournament_id or f"{slugify(name)}-{uuid.uuid4().hex[:8]}",
            name=name,
            created_at=utc_now_iso(),
            fighters=roster,
            brackets=brackets,
            total_rounds=total_rounds(len(roster)),
            arena=arena,
            max_rounds=max_rounds,
            seed=seed,
        )
        with self.locks.lock_for(tournament.id):
            self.store.save(tournament)
        self.console.log(
            f"Created tournament [bold]{tournament.id}[/bold] with {len(roster)} fighters "
            f"over {tournament.total_rounds} rounds"
        )
        return tournament

    def create_from_ids(
        self,
        fighter_ids: Sequence[str],
        roster: Mapping[str, Fighter],
        **options: object,
    ) -> Tournament:
        """Resolve *fighter_ids* against *roster* and create the tournament."""

        seen: set[str] = set()
        fighters: List[Fighter] = []
        for fighter_id in fighter_ids:
            if fighter_id not in roster:
                raise ValidationError(
                    f"Unknown fighter '{fighter_id}'.{did_you_mean(fighter_id, roster)}",
                    field="fighters",
                )
            if fighter_id in seen:
                raise ValidationError(f"Fighter '{fighter_id}' appears more than once.", field="fighters")
            seen.add(fighter_id)
            fighters.append(roster[fighter_id])
        return self.create_tournament(fighters, **options)  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Advancement
    # ------------------------------------------------------------------
    def advance_one(self, tournament_id: str) -> AdvanceResult:
        with self.locks.lock_for(tournament_id):
            working = self.store.get(tournament_id).copy()
            match = self.state_machine.advance_one(working)
            self.store.save(working)
            if working.status is TournamentStatus.COMPLETED:
                self.match_service.cache.discard(tournament_id)
        return AdvanceResult(match=match, tournament=working)

    def run_to_completion(self, tournament_id: str) -> List[TournamentMatch]:
        resolved: List[TournamentMatch] = []
        while True:
            try:
                outcome = self.advance_one(tournament_id)
            except NoPendingMatchError:
                return resolved
            resolved.append(outcome.match)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def run(self, tournament_id: str, *, output_dir: Path) -> TournamentRunResult:
        """Advance *tournament_id* to the end and persist summary artefacts."""

        resolved = self.run_to_completion(tournament_id)
        tournament = self.store.get(tournament_id)

        matches_dir = output_dir / "matches"
        matches_dir.mkdir(parents=True, exist_ok=True)
        paths: Dict[str, Path] = {}
        for match in tournament.iter_matches():
            if match.battle_log:
                paths[match.id] = self._write_match(matches_dir, tournament, match)

        aggregates = self._summarise(tournament)
        aggregates["matches_dir"] = str(matches_dir)
        aggregates["summary_output"] = str(output_dir)
        summary_path = output_dir / "tournament-summary.json"
        csv_path = output_dir / "summary.csv"
        self._write_summary(summary_path, aggregates)
        self._write_csv(csv_path, tournament, paths)

        return TournamentRunResult(
            tournament=tournament,
            matches=resolved,
            summary_path=summary_path,
            csv_path=csv_path,
            matches_dir=matches_dir,
            aggregates=aggregates,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _summarise(self, tournament: Tournament) -> Dict[str, object]:
        return {
            "tournament": tournament.id,
            "name": tournament.name,
            "seed": tournament.seed,
            "status": tournament.status.value,
            "winner": tournament.winner,
            "arena": tournament.arena.name,
            "progress": tournament_progress(tournament).to_dict(),
            "standings": [standing.to_dict() for standing in tournament_standings(tournament)],
            "narration_degraded_matches": [
                m.id for m in tournament.iter_matches() if m.narration_degraded
            ],
        }

    def _write_match(self, matches_dir: Path, tournament: Tournament, match: TournamentMatch) -> Path:
        path = matches_dir / f"{match.id}.json"
        payload = {
            "tournament": tournament.id,
            "arena": tournament.arena.to_dict(),
            "max_rounds": tournament.max_rounds,
            "match": match.to_dict(),
        }
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        return path

    def _write_summary(self, path: Path, payload: Dict[str, object]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)

    def _write_csv(self, path: Path, tournament: Tournament, paths: Mapping[str, Path]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fieldnames = [
            "match_id",
            "round",
            "index",
            "fighter_a",
            "fighter_b",
            "winner",
            "decided_by",
            "battle_rounds",
            "narration_degraded",
            "output_path",
        ]
        with path.open("w", encoding="utf-8", newline="") as fh:
            writer = csv.DictWriter(fh, fieldnames=fieldnames)
            writer.writeheader()
            for match in tournament.iter_matches():
                writer.writerow(
                    {
                        "match_id": match.id,
                        "round": match.round,
                        "index": match.index,
                        "fighter_a": match.fighter_a,
                        "fighter_b": match.fighter_b,
                        "winner": match.winner,
                        "decided_by": match.decided_by.value if match.decided_by else None,
                        "battle_rounds": len(match.battle_log),
                        "narration_degraded": match.narration_degraded,
                        "output_path": str(paths[match.id]) if match.id in paths else None,
                    }
                )
