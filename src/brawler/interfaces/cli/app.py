"""Command line interface for brawler."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Iterable, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from brawler.application.context import ApplicationContext
from brawler.application.match_service import MatchContext
from brawler.detectors.heuristics import detect_config_issues, did_you_mean
from brawler.domain.config import ConfigError, FighterCfg, TournamentCfg
from brawler.domain.errors import BrawlerError, ExternalGenerationFailure, NoPendingMatchError
from brawler.domain.models import DEFAULT_ARENA, Arena, Fighter, Tournament
from brawler.infrastructure.config.loader import ConfigSet, load_configs, load_tournament
from brawler.infrastructure.narrators.base import CommentaryGateway
from brawler.tournament.bracket import BracketGenerator, bye_slots, total_rounds
from brawler.tournament.reporting import tournament_progress, tournament_standings
from brawler.utils.paths import resolve_timestamped_output_dir

app = typer.Typer(help="CLI for brawler configuration management, battles and tournaments.")
console = Console()

DEFAULT_STORE_DIR = Path(".brawler") / "tournaments"


def _config_dir_option(default: str = "config") -> Path:
    return Path(default)


def _config_dir() -> Any:
    return typer.Option(
        default=_config_dir_option(),
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
        help="Directory containing brawler configuration YAML files.",
    )


def _store_dir() -> Any:
    return typer.Option(
        DEFAULT_STORE_DIR,
        "--store-dir",
        file_okay=False,
        dir_okay=True,
        help="Directory holding persisted tournament records.",
    )


def _handle_config_error(exc: ConfigError) -> NoReturn:
    console.print(str(exc))
    raise typer.Exit(code=1) from exc


def _handle_domain_error(exc: Exception) -> NoReturn:
    console.print(f"[red]{type(exc).__name__}: {exc}[/red]")
    raise typer.Exit(code=1) from exc


def _load_and_validate(config_dir: Path) -> ConfigSet:
    try:
        return load_configs(config_dir)
    except ConfigError as exc:
        _handle_config_error(exc)


def _roster(configs: ConfigSet) -> dict[str, Fighter]:
    return {name: cfg.to_fighter() for name, cfg in configs.fighters.items()}


def _arena(configs: ConfigSet, name: str | None) -> Arena:
    if not name:
        return DEFAULT_ARENA
    try:
        return configs.arena(name).to_arena()
    except ConfigError as exc:
        _handle_config_error(exc)


def _narrator(app_context: ApplicationContext, configs: ConfigSet | None, name: str | None) -> CommentaryGateway:
    try:
        cfg = configs.narrator(name) if configs is not None and name else None
        return app_context.resolve_narrator(cfg)
    except ConfigError as exc:
        _handle_config_error(exc)
    except ExternalGenerationFailure as exc:
        _handle_domain_error(exc)


@app.command()
def validate(config_dir: Path = _config_dir()) -> None:
    """Validate configuration files."""

    configs = _load_and_validate(config_dir)
    for cfg in configs.tournaments.values():
        for issue in detect_config_issues(cfg, configs.fighters):
            color = "yellow" if issue.severity == "warning" else "blue"
            console.print(f"[{color}]{issue.severity}[/{color}] {cfg.name}: {issue.message}")
    console.print("[green]Configs OK[/green]")


@app.command()
def show(
    subject: str = typer.Argument(..., help="Entity to show: 'tournament' or 'fighter'."),
    name: str = typer.Argument(..., help="Name of the entity."),
    config_dir: Path = _config_dir(),
) -> None:
    """Display details about a configuration entity."""

    if subject == "tournament":
        try:
            tournament = load_tournament(name, config_dir)
        except ConfigError as exc:
            _handle_config_error(exc)
        _print_tournament_details(tournament)
        return
    if subject == "fighter":
        configs = _load_and_validate(config_dir)
        try:
            fighter = configs.fighter(name)
        except ConfigError as exc:
            _handle_config_error(exc)
        _print_fighter_details(fighter)
        return

    console.print(f"[red]Cannot show '{subject}'.{did_you_mean(subject, ['tournament', 'fighter'])}[/red]")
    raise typer.Exit(code=1)


def _print_tournament_details(tournament: TournamentCfg) -> None:
    console.print(f"[bold]Tournament:[/bold] {tournament.name}")
    console.print(f"Description: {tournament.description}")
    console.print("")

    count = len(tournament.fighters)
    table = Table(title="Tournament Overview")
    table.add_column("Field", justify="left")
    table.add_column("Value", justify="left")
    table.add_row("Fighters", ", ".join(tournament.fighters))
    table.add_row("Arena", tournament.arena or DEFAULT_ARENA.name)
    table.add_row("Narrator", tournament.narrator or "static")
    settings = tournament.settings
    table.add_row("Rounds", str(total_rounds(count)))
    table.add_row("Empty Seats", str(bye_slots(count)))
    table.add_row("Max Battle Rounds", str(settings.max_rounds))
    table.add_row("Seeding", settings.seeding.value)
    table.add_row("Seed", str(settings.seed))
    table.add_row("Output Dir", settings.output_dir)
    console.print(table)


def _print_fighter_details(fighter: FighterCfg) -> None:
    console.print(f"[bold]Fighter:[/bold] {fighter.display_name} ({fighter.name})")
    if fighter.description:
        console.print(f"Description: {fighter.description}")
    table = Table(title="Stats")
    table.add_column("Stat", justify="left")
    table.add_column("Value", justify="right")
    for key, value in fighter.stats.to_dict().items():
        display = ", ".join(value) if isinstance(value, list) else str(value)
        table.add_row(key, display)
    console.print(table)


@app.command()
def simulate(
    fighter_a: str = typer.Option(..., "--fighter-a", help="First fighter name."),
    fighter_b: str = typer.Option(..., "--fighter-b", help="Second fighter name."),
    arena: str | None = typer.Option(None, "--arena", help="Arena name (defaults to the built-in arena)."),
    max_rounds: int = typer.Option(6, "--max-rounds", min=1, help="Battle round limit."),
    seed: int | None = typer.Option(None, "--seed", help="Seed for a reproducible battle."),
    narrator: str | None = typer.Option(None, "--narrator", help="Narrator name (defaults to static text)."),
    config_dir: Path = _config_dir(),
) -> None:
    """Simulate a single battle between two configured fighters."""

    configs = _load_and_validate(config_dir)
    roster = _roster(configs)
    for name in (fighter_a, fighter_b):
        if name not in roster:
            console.print(f"[red]Unknown fighter '{name}'.{did_you_mean(name, roster)}[/red]")
            raise typer.Exit(code=1)

    app_context = ApplicationContext.create(console=console)
    service = app_context.match_service(narrator=_narrator(app_context, configs, narrator))
    context = MatchContext(
        tournament_id="adhoc",
        match_id=f"{fighter_a}-vs-{fighter_b}",
        fighter_a=roster[fighter_a],
        fighter_b=roster[fighter_b],
        arena=_arena(configs, arena),
        max_rounds=max_rounds,
        seed=str(seed if seed is not None else random.SystemRandom().randrange(2**32)),
    )
    try:
        record = service.play(context)
    except BrawlerError as exc:
        _handle_domain_error(exc)

    table = Table(title=f"{fighter_a} vs {fighter_b}")
    table.add_column("#", justify="right")
    table.add_column("Attacker")
    table.add_column("Damage", justify="right")
    table.add_column("Defender HP", justify="right")
    table.add_column("Commentary")
    for entry in record.battle_log:
        battle_round = entry.round
        table.add_row(
            str(battle_round.round_number),
            battle_round.attacker_id,
            str(battle_round.damage),
            str(battle_round.defender_health),
            entry.attack_commentary,
        )
    console.print(table)
    console.print(f"[bold green]{record.summary}[/bold green]")
    if record.narration_degraded:
        console.print("[yellow]Some commentary fell back to static text.[/yellow]")
    console.print(f"Seed: {context.seed}")


@app.command()
def create(
    tournament: str = typer.Option(..., "--tournament", help="Tournament name or path."),
    store_dir: Path = _store_dir(),
    seed: int | None = typer.Option(None, "--seed", help="Override the configured seed."),
    config_dir: Path = _config_dir(),
) -> None:
    """Create a persisted tournament from a configuration."""

    configs = _load_and_validate(config_dir)
    tournament_cfg = _tournament_cfg(configs, tournament, config_dir)
    app_context = ApplicationContext.create(console=console, store_dir=store_dir)
    created = _create(app_context, configs, tournament_cfg, seed)
    console.print(f"[green]Created tournament[/green] {created.id}")


@app.command()
def advance(
    tournament_id: str = typer.Option(..., "--tournament-id", help="Persisted tournament id."),
    store_dir: Path = _store_dir(),
    narrator: str | None = typer.Option(None, "--narrator", help="Narrator name (defaults to static text)."),
    config_dir: Path = typer.Option(_config_dir_option(), help="Configuration directory used to look up narrators."),
) -> None:
    """Resolve the next pending match of a persisted tournament."""

    app_context = ApplicationContext.create(console=console, store_dir=store_dir)
    configs = _load_and_validate(config_dir) if narrator else None
    controller = app_context.controller(narrator=_narrator(app_context, configs, narrator))
    try:
        outcome = controller.advance_one(tournament_id)
    except NoPendingMatchError as exc:
        console.print(str(exc))
        return
    except BrawlerError as exc:
        _handle_domain_error(exc)

    match = outcome.match
    decided = match.decided_by.value if match.decided_by else "?"
    console.print(f"[bold]{match.id}[/bold]: {match.winner} advances ({decided})")
    if match.summary:
        console.print(match.summary)
    if outcome.tournament.winner:
        console.print(f"[bold green]Tournament winner:[/bold green] {outcome.tournament.winner}")


@app.command()
def standings(
    tournament_id: str = typer.Option(..., "--tournament-id", help="Persisted tournament id."),
    store_dir: Path = _store_dir(),
) -> None:
    """Print progress and standings for a persisted tournament."""

    app_context = ApplicationContext.create(console=console, store_dir=store_dir)
    try:
        record = app_context.store.get(tournament_id)
    except BrawlerError as exc:
        _handle_domain_error(exc)
    _print_standings(record)


def _print_standings(tournament: Tournament) -> None:
    progress = tournament_progress(tournament)
    console.print(
        f"[bold]{tournament.name}[/bold] ({tournament.status.value}) "
        f"round {progress.current_round}/{progress.total_rounds}, "
        f"{progress.completed_matches}/{progress.total_matches} matches complete"
    )
    table = Table(title="Standings")
    for column in ("Fighter", "Wins", "Losses", "Rounds Advanced", "Damage Dealt", "Damage Taken", "Status"):
        table.add_column(column, justify="left" if column in ("Fighter", "Status") else "right")
    for row in tournament_standings(tournament):
        status = "eliminated" if row.eliminated else ("champion" if row.fighter_id == tournament.winner else "active")
        table.add_row(
            row.fighter_id,
            str(row.wins),
            str(row.losses),
            str(row.rounds_advanced),
            str(row.damage_dealt),
            str(row.damage_taken),
            status,
        )
    console.print(table)


@app.command("run")
def run_tournament(
    tournament: str = typer.Option(..., "--tournament", help="Tournament name or path."),
    config_dir: Path = _config_dir(),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        file_okay=False,
        dir_okay=True,
        readable=False,
        writable=True,
        help="Destination for tournament artefacts (defaults to the tournament setting).",
    ),
    seed: int | None = typer.Option(None, "--seed", help="Override the configured seed."),
    narrator: str | None = typer.Option(None, "--narrator", help="Override the configured narrator."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the planned bracket without running matches."),
) -> None:
    """Run a whole tournament in memory and write summary artefacts."""

    configs = _load_and_validate(config_dir)
    tournament_cfg = _tournament_cfg(configs, tournament, config_dir)
    effective_seed = seed if seed is not None else tournament_cfg.settings.seed

    if dry_run:
        generator = BracketGenerator(seeding=tournament_cfg.settings.seeding, seed=effective_seed)
        brackets = generator.generate(tournament_cfg.fighters)
        console.print(
            f"Planned rounds: {len(brackets)} "
            f"(empty seats: {bye_slots(len(tournament_cfg.fighters))})"
        )
        for match in brackets[0].matches:
            opponent = match.fighter_b or "bye"
            console.print(f"  {match.id}: {match.fighter_a} vs {opponent}")
        return

    effective_output_dir = output_dir or Path(tournament_cfg.settings.output_dir)
    if not effective_output_dir.is_absolute():
        effective_output_dir = (config_dir / effective_output_dir).resolve()

    app_context = ApplicationContext.create(console=console)
    gateway = _narrator(app_context, configs, narrator or tournament_cfg.narrator)
    created = _create(app_context, configs, tournament_cfg, effective_seed)
    controller = app_context.controller(narrator=gateway, settings=tournament_cfg.settings)

    final_output_dir = resolve_timestamped_output_dir(effective_output_dir)
    console.print(f"[green]Writing outputs to: {final_output_dir}[/green]")
    try:
        result = controller.run(created.id, output_dir=final_output_dir)
    except BrawlerError as exc:
        _handle_domain_error(exc)

    _print_standings(result.tournament)
    console.print(f"\n[green]Tournament complete:[/green] winner {result.tournament.winner}")
    console.print(f"Summary JSON: {result.summary_path}")
    console.print(f"Summary CSV: {result.csv_path}")
    console.print(f"Match artefacts: {result.matches_dir}")


def _tournament_cfg(configs: ConfigSet, name: str, config_dir: Path) -> TournamentCfg:
    tournament_cfg = configs.tournaments.get(name)
    if tournament_cfg is not None:
        return tournament_cfg
    try:
        return load_tournament(name, config_dir)
    except ConfigError as exc:
        _handle_config_error(exc)


def _create(
    app_context: ApplicationContext,
    configs: ConfigSet,
    tournament_cfg: TournamentCfg,
    seed: int | None,
) -> Tournament:
    settings = tournament_cfg.settings
    controller = app_context.controller(settings=settings)
    try:
        return controller.create_from_ids(
            tournament_cfg.fighters,
            _roster(configs),
            name=tournament_cfg.name,
            arena=_arena(configs, tournament_cfg.arena),
            max_rounds=settings.max_rounds,
            seed=seed if seed is not None else settings.seed,
            seeding=settings.seeding,
        )
    except BrawlerError as exc:
        _handle_domain_error(exc)


def main(argv: Iterable[str] | None = None) -> None:
    """Invoke the Typer application."""
    app(args=list(argv) if argv is not None else None)


if __name__ == "__main__":
    main()
