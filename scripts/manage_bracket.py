#!/usr/bin/env python3
"""Create tournament brackets and report their results."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.brackets.models import Bracket, SeedingPolicy
from domain.common import GLOBAL_SCOPE, Competitor, CompetitorKind
from domain.errors import EngineError
from domain.pipeline import ReportingService
from domain.ratings.elo.calculator import EloCalculator
from domain.ratings.elo.config import find_elo_system_config
from log_config import setup_logging
from repositories.bracket_repository import BRACKET_REPOSITORY
from repositories.outcome_repository import OUTCOME_REPOSITORY
from repositories.rating_repository import RATING_REPOSITORY

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "ratings" / "elo"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Single-elimination bracket commands.",
)

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        envvar="ESPORTS_DB_URL",
        help="Database URL. Defaults to the local esports postgres instance.",
    ),
]


def _service(db_url: str, calculator: EloCalculator | None = None) -> ReportingService:
    engine = create_db_engine(db_url)
    for repository in (RATING_REPOSITORY, OUTCOME_REPOSITORY, BRACKET_REPOSITORY):
        repository.ensure_schema(engine)
    return ReportingService(
        create_session_factory(engine),
        ratings=RATING_REPOSITORY,
        brackets=BRACKET_REPOSITORY,
        outcomes=OUTCOME_REPOSITORY,
        calculator=calculator,
    )


def _echo_bracket(bracket: Bracket) -> None:
    typer.echo(
        f"tournament={bracket.tournament_id} size={bracket.bracket_size} rounds={bracket.rounds} "
        f"status={bracket.status.value} champion={bracket.champion_id or '-'} version={bracket.version}"
    )
    for round_number in range(1, bracket.rounds + 1):
        for match in bracket.round_matches(round_number):
            names = [slot.competitor_id if slot is not None else "-" for slot in match.slots]
            score = "" if match.score is None else f" {match.score.winner_score}-{match.score.loser_score}"
            typer.echo(
                f"  r{match.round_number} m{match.match_id:<3} {names[0]:>16} vs {names[1]:<16} "
                f"{match.status.value}{score}"
            )


@app.command()
def create(
    tournament_id: Annotated[str, typer.Argument(help="Tournament identifier.")],
    competitors: Annotated[
        list[str],
        typer.Option("--competitor", "-c", help="Registrant id; repeat in registration order."),
    ],
    seeding: Annotated[
        SeedingPolicy,
        typer.Option("--seeding", help="Seeding policy."),
    ] = SeedingPolicy.RANDOM,
    kind: Annotated[
        CompetitorKind,
        typer.Option("--kind", help="Competitor kind for every registrant."),
    ] = CompetitorKind.PLAYER,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Generate and store the bracket for a tournament."""
    setup_logging("INFO", "simple")
    service = _service(db_url)

    registrants = [Competitor(competitor_id, kind) for competitor_id in competitors]
    if seeding is SeedingPolicy.RATING:
        rated: list[Competitor] = []
        with service.session_factory() as session:
            for competitor in registrants:
                stored = RATING_REPOSITORY.get_rating(session, competitor, GLOBAL_SCOPE)
                rating = None if stored is None else stored.current_rating
                rated.append(Competitor(competitor.competitor_id, kind, rating))
        registrants = rated

    try:
        bracket = service.create_bracket(tournament_id, registrants, seeding)
    except EngineError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _echo_bracket(bracket)


@app.command()
def report(
    tournament_id: Annotated[str, typer.Argument(help="Tournament identifier.")],
    match_id: Annotated[int, typer.Argument(help="Match number within the bracket.")],
    winner_id: Annotated[str, typer.Argument(help="Competitor id of the winner.")],
    winner_score: Annotated[int, typer.Option("--winner-score")] = 1,
    loser_score: Annotated[int, typer.Option("--loser-score")] = 0,
    scope: Annotated[
        str,
        typer.Option("--scope", help="Game id for game-specific ratings; global is always updated."),
    ] = GLOBAL_SCOPE,
    system_name: Annotated[
        str,
        typer.Option("--system-name", help="Elo system name from the config directory."),
    ] = "default",
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of Elo system TOML files."),
    ] = DEFAULT_CONFIG_DIR,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Confirm a match result, advance the bracket and update ratings."""
    setup_logging("INFO", "simple")
    try:
        system_config = find_elo_system_config(config_dir, system_name)
    except KeyError as exc:
        raise typer.BadParameter(str(exc), param_hint="--system-name") from exc

    try:
        result = _service(db_url, EloCalculator(system_config.parameters)).report_bracket_result(
            tournament_id,
            match_id,
            winner_id,
            (winner_score, loser_score),
            scope=scope,
        )
    except EngineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    for change in result.rating_changes:
        typer.echo(
            f"scope={change.scope} {change.winner_id} {change.winner_pre_rating}->{change.winner_post_rating} "
            f"{change.loser_id} {change.loser_pre_rating}->{change.loser_post_rating}"
        )
    _echo_bracket(result.bracket)


@app.command()
def show(
    tournament_id: Annotated[str, typer.Argument(help="Tournament identifier.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Print the stored bracket."""
    engine = create_db_engine(db_url)
    BRACKET_REPOSITORY.ensure_schema(engine)
    with create_session_factory(engine)() as session:
        bracket = BRACKET_REPOSITORY.load_bracket(session, tournament_id)
    if bracket is None:
        typer.echo(f"no bracket for tournament={tournament_id}")
        raise typer.Exit(code=1)
    _echo_bracket(bracket)


if __name__ == "__main__":
    app()
