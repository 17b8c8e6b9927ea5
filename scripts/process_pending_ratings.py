#!/usr/bin/env python3
"""Apply queued match outcomes to competitor ratings."""

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
from domain.pipeline import ReportingService
from domain.ratings.elo.calculator import EloCalculator
from domain.ratings.elo.config import find_elo_system_config, load_elo_system_configs
from log_config import setup_logging
from repositories.bracket_repository import BRACKET_REPOSITORY
from repositories.outcome_repository import OUTCOME_REPOSITORY
from repositories.rating_repository import RATING_REPOSITORY

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "ratings" / "elo"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Rating update jobs.",
)


@app.command("process")
def process_pending(
    db_url: Annotated[
        str,
        typer.Option(
            "--db-url",
            envvar="ESPORTS_DB_URL",
            help="Database URL. Defaults to the local esports postgres instance.",
        ),
    ] = DEFAULT_DB_URL,
    system_name: Annotated[
        str,
        typer.Option("--system-name", help="Elo system name from the config directory."),
    ] = "default",
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of Elo system TOML files."),
    ] = DEFAULT_CONFIG_DIR,
    limit: Annotated[
        int,
        typer.Option("--limit", help="Maximum outcomes to process in one run."),
    ] = 50,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute rating updates and roll them back."),
    ] = False,
    log_level: Annotated[str, typer.Option("--log-level")] = "INFO",
) -> None:
    """Process unrated outcomes in completion order."""
    if limit <= 0:
        raise typer.BadParameter("--limit must be greater than 0")
    setup_logging(log_level)

    try:
        system_config = find_elo_system_config(config_dir, system_name)
    except KeyError as exc:
        raise typer.BadParameter(str(exc), param_hint="--system-name") from exc

    engine = create_db_engine(db_url)
    for repository in (RATING_REPOSITORY, OUTCOME_REPOSITORY, BRACKET_REPOSITORY):
        repository.ensure_schema(engine)

    service = ReportingService(
        create_session_factory(engine),
        ratings=RATING_REPOSITORY,
        brackets=BRACKET_REPOSITORY,
        outcomes=OUTCOME_REPOSITORY,
        calculator=EloCalculator(system_config.parameters),
    )
    summary = service.process_pending_outcomes(limit=limit, dry_run=dry_run)

    prefix = "[dry-run] " if summary.dry_run else ""
    typer.echo(
        f"{prefix}system={system_config.name} "
        f"processed_outcomes={summary.processed_outcomes} "
        f"rating_changes={summary.rating_changes} "
        f"tracked_competitors={summary.tracked_competitors}"
    )


@app.command("list-systems")
def list_systems(
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of Elo system TOML files."),
    ] = DEFAULT_CONFIG_DIR,
) -> None:
    """Print the Elo systems available in the config directory."""
    for config in load_elo_system_configs(config_dir):
        typer.echo(
            f"{config.name} k_factor={config.parameters.k_factor} "
            f"mode={config.parameters.k_factor_mode} file={config.file_path.name}"
        )


if __name__ == "__main__":
    app()
