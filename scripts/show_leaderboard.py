#!/usr/bin/env python3
"""Show the top-rated competitors for one scope."""

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
from domain.common import GLOBAL_SCOPE, CompetitorKind
from domain.ratings.tiers import get_rank_tier
from repositories.rating_repository import RATING_REPOSITORY

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query the rating leaderboard.",
)


@app.command()
def show_leaderboard(
    scope: Annotated[
        str,
        typer.Option("--scope", help="Rating scope: 'global' or a game id."),
    ] = GLOBAL_SCOPE,
    kind: Annotated[
        CompetitorKind | None,
        typer.Option("--kind", help="Restrict to players or teams."),
    ] = None,
    top_n: Annotated[
        int,
        typer.Option("--top-n", help="Number of competitors to return."),
    ] = 10,
    db_url: Annotated[
        str,
        typer.Option(
            "--db-url",
            envvar="ESPORTS_DB_URL",
            help="Database URL. Defaults to the local esports postgres instance.",
        ),
    ] = DEFAULT_DB_URL,
) -> None:
    """Print competitors by current rating with their tier badge."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    engine = create_db_engine(db_url)
    RATING_REPOSITORY.ensure_schema(engine)
    session_factory = create_session_factory(engine)

    with session_factory() as session:
        ratings = RATING_REPOSITORY.top_ratings(session, scope=scope, kind=kind, limit=top_n)

    if not ratings:
        typer.echo(f"no ratings for scope={scope}")
        return

    for rank, rating in enumerate(ratings, start=1):
        tier = get_rank_tier(rating.current_rating)
        typer.echo(
            f"{rank:>3}. {rating.competitor_id:<24} {rating.kind.value:<6} "
            f"{rating.current_rating:>5} [{tier.short_name:>2}] "
            f"peak={rating.highest_rating} matches={rating.matches_played}"
        )


if __name__ == "__main__":
    app()
