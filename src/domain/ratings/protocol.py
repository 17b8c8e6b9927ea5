"""Persistence ports the reporting pipeline depends on."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from domain.brackets.models import Bracket
from domain.common import Competitor, MatchOutcome
from domain.ratings.rating import Rating, RatingChange


@runtime_checkable
class RatingStore(Protocol):
    """Reads and writes per-scope ratings and their change records."""

    def get_rating(
        self,
        session: Session,
        competitor: Competitor,
        scope: str,
        *,
        for_update: bool = False,
    ) -> Rating | None: ...

    def save_rating(self, session: Session, rating: Rating) -> None: ...

    def insert_rating_changes(self, session: Session, changes: Sequence[RatingChange]) -> None: ...

    def count_rated_competitors(self, session: Session, *, scope: str | None = None) -> int: ...


@runtime_checkable
class BracketStore(Protocol):
    """Loads and saves whole brackets with a version check."""

    def create_bracket(self, session: Session, bracket: Bracket) -> None: ...

    def load_bracket(self, session: Session, tournament_id: str) -> Bracket | None: ...

    def save_bracket(self, session: Session, bracket: Bracket, *, expected_version: int) -> None: ...


@runtime_checkable
class OutcomeStore(Protocol):
    """Queue of confirmed match outcomes awaiting a rating update."""

    def record_outcome(self, session: Session, outcome: MatchOutcome, *, processed: bool = False) -> int: ...

    def fetch_pending_outcomes(self, session: Session, *, limit: int = 50) -> list[tuple[int, MatchOutcome]]: ...

    def mark_processed(self, session: Session, outcome_id: int) -> None: ...


__all__ = ["BracketStore", "OutcomeStore", "RatingStore"]
