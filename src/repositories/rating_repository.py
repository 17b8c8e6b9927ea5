"""Persistence for per-scope competitor ratings and rating-change events."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import func, insert, select
from sqlalchemy.orm import Session

from domain.common import GLOBAL_SCOPE, Competitor, CompetitorKind
from domain.ratings.rating import Rating, RatingChange, RatingHistoryEntry
from models import CompetitorRating, RatingChangeEvent
from repositories.base import BaseRepository, utcnow

logger = logging.getLogger(__name__)


def _history_to_json(history: Sequence[RatingHistoryEntry]) -> list[dict[str, Any]]:
    return [
        {"rating": entry.rating, "recorded_at": entry.recorded_at.isoformat()}
        for entry in history
    ]


def _history_from_json(raw: Sequence[dict[str, Any]] | None) -> tuple[RatingHistoryEntry, ...]:
    return tuple(
        RatingHistoryEntry(
            rating=int(item["rating"]),
            recorded_at=datetime.fromisoformat(str(item["recorded_at"])),
        )
        for item in raw or ()
    )


def _row_to_rating(row: CompetitorRating) -> Rating:
    return Rating(
        competitor_id=row.competitor_id,
        kind=CompetitorKind(row.competitor_kind),
        scope=row.scope,
        current_rating=row.current_rating,
        matches_played=row.matches_played,
        highest_rating=row.highest_rating,
        history=_history_from_json(row.history_json),
    )


def _change_to_row(change: RatingChange) -> dict[str, Any]:
    return {
        "match_ref": change.match_ref,
        "scope": change.scope,
        "competitor_kind": change.kind.value,
        "winner_id": change.winner_id,
        "loser_id": change.loser_id,
        "winner_pre_rating": change.winner_pre_rating,
        "winner_post_rating": change.winner_post_rating,
        "winner_delta": change.winner_delta,
        "loser_pre_rating": change.loser_pre_rating,
        "loser_post_rating": change.loser_post_rating,
        "loser_delta": change.loser_delta,
        "expected_score": change.expected_score,
        "k_factor": change.k_factor,
        "recorded_at": change.recorded_at,
    }


class RatingRepository(BaseRepository):
    """SQLAlchemy implementation of the rating store."""

    def __init__(self) -> None:
        super().__init__(tables=(CompetitorRating.__table__, RatingChangeEvent.__table__))

    def _select_row(self, competitor: Competitor, scope: str):
        return select(CompetitorRating).where(
            CompetitorRating.competitor_id == competitor.competitor_id,
            CompetitorRating.competitor_kind == competitor.kind.value,
            CompetitorRating.scope == scope,
        )

    def get_rating(
        self,
        session: Session,
        competitor: Competitor,
        scope: str,
        *,
        for_update: bool = False,
    ) -> Rating | None:
        """Return the stored rating, locking the row when ``for_update`` is set."""
        statement = self._select_row(competitor, scope)
        if for_update:
            statement = statement.with_for_update()
        row = session.execute(statement).scalar_one_or_none()
        return None if row is None else _row_to_rating(row)

    def save_rating(self, session: Session, rating: Rating) -> None:
        """Create or update one rating row."""
        row = session.execute(self._select_row(rating.competitor, rating.scope)).scalar_one_or_none()
        if row is None:
            row = CompetitorRating(
                competitor_id=rating.competitor_id,
                competitor_kind=rating.kind.value,
                scope=rating.scope,
            )
            session.add(row)
        row.current_rating = rating.current_rating
        row.matches_played = rating.matches_played
        row.highest_rating = rating.highest_rating
        row.history_json = _history_to_json(rating.history)
        row.updated_at = utcnow()
        session.flush()

    def insert_rating_changes(self, session: Session, changes: Sequence[RatingChange]) -> None:
        """Bulk insert rating-change events."""
        if not changes:
            return
        session.execute(insert(RatingChangeEvent), [_change_to_row(change) for change in changes])
        logger.debug("inserted %d rating change rows", len(changes))

    def top_ratings(
        self,
        session: Session,
        *,
        scope: str = GLOBAL_SCOPE,
        kind: CompetitorKind | None = None,
        limit: int = 10,
    ) -> list[Rating]:
        """Leaderboard for one scope, highest rating first."""
        if limit <= 0:
            raise ValueError("limit must be greater than 0")
        statement = select(CompetitorRating).where(CompetitorRating.scope == scope)
        if kind is not None:
            statement = statement.where(CompetitorRating.competitor_kind == kind.value)
        statement = statement.order_by(
            CompetitorRating.current_rating.desc(),
            CompetitorRating.matches_played.desc(),
            CompetitorRating.competitor_id,
        ).limit(limit)
        return [_row_to_rating(row) for row in session.execute(statement).scalars()]

    def count_rated_competitors(self, session: Session, *, scope: str | None = None) -> int:
        """Count competitors with a stored rating in one scope or all scopes."""
        statement = select(func.count(func.distinct(CompetitorRating.competitor_id)))
        if scope is not None:
            statement = statement.where(CompetitorRating.scope == scope)
        return int(session.scalar(statement) or 0)


RATING_REPOSITORY = RatingRepository()
