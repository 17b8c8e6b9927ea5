"""Queue of confirmed match outcomes awaiting rating updates."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from domain.common import CompetitorKind, MatchOutcome
from models import MatchOutcomeRecord
from repositories.base import BaseRepository, utcnow


def _record_to_outcome(record: MatchOutcomeRecord) -> MatchOutcome:
    return MatchOutcome(
        winner_id=record.winner_id,
        loser_id=record.loser_id,
        winner_score=record.winner_score,
        loser_score=record.loser_score,
        scope=record.scope,
        kind=CompetitorKind(record.competitor_kind),
        match_ref=record.match_ref,
        completed_at=record.completed_at,
    )


class OutcomeRepository(BaseRepository):
    """SQLAlchemy implementation of the outcome store."""

    def __init__(self) -> None:
        super().__init__(tables=(MatchOutcomeRecord.__table__,))

    def record_outcome(self, session: Session, outcome: MatchOutcome, *, processed: bool = False) -> int:
        record = MatchOutcomeRecord(
            match_ref=outcome.match_ref,
            scope=outcome.scope,
            competitor_kind=outcome.kind.value,
            winner_id=outcome.winner_id,
            loser_id=outcome.loser_id,
            winner_score=outcome.winner_score,
            loser_score=outcome.loser_score,
            completed_at=outcome.completed_at or utcnow(),
            rating_processed=processed,
        )
        session.add(record)
        session.flush()
        return int(record.id)

    def fetch_pending_outcomes(self, session: Session, *, limit: int = 50) -> list[tuple[int, MatchOutcome]]:
        """Oldest unprocessed outcomes first."""
        if limit <= 0:
            raise ValueError("limit must be greater than 0")
        statement = (
            select(MatchOutcomeRecord)
            .where(MatchOutcomeRecord.rating_processed.is_(False))
            .order_by(MatchOutcomeRecord.completed_at, MatchOutcomeRecord.id)
            .limit(limit)
        )
        return [(int(record.id), _record_to_outcome(record)) for record in session.execute(statement).scalars()]

    def mark_processed(self, session: Session, outcome_id: int) -> None:
        session.execute(
            update(MatchOutcomeRecord)
            .where(MatchOutcomeRecord.id == outcome_id)
            .values(rating_processed=True)
        )


OUTCOME_REPOSITORY = OutcomeRepository()
