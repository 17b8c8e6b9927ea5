"""match_outcomes table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchOutcomeRecord(Base):
    """Confirmed match result, flagged once its rating update has been applied."""

    __tablename__ = "match_outcomes"
    __table_args__ = (
        CheckConstraint("winner_score > loser_score", name="ck_match_outcomes_score_order"),
        CheckConstraint("winner_id <> loser_id", name="ck_match_outcomes_distinct"),
        Index("idx_match_outcomes_pending", "rating_processed", "completed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scope: Mapped[str] = mapped_column(String(64), nullable=False)
    competitor_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    winner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    loser_id: Mapped[str] = mapped_column(String(64), nullable=False)
    winner_score: Mapped[int] = mapped_column(Integer, nullable=False)
    loser_score: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    rating_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
