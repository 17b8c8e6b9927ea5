"""competitor_ratings and rating_changes table models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, JSONType


class CompetitorRating(Base):
    """Current rating of one competitor in one scope."""

    __tablename__ = "competitor_ratings"
    __table_args__ = (
        UniqueConstraint(
            "competitor_id",
            "competitor_kind",
            "scope",
            name="uq_competitor_ratings_identity",
        ),
        CheckConstraint("current_rating >= 0", name="ck_competitor_ratings_non_negative"),
        CheckConstraint("matches_played >= 0", name="ck_competitor_ratings_matches_played"),
        CheckConstraint("highest_rating >= current_rating", name="ck_competitor_ratings_highest"),
        Index("idx_competitor_ratings_leaderboard", "scope", "competitor_kind", "current_rating"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    competitor_id: Mapped[str] = mapped_column(String(64), nullable=False)
    competitor_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    scope: Mapped[str] = mapped_column(String(64), nullable=False)
    current_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    highest_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    history_json: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )


class RatingChangeEvent(Base):
    """Append-only record of one applied match outcome in one scope."""

    __tablename__ = "rating_changes"
    __table_args__ = (
        CheckConstraint("winner_delta >= 0", name="ck_rating_changes_winner_delta"),
        CheckConstraint("loser_delta <= 0", name="ck_rating_changes_loser_delta"),
        CheckConstraint(
            "expected_score >= 0.0 AND expected_score <= 1.0",
            name="ck_rating_changes_expected_score",
        ),
        Index("idx_rating_changes_match", "match_ref"),
        Index("idx_rating_changes_winner", "scope", "winner_id"),
        Index("idx_rating_changes_loser", "scope", "loser_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    match_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    scope: Mapped[str] = mapped_column(String(64), nullable=False)
    competitor_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    winner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    loser_id: Mapped[str] = mapped_column(String(64), nullable=False)
    winner_pre_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    winner_post_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    winner_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    loser_pre_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    loser_post_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    loser_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    expected_score: Mapped[float] = mapped_column(Float, nullable=False)
    k_factor: Mapped[float] = mapped_column(Float, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
