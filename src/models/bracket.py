"""brackets and bracket_matches table models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, JSONType


class BracketRecord(Base):
    """One single-elimination bracket per tournament."""

    __tablename__ = "brackets"
    __table_args__ = (UniqueConstraint("tournament_id", name="uq_brackets_tournament"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tournament_id: Mapped[str] = mapped_column(String(64), nullable=False)
    bracket_size: Mapped[int] = mapped_column(Integer, nullable=False)
    rounds: Mapped[int] = mapped_column(Integer, nullable=False)
    seeding: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    champion_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )

    matches: Mapped[list[BracketMatchRecord]] = relationship(
        back_populates="bracket",
        cascade="all, delete-orphan",
        order_by="BracketMatchRecord.match_number",
    )


class BracketMatchRecord(Base):
    """One node of a bracket graph."""

    __tablename__ = "bracket_matches"
    __table_args__ = (
        UniqueConstraint("bracket_id", "match_number", name="uq_bracket_matches_number"),
        Index("idx_bracket_matches_round", "bracket_id", "round_number", "position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bracket_id: Mapped[int] = mapped_column(ForeignKey("brackets.id"), nullable=False)
    match_number: Mapped[int] = mapped_column(Integer, nullable=False)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    slots_json: Mapped[list[dict[str, Any] | None]] = mapped_column(JSONType, nullable=False, default=list)
    winner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    winner_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    loser_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    next_match_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    next_slot_index: Mapped[int | None] = mapped_column(Integer, nullable=True)

    bracket: Mapped[BracketRecord] = relationship(back_populates="matches")
