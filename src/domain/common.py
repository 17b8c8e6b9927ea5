"""Shared types for the rating and bracket engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from domain.errors import InvalidScoreOrdering

GLOBAL_SCOPE = "global"
DEFAULT_RATING = 1200


class CompetitorKind(str, Enum):
    """What entity is being rated."""

    PLAYER = "player"
    TEAM = "team"


@dataclass(frozen=True)
class Competitor:
    """Opaque reference to a player or team owned by the surrounding application."""

    competitor_id: str
    kind: CompetitorKind = CompetitorKind.PLAYER
    rating: int | None = None

    @property
    def seeding_rating(self) -> int:
        return DEFAULT_RATING if self.rating is None else self.rating


@dataclass(frozen=True)
class MatchOutcome:
    """Confirmed result of one match, consumed once by the rating engine."""

    winner_id: str
    loser_id: str
    winner_score: int
    loser_score: int
    scope: str = GLOBAL_SCOPE
    kind: CompetitorKind = CompetitorKind.PLAYER
    match_ref: str | None = None
    completed_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.winner_id == self.loser_id:
            raise ValueError(f"match_ref={self.match_ref} has identical competitors ({self.winner_id})")
        if self.winner_score <= self.loser_score:
            raise InvalidScoreOrdering(self.winner_score, self.loser_score)

    @property
    def winner(self) -> Competitor:
        return Competitor(self.winner_id, self.kind)

    @property
    def loser(self) -> Competitor:
        return Competitor(self.loser_id, self.kind)

    def in_scope(self, scope: str) -> MatchOutcome:
        """Return a copy of this outcome re-targeted at another rating scope."""
        return replace(self, scope=scope)


__all__ = ["Competitor", "CompetitorKind", "DEFAULT_RATING", "GLOBAL_SCOPE", "MatchOutcome"]
