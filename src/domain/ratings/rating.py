"""Rating state and rating-change records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from domain.common import DEFAULT_RATING, Competitor, CompetitorKind


@dataclass(frozen=True)
class RatingHistoryEntry:
    rating: int
    recorded_at: datetime


@dataclass(frozen=True)
class Rating:
    """Current rating of one competitor in one scope (global or a game)."""

    competitor_id: str
    kind: CompetitorKind
    scope: str
    current_rating: int = DEFAULT_RATING
    matches_played: int = 0
    highest_rating: int | None = None
    history: tuple[RatingHistoryEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.matches_played < 0:
            raise ValueError(f"matches_played must be >= 0 for competitor {self.competitor_id}")
        if self.highest_rating is None:
            peak = max([self.current_rating, *(entry.rating for entry in self.history)])
            object.__setattr__(self, "highest_rating", peak)
        if self.highest_rating < self.current_rating:
            raise ValueError(
                f"highest_rating {self.highest_rating} is below current_rating {self.current_rating} "
                f"for competitor {self.competitor_id}"
            )
        if self.history:
            if self.history[-1].rating != self.current_rating:
                raise ValueError(
                    f"latest history entry {self.history[-1].rating} does not match current_rating "
                    f"{self.current_rating} for competitor {self.competitor_id}"
                )
            if max(entry.rating for entry in self.history) > self.highest_rating:
                raise ValueError(
                    f"history peaks above highest_rating {self.highest_rating} for competitor {self.competitor_id}"
                )

    @classmethod
    def initial(
        cls,
        competitor: Competitor,
        scope: str,
        *,
        rating: int = DEFAULT_RATING,
        recorded_at: datetime,
    ) -> Rating:
        return cls(
            competitor_id=competitor.competitor_id,
            kind=competitor.kind,
            scope=scope,
            current_rating=rating,
            matches_played=0,
            highest_rating=rating,
            history=(RatingHistoryEntry(rating=rating, recorded_at=recorded_at),),
        )

    @property
    def competitor(self) -> Competitor:
        return Competitor(self.competitor_id, self.kind, self.current_rating)

    def with_result(self, new_rating: int, recorded_at: datetime) -> Rating:
        """Return the state after one rated match ending at ``new_rating``."""
        return replace(
            self,
            current_rating=new_rating,
            matches_played=self.matches_played + 1,
            highest_rating=max(self.highest_rating, new_rating),
            history=self.history + (RatingHistoryEntry(rating=new_rating, recorded_at=recorded_at),),
        )


@dataclass(frozen=True)
class RatingChange:
    """Immutable record of applying one match outcome in one scope."""

    match_ref: str | None
    scope: str
    kind: CompetitorKind
    winner_id: str
    loser_id: str
    winner_pre_rating: int
    winner_post_rating: int
    winner_delta: int
    loser_pre_rating: int
    loser_post_rating: int
    loser_delta: int
    expected_score: float
    k_factor: float
    recorded_at: datetime
    winner_after: Rating
    loser_after: Rating
