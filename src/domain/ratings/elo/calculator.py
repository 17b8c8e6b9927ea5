"""Competitor-level Elo logic."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from domain.common import DEFAULT_RATING, Competitor, MatchOutcome
from domain.ratings.rating import Rating, RatingChange

K_FACTOR_MODES = ("fixed", "experience")
# Expected scores saturate long before 10**300.
MAX_EXPONENT = 300.0


@dataclass(frozen=True)
class EloParameters:
    initial_rating: int = DEFAULT_RATING
    k_factor: float = 32.0
    scale_factor: float = 400.0
    rating_floor: int = 0
    k_factor_mode: str = "fixed"
    provisional_k_factor: float = 40.0
    provisional_match_count: int = 30
    high_rating_k_factor: float = 16.0
    high_rating_threshold: int = 2400


@dataclass(frozen=True)
class RatingDelta:
    winner_delta: int
    loser_delta: int
    expected_score: float


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float = 400.0) -> float:
    """Compute the Elo expected score for one side."""
    exponent = min(max((opponent_rating - rating) / scale_factor, -MAX_EXPONENT), MAX_EXPONENT)
    return 1.0 / (1.0 + 10.0 ** exponent)


def round_half_away_from_zero(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def compute_rating_change(
    winner_rating: int,
    loser_rating: int,
    k_factor: float = 32.0,
    scale_factor: float = 400.0,
) -> RatingDelta:
    """Return the whole-point, zero-sum rating movement for a decisive result."""
    if k_factor <= 0.0:
        raise ValueError(f"k_factor must be > 0 (got {k_factor})")

    winner_expected = calculate_expected_score(winner_rating, loser_rating, scale_factor)
    winner_delta = round_half_away_from_zero(k_factor * (1.0 - winner_expected))
    return RatingDelta(
        winner_delta=winner_delta,
        loser_delta=-winner_delta,
        expected_score=winner_expected,
    )


class EloCalculator:
    """Applies match outcomes to per-scope competitor ratings."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def new_rating(self, competitor: Competitor, scope: str, *, recorded_at: datetime | None = None) -> Rating:
        return Rating.initial(
            competitor,
            scope,
            rating=self.params.initial_rating,
            recorded_at=recorded_at or _utcnow(),
        )

    def k_factor_for(self, rating: Rating) -> float:
        """K-factor for one competitor under the configured mode."""
        if self.params.k_factor_mode != "experience":
            return self.params.k_factor
        if rating.matches_played < self.params.provisional_match_count:
            return self.params.provisional_k_factor
        if rating.current_rating > self.params.high_rating_threshold:
            return self.params.high_rating_k_factor
        return self.params.k_factor

    def match_k_factor(self, winner_rating: Rating, loser_rating: Rating) -> float:
        # One K per match keeps the update zero-sum.
        return max(self.k_factor_for(winner_rating), self.k_factor_for(loser_rating))

    def apply_match_outcome(
        self,
        outcome: MatchOutcome,
        winner_rating: Rating,
        loser_rating: Rating,
        *,
        k_factor: float | None = None,
        recorded_at: datetime | None = None,
    ) -> RatingChange:
        _check_side(outcome, winner_rating, outcome.winner_id, "winner")
        _check_side(outcome, loser_rating, outcome.loser_id, "loser")

        effective_k = k_factor if k_factor is not None else self.match_k_factor(winner_rating, loser_rating)
        delta = compute_rating_change(
            winner_rating.current_rating,
            loser_rating.current_rating,
            k_factor=effective_k,
            scale_factor=self.params.scale_factor,
        )

        timestamp = recorded_at or outcome.completed_at or _utcnow()
        winner_post = max(self.params.rating_floor, winner_rating.current_rating + delta.winner_delta)
        loser_post = max(self.params.rating_floor, loser_rating.current_rating + delta.loser_delta)
        winner_after = winner_rating.with_result(winner_post, timestamp)
        loser_after = loser_rating.with_result(loser_post, timestamp)

        return RatingChange(
            match_ref=outcome.match_ref,
            scope=outcome.scope,
            kind=outcome.kind,
            winner_id=outcome.winner_id,
            loser_id=outcome.loser_id,
            winner_pre_rating=winner_rating.current_rating,
            winner_post_rating=winner_post,
            winner_delta=winner_post - winner_rating.current_rating,
            loser_pre_rating=loser_rating.current_rating,
            loser_post_rating=loser_post,
            loser_delta=loser_post - loser_rating.current_rating,
            expected_score=delta.expected_score,
            k_factor=effective_k,
            recorded_at=timestamp,
            winner_after=winner_after,
            loser_after=loser_after,
        )


def _check_side(outcome: MatchOutcome, rating: Rating, competitor_id: str, side: str) -> None:
    if rating.competitor_id != competitor_id:
        raise ValueError(
            f"{side} rating belongs to {rating.competitor_id}, expected {competitor_id} "
            f"for match_ref={outcome.match_ref}"
        )
    if rating.scope != outcome.scope:
        raise ValueError(
            f"{side} rating scope {rating.scope!r} does not match outcome scope {outcome.scope!r}"
        )


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)
