"""Rank tiers derived from a rating value."""

from __future__ import annotations

from dataclasses import dataclass, field

from domain.ratings.rating import RatingChange


@dataclass(frozen=True, order=True)
class RankTier:
    """Named rating band; instances compare by ``rank`` (Bronze lowest)."""

    rank: int
    name: str = field(compare=False)
    short_name: str = field(compare=False)
    min_rating: int | None = field(compare=False)


BRONZE = RankTier(0, "Bronze", "B", None)
SILVER = RankTier(1, "Silver", "S", 1400)
GOLD = RankTier(2, "Gold", "G", 1600)
PLATINUM = RankTier(3, "Platinum", "P", 1800)
DIAMOND = RankTier(4, "Diamond", "D", 2000)
MASTER = RankTier(5, "Master", "M", 2200)
GRANDMASTER = RankTier(6, "Grandmaster", "GM", 2400)

RANK_TIERS: tuple[RankTier, ...] = (
    BRONZE,
    SILVER,
    GOLD,
    PLATINUM,
    DIAMOND,
    MASTER,
    GRANDMASTER,
)


def get_rank_tier(rating: int) -> RankTier:
    """Return the highest tier whose inclusive lower bound ``rating`` reaches."""
    for tier in reversed(RANK_TIERS):
        if tier.min_rating is None or rating >= tier.min_rating:
            return tier
    return BRONZE


@dataclass(frozen=True)
class TierChange:
    competitor_id: str
    scope: str
    previous: RankTier
    current: RankTier

    @property
    def promoted(self) -> bool:
        return self.current > self.previous


def tier_changes(change: RatingChange) -> list[TierChange]:
    """List competitors whose tier moved because of ``change``."""
    moves: list[TierChange] = []
    for competitor_id, pre, post in (
        (change.winner_id, change.winner_pre_rating, change.winner_post_rating),
        (change.loser_id, change.loser_pre_rating, change.loser_post_rating),
    ):
        previous = get_rank_tier(pre)
        current = get_rank_tier(post)
        if previous != current:
            moves.append(
                TierChange(
                    competitor_id=competitor_id,
                    scope=change.scope,
                    previous=previous,
                    current=current,
                )
            )
    return moves


__all__ = ["RANK_TIERS", "RankTier", "TierChange", "get_rank_tier", "tier_changes"]
