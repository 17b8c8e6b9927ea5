"""Rating-system domain modules."""

from domain.ratings.rating import Rating, RatingChange, RatingHistoryEntry
from domain.ratings.tiers import RANK_TIERS, RankTier, TierChange, get_rank_tier, tier_changes

__all__ = [
    "RANK_TIERS",
    "RankTier",
    "Rating",
    "RatingChange",
    "RatingHistoryEntry",
    "TierChange",
    "get_rank_tier",
    "tier_changes",
]
