"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloCalculator,
    EloParameters,
    RatingDelta,
    calculate_expected_score,
    compute_rating_change,
    round_half_away_from_zero,
)
from domain.ratings.elo.config import (
    EloSystemConfig,
    find_elo_system_config,
    load_elo_system_configs,
)

__all__ = [
    "EloCalculator",
    "EloParameters",
    "EloSystemConfig",
    "RatingDelta",
    "calculate_expected_score",
    "compute_rating_change",
    "find_elo_system_config",
    "load_elo_system_configs",
    "round_half_away_from_zero",
]
