"""Database repository helpers."""

from repositories.bracket_repository import BRACKET_REPOSITORY, BracketRepository
from repositories.outcome_repository import OUTCOME_REPOSITORY, OutcomeRepository
from repositories.rating_repository import RATING_REPOSITORY, RatingRepository

__all__ = [
    "BRACKET_REPOSITORY",
    "OUTCOME_REPOSITORY",
    "RATING_REPOSITORY",
    "BracketRepository",
    "OutcomeRepository",
    "RatingRepository",
]
