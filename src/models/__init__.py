"""ORM models."""

from models.base import Base
from models.bracket import BracketMatchRecord, BracketRecord
from models.outcome import MatchOutcomeRecord
from models.rating import CompetitorRating, RatingChangeEvent

__all__ = [
    "Base",
    "BracketMatchRecord",
    "BracketRecord",
    "CompetitorRating",
    "MatchOutcomeRecord",
    "RatingChangeEvent",
]
