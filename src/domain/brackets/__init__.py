"""Single-elimination bracket modules."""

from domain.brackets.engine import generate_bracket, report_result, start_match
from domain.brackets.models import (
    Bracket,
    BracketMatch,
    BracketStatus,
    MatchScore,
    MatchStatus,
    SeedingPolicy,
)
from domain.brackets.seeding import next_power_of_two, standard_seed_order

__all__ = [
    "Bracket",
    "BracketMatch",
    "BracketStatus",
    "MatchScore",
    "MatchStatus",
    "SeedingPolicy",
    "generate_bracket",
    "next_power_of_two",
    "report_result",
    "standard_seed_order",
    "start_match",
]
