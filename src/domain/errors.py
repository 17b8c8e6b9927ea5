"""Error taxonomy for the rating and bracket engine.

Every error here describes API misuse rather than an internal fault, so they
all derive from ``ValueError`` and carry a message that can be shown to the
person who reported the result.
"""

from __future__ import annotations


class EngineError(ValueError):
    """Base class for recoverable engine errors."""


class InsufficientParticipants(EngineError):
    def __init__(self, count: int) -> None:
        super().__init__(f"At least 2 participants are required to generate a bracket (got {count})")
        self.count = count


class InvalidMatchState(EngineError):
    """Raised when a match is not in a state that accepts the operation."""


class UnknownMatch(InvalidMatchState):
    def __init__(self, match_id: int) -> None:
        super().__init__(f"Match {match_id} does not exist in this bracket")
        self.match_id = match_id


class UnknownCompetitor(EngineError):
    def __init__(self, match_id: int, competitor_id: str) -> None:
        super().__init__(f"Competitor {competitor_id} is not assigned to match {match_id}")
        self.match_id = match_id
        self.competitor_id = competitor_id


class AlreadyCompleted(EngineError):
    def __init__(self, match_id: int) -> None:
        super().__init__(f"Match {match_id} has already been reported")
        self.match_id = match_id


class InvalidScoreOrdering(EngineError):
    def __init__(self, winner_score: int, loser_score: int) -> None:
        super().__init__(
            f"Winner score must be greater than loser score (got {winner_score}-{loser_score})"
        )
        self.winner_score = winner_score
        self.loser_score = loser_score


class BracketAlreadyExists(EngineError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(f"Bracket already exists for tournament {tournament_id}")
        self.tournament_id = tournament_id


class StaleBracketError(EngineError):
    """Another writer saved the bracket since it was loaded."""

    def __init__(self, tournament_id: str, expected_version: int) -> None:
        super().__init__(
            f"Bracket for tournament {tournament_id} changed since version {expected_version}; reload and retry"
        )
        self.tournament_id = tournament_id
        self.expected_version = expected_version


__all__ = [
    "AlreadyCompleted",
    "BracketAlreadyExists",
    "EngineError",
    "InsufficientParticipants",
    "InvalidMatchState",
    "InvalidScoreOrdering",
    "StaleBracketError",
    "UnknownCompetitor",
    "UnknownMatch",
]
