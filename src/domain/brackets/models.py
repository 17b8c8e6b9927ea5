"""In-memory single-elimination bracket graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from domain.common import Competitor
from domain.errors import InvalidScoreOrdering, UnknownMatch


class SeedingPolicy(str, Enum):
    RANDOM = "random"
    RATING = "rating"
    REGISTRATION_ORDER = "registration_order"


class MatchStatus(str, Enum):
    EMPTY = "empty"
    PARTIALLY_FILLED = "partially_filled"
    READY = "ready"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BYE_COMPLETED = "bye_completed"

    @property
    def is_finished(self) -> bool:
        return self in (MatchStatus.COMPLETED, MatchStatus.BYE_COMPLETED)


class BracketStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class MatchScore:
    winner_score: int
    loser_score: int

    def __post_init__(self) -> None:
        if self.winner_score <= self.loser_score:
            raise InvalidScoreOrdering(self.winner_score, self.loser_score)


@dataclass
class BracketMatch:
    match_id: int
    round_number: int
    position: int
    slots: list[Competitor | None] = field(default_factory=lambda: [None, None])
    seeds: list[int | None] = field(default_factory=lambda: [None, None])
    status: MatchStatus = MatchStatus.EMPTY
    winner_id: str | None = None
    score: MatchScore | None = None
    next_match_id: int | None = None
    next_slot_index: int | None = None

    @property
    def is_final(self) -> bool:
        return self.next_match_id is None

    @property
    def filled_slots(self) -> int:
        return sum(1 for slot in self.slots if slot is not None)

    def competitor(self, competitor_id: str) -> Competitor | None:
        for slot in self.slots:
            if slot is not None and slot.competitor_id == competitor_id:
                return slot
        return None

    @property
    def loser_id(self) -> str | None:
        if self.status is not MatchStatus.COMPLETED:
            return None
        for slot in self.slots:
            if slot is not None and slot.competitor_id != self.winner_id:
                return slot.competitor_id
        return None

    def refresh_fill_status(self) -> None:
        """Recompute the pre-play status from the number of filled slots."""
        if self.status in (MatchStatus.IN_PROGRESS, MatchStatus.COMPLETED, MatchStatus.BYE_COMPLETED):
            return
        filled = self.filled_slots
        if filled == 2:
            self.status = MatchStatus.READY
        elif filled == 1:
            self.status = MatchStatus.PARTIALLY_FILLED
        else:
            self.status = MatchStatus.EMPTY


@dataclass
class Bracket:
    """Arena of bracket matches indexed by match id.

    The graph is fixed at generation time; only slot contents, statuses and
    results change afterwards. ``version`` increases on every mutation so the
    persistence layer can detect concurrent writers.
    """

    bracket_size: int
    rounds: int
    seeding: SeedingPolicy
    matches: dict[int, BracketMatch]
    tournament_id: str | None = None
    status: BracketStatus = BracketStatus.IN_PROGRESS
    champion_id: str | None = None
    version: int = 0

    def match(self, match_id: int) -> BracketMatch:
        try:
            return self.matches[match_id]
        except KeyError as exc:
            raise UnknownMatch(match_id) from exc

    def round_matches(self, round_number: int) -> list[BracketMatch]:
        return sorted(
            (match for match in self.matches.values() if match.round_number == round_number),
            key=lambda match: match.position,
        )

    @property
    def final_match(self) -> BracketMatch:
        finals = [match for match in self.matches.values() if match.is_final]
        if len(finals) != 1:
            raise ValueError(f"Bracket has {len(finals)} matches without a successor; expected 1")
        return finals[0]

    @property
    def is_completed(self) -> bool:
        return self.status is BracketStatus.COMPLETED

    def playable_matches(self) -> list[BracketMatch]:
        """Matches that currently accept a result, in bracket order."""
        return [
            match
            for match in sorted(self.matches.values(), key=lambda item: item.match_id)
            if match.status in (MatchStatus.READY, MatchStatus.IN_PROGRESS)
        ]

    def predecessors(self, match_id: int) -> list[BracketMatch]:
        return sorted(
            (match for match in self.matches.values() if match.next_match_id == match_id),
            key=lambda match: match.next_slot_index or 0,
        )
