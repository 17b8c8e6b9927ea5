"""Result-reporting pipeline: bracket advancement plus rating updates.

Every public entry point runs in one transaction. Bracket advancement and the
rating update commit together or not at all, so a confirmed result can never
leave ratings behind.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlalchemy.orm import Session

from domain.brackets.engine import generate_bracket, report_result, start_match
from domain.brackets.models import Bracket, BracketMatch, MatchScore, SeedingPolicy
from domain.common import GLOBAL_SCOPE, Competitor, MatchOutcome
from domain.ratings.elo.calculator import EloCalculator
from domain.ratings.protocol import BracketStore, OutcomeStore, RatingStore
from domain.ratings.rating import Rating, RatingChange
from domain.ratings.tiers import tier_changes

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@dataclass(frozen=True)
class ReportedResult:
    bracket: Bracket
    outcome: MatchOutcome
    rating_changes: list[RatingChange]


@dataclass(frozen=True)
class ProcessingSummary:
    """Outcome of one pending-outcome batch."""

    processed_outcomes: int
    rating_changes: int
    tracked_competitors: int
    dry_run: bool


def scopes_for(outcome: MatchOutcome) -> list[str]:
    """Game-scoped results also move the global rating."""
    if outcome.scope == GLOBAL_SCOPE:
        return [GLOBAL_SCOPE]
    return [outcome.scope, GLOBAL_SCOPE]


def outcome_for_match(
    match: BracketMatch,
    *,
    scope: str = GLOBAL_SCOPE,
    match_ref: str | None = None,
) -> MatchOutcome:
    """Build the rating input for a completed bracket match."""
    loser_id = match.loser_id
    if match.winner_id is None or loser_id is None or match.score is None:
        raise ValueError(f"Match {match.match_id} has no played result to rate")
    kind = next(slot.kind for slot in match.slots if slot is not None)
    return MatchOutcome(
        winner_id=match.winner_id,
        loser_id=loser_id,
        winner_score=match.score.winner_score,
        loser_score=match.score.loser_score,
        scope=scope,
        kind=kind,
        match_ref=match_ref,
    )


class ReportingService:
    """Runs engine operations against injected persistence stores."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        ratings: RatingStore,
        brackets: BracketStore,
        outcomes: OutcomeStore,
        calculator: EloCalculator | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.ratings = ratings
        self.brackets = brackets
        self.outcomes = outcomes
        self.calculator = calculator or EloCalculator()

    def create_bracket(
        self,
        tournament_id: str,
        registrants: Sequence[Competitor],
        seeding: SeedingPolicy | str = SeedingPolicy.RANDOM,
        *,
        rng: random.Random | None = None,
    ) -> Bracket:
        bracket = generate_bracket(registrants, seeding, tournament_id=tournament_id, rng=rng)
        with self.session_factory() as session:
            try:
                self.brackets.create_bracket(session, bracket)
                session.commit()
            except Exception:
                session.rollback()
                raise
        return bracket

    def start_match(self, tournament_id: str, match_id: int) -> Bracket:
        with self.session_factory() as session:
            try:
                bracket = self._load(session, tournament_id)
                expected_version = bracket.version
                start_match(bracket, match_id)
                self.brackets.save_bracket(session, bracket, expected_version=expected_version)
                session.commit()
            except Exception:
                session.rollback()
                raise
        return bracket

    def report_bracket_result(
        self,
        tournament_id: str,
        match_id: int,
        winner_id: str,
        score: MatchScore | tuple[int, int],
        *,
        scope: str = GLOBAL_SCOPE,
    ) -> ReportedResult:
        """Advance the bracket and apply the rating update atomically."""
        if not isinstance(score, MatchScore):
            score = MatchScore(*score)

        with self.session_factory() as session:
            try:
                bracket = self._load(session, tournament_id)
                expected_version = bracket.version
                report_result(bracket, match_id, winner_id, score)
                self.brackets.save_bracket(session, bracket, expected_version=expected_version)

                outcome = outcome_for_match(
                    bracket.match(match_id),
                    scope=scope,
                    match_ref=f"{tournament_id}:{match_id}",
                )
                self.outcomes.record_outcome(session, outcome, processed=True)
                changes = self.apply_outcome(session, outcome)
                session.commit()
            except Exception:
                session.rollback()
                raise

        if bracket.is_completed:
            logger.info("tournament=%s completed champion=%s", tournament_id, bracket.champion_id)
        return ReportedResult(bracket=bracket, outcome=outcome, rating_changes=changes)

    def apply_outcome(self, session: Session, outcome: MatchOutcome) -> list[RatingChange]:
        """Apply ``outcome`` to every affected scope inside the caller's transaction."""
        changes: list[RatingChange] = []
        for scope in scopes_for(outcome):
            scoped = outcome if outcome.scope == scope else outcome.in_scope(scope)
            winner_rating, loser_rating = self._load_ratings(session, scoped)
            change = self.calculator.apply_match_outcome(scoped, winner_rating, loser_rating)
            self.ratings.save_rating(session, change.winner_after)
            self.ratings.save_rating(session, change.loser_after)
            changes.append(change)

            logger.debug(
                "match_ref=%s scope=%s winner=%s %+d loser=%s %+d",
                change.match_ref,
                scope,
                change.winner_id,
                change.winner_delta,
                change.loser_id,
                change.loser_delta,
            )
            for move in tier_changes(change):
                logger.info(
                    "tier change competitor=%s scope=%s %s -> %s",
                    move.competitor_id,
                    move.scope,
                    move.previous.name,
                    move.current.name,
                )

        self.ratings.insert_rating_changes(session, changes)
        return changes

    def process_pending_outcomes(self, *, limit: int = 50, dry_run: bool = False) -> ProcessingSummary:
        """Apply queued outcomes oldest first.

        Ratings depend on the order results are applied in, so the batch stops
        at the first failure instead of skipping ahead.
        """
        processed = 0
        change_count = 0
        with self.session_factory() as session:
            try:
                pending = self.outcomes.fetch_pending_outcomes(session, limit=limit)
                for outcome_id, outcome in pending:
                    change_count += len(self.apply_outcome(session, outcome))
                    self.outcomes.mark_processed(session, outcome_id)
                    processed += 1
                tracked = self.ratings.count_rated_competitors(session)
                if dry_run:
                    session.rollback()
                else:
                    session.commit()
            except Exception:
                session.rollback()
                logger.exception("pending outcome batch failed after %d outcomes", processed)
                raise

        logger.info(
            "processed_outcomes=%d rating_changes=%d dry_run=%s", processed, change_count, dry_run
        )
        return ProcessingSummary(
            processed_outcomes=processed,
            rating_changes=change_count,
            tracked_competitors=tracked,
            dry_run=dry_run,
        )

    def _load(self, session: Session, tournament_id: str) -> Bracket:
        bracket = self.brackets.load_bracket(session, tournament_id)
        if bracket is None:
            raise ValueError(f"No bracket exists for tournament {tournament_id}")
        return bracket

    def _load_ratings(self, session: Session, outcome: MatchOutcome) -> tuple[Rating, Rating]:
        loaded: dict[str, Rating] = {}
        # Lock rows in a stable order so concurrent reports cannot deadlock.
        for competitor in sorted((outcome.winner, outcome.loser), key=lambda item: item.competitor_id):
            rating = self.ratings.get_rating(session, competitor, outcome.scope, for_update=True)
            if rating is None:
                rating = self.calculator.new_rating(
                    competitor,
                    outcome.scope,
                    recorded_at=outcome.completed_at,
                )
            loaded[competitor.competitor_id] = rating
        return loaded[outcome.winner_id], loaded[outcome.loser_id]


__all__ = [
    "ProcessingSummary",
    "ReportedResult",
    "ReportingService",
    "outcome_for_match",
    "scopes_for",
]
