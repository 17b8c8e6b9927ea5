"""End-to-end tests for result reporting and the pending-outcome batch."""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta

import pytest

from domain.brackets.models import BracketStatus, MatchStatus, SeedingPolicy
from domain.common import GLOBAL_SCOPE, Competitor, CompetitorKind, MatchOutcome
from domain.errors import AlreadyCompleted, BracketAlreadyExists, UnknownCompetitor
from domain.pipeline import ReportingService, outcome_for_match, scopes_for
from domain.ratings.elo.calculator import EloCalculator, EloParameters
from domain.ratings.rating import Rating

T0 = datetime(2026, 5, 1, 20, 0, 0)


@pytest.fixture
def service(session_factory, rating_repository, bracket_repository, outcome_repository) -> ReportingService:
    return ReportingService(
        session_factory,
        ratings=rating_repository,
        brackets=bracket_repository,
        outcomes=outcome_repository,
    )


def _players(*names: str) -> list[Competitor]:
    return [Competitor(name) for name in names]


def test_scopes_for_game_outcome_includes_global() -> None:
    assert scopes_for(MatchOutcome("a", "b", 1, 0)) == [GLOBAL_SCOPE]
    assert scopes_for(MatchOutcome("a", "b", 1, 0, scope="valorant")) == ["valorant", GLOBAL_SCOPE]


def test_outcome_for_match_requires_played_result(service) -> None:
    bracket = service.create_bracket("cup", _players("a", "b", "c"), SeedingPolicy.REGISTRATION_ORDER)

    with pytest.raises(ValueError, match="no played result"):
        outcome_for_match(bracket.match(1))


def test_create_bracket_persists_and_refuses_duplicates(service, session_factory, bracket_repository) -> None:
    bracket = service.create_bracket("cup", _players("a", "b", "c", "d", "e"), rng=random.Random(7))

    with session_factory() as session:
        assert bracket_repository.load_bracket(session, "cup") == bracket
    assert bracket.seeding is SeedingPolicy.RANDOM

    with pytest.raises(BracketAlreadyExists):
        service.create_bracket("cup", _players("a", "b"))


def test_reporting_updates_bracket_and_both_scopes(service, session_factory, rating_repository) -> None:
    service.create_bracket("cup", _players("a", "b", "c", "d"), SeedingPolicy.REGISTRATION_ORDER)

    result = service.report_bracket_result("cup", 1, "a", (2, 1), scope="valorant")

    assert [change.scope for change in result.rating_changes] == ["valorant", GLOBAL_SCOPE]
    for change in result.rating_changes:
        assert (change.winner_post_rating, change.loser_post_rating) == (1216, 1184)
    assert result.outcome.match_ref == "cup:1"
    assert result.bracket.final_match.slots[0] == Competitor("a")

    with session_factory() as session:
        for scope in ("valorant", GLOBAL_SCOPE):
            winner = rating_repository.get_rating(session, Competitor("a"), scope)
            loser = rating_repository.get_rating(session, Competitor("d"), scope)
            assert winner.current_rating == 1216
            assert winner.matches_played == 1
            assert loser.current_rating == 1184
            assert loser.highest_rating == 1200
        assert rating_repository.count_rated_competitors(session) == 2


def test_full_tournament_crowns_champion(service, session_factory, bracket_repository, rating_repository) -> None:
    service.create_bracket("cup", _players("a", "b", "c"), SeedingPolicy.REGISTRATION_ORDER)

    service.start_match("cup", 2)
    service.report_bracket_result("cup", 2, "c", (3, 2))
    result = service.report_bracket_result("cup", 3, "c", (2, 0))

    assert result.bracket.status is BracketStatus.COMPLETED
    assert result.bracket.champion_id == "c"
    with session_factory() as session:
        stored = bracket_repository.load_bracket(session, "cup")
        champion = rating_repository.get_rating(session, Competitor("c"), GLOBAL_SCOPE)
    assert stored.champion_id == "c"
    assert stored.version == result.bracket.version
    assert champion.matches_played == 2
    assert champion.highest_rating == max(entry.rating for entry in champion.history)


def test_rejected_report_changes_nothing(service, session_factory, bracket_repository, rating_repository) -> None:
    service.create_bracket("cup", _players("a", "b", "c", "d"), SeedingPolicy.REGISTRATION_ORDER)
    service.report_bracket_result("cup", 1, "a", (2, 0))

    with pytest.raises(AlreadyCompleted):
        service.report_bracket_result("cup", 1, "a", (2, 0))
    with pytest.raises(UnknownCompetitor):
        service.report_bracket_result("cup", 2, "a", (2, 0))

    with session_factory() as session:
        bracket = bracket_repository.load_bracket(session, "cup")
        rating = rating_repository.get_rating(session, Competitor("a"), GLOBAL_SCOPE)
    assert bracket.version == 1
    assert bracket.match(2).status is MatchStatus.READY
    assert rating.matches_played == 1


def test_rating_failure_rolls_back_bracket_advancement(
    session_factory, rating_repository, bracket_repository, outcome_repository
) -> None:
    class ExplodingCalculator(EloCalculator):
        def apply_match_outcome(self, *args, **kwargs):
            raise RuntimeError("rating store unavailable")

    service = ReportingService(
        session_factory,
        ratings=rating_repository,
        brackets=bracket_repository,
        outcomes=outcome_repository,
        calculator=ExplodingCalculator(),
    )
    service.create_bracket("cup", _players("a", "b"), SeedingPolicy.REGISTRATION_ORDER)

    with pytest.raises(RuntimeError):
        service.report_bracket_result("cup", 1, "a", (2, 0))

    with session_factory() as session:
        bracket = bracket_repository.load_bracket(session, "cup")
        assert outcome_repository.fetch_pending_outcomes(session) == []
        assert rating_repository.count_rated_competitors(session) == 0
    assert bracket.final_match.status is MatchStatus.READY
    assert bracket.champion_id is None
    assert bracket.version == 0


def test_unknown_tournament_is_rejected(service) -> None:
    with pytest.raises(ValueError, match="No bracket exists"):
        service.report_bracket_result("missing", 1, "a", (1, 0))


def _queue(session_factory, outcome_repository, outcomes: list[MatchOutcome]) -> None:
    with session_factory() as session:
        for outcome in outcomes:
            outcome_repository.record_outcome(session, outcome)
        session.commit()


def test_process_pending_outcomes_applies_in_order(service, session_factory, outcome_repository, rating_repository) -> None:
    _queue(
        session_factory,
        outcome_repository,
        [
            MatchOutcome("b", "a", 2, 0, completed_at=T0 + timedelta(hours=1)),
            MatchOutcome("a", "b", 2, 1, completed_at=T0),
            MatchOutcome("a", "c", 1, 0, scope="chess", completed_at=T0 + timedelta(hours=2)),
        ],
    )

    summary = service.process_pending_outcomes()

    assert summary.processed_outcomes == 3
    assert summary.rating_changes == 4
    assert summary.tracked_competitors == 3
    assert summary.dry_run is False
    with session_factory() as session:
        assert outcome_repository.fetch_pending_outcomes(session) == []
        a_global = rating_repository.get_rating(session, Competitor("a"), GLOBAL_SCOPE)
        a_chess = rating_repository.get_rating(session, Competitor("a"), "chess")
    # a beats b (1216), loses to b, then beats c.
    assert [entry.rating for entry in a_global.history][:2] == [1200, 1216]
    assert a_global.matches_played == 3
    assert a_global.highest_rating == max(entry.rating for entry in a_global.history)
    assert a_chess.current_rating == 1216
    assert [entry.recorded_at for entry in a_global.history][1:] == [
        T0,
        T0 + timedelta(hours=1),
        T0 + timedelta(hours=2),
    ]


def test_process_pending_outcomes_respects_limit(service, session_factory, outcome_repository) -> None:
    _queue(
        session_factory,
        outcome_repository,
        [MatchOutcome(f"w{index}", f"l{index}", 1, 0, completed_at=T0 + timedelta(minutes=index)) for index in range(5)],
    )

    first = service.process_pending_outcomes(limit=2)
    second = service.process_pending_outcomes(limit=50)
    third = service.process_pending_outcomes()

    assert (first.processed_outcomes, second.processed_outcomes, third.processed_outcomes) == (2, 3, 0)


def test_dry_run_writes_nothing(service, session_factory, outcome_repository, rating_repository) -> None:
    _queue(session_factory, outcome_repository, [MatchOutcome("a", "b", 1, 0, completed_at=T0)])

    summary = service.process_pending_outcomes(dry_run=True)

    assert summary.dry_run is True
    assert summary.processed_outcomes == 1
    assert summary.tracked_competitors == 2
    with session_factory() as session:
        assert len(outcome_repository.fetch_pending_outcomes(session)) == 1
        assert rating_repository.count_rated_competitors(session) == 0


def test_experience_mode_uses_provisional_k(
    session_factory, rating_repository, bracket_repository, outcome_repository
) -> None:
    service = ReportingService(
        session_factory,
        ratings=rating_repository,
        brackets=bracket_repository,
        outcomes=outcome_repository,
        calculator=EloCalculator(EloParameters(k_factor_mode="experience")),
    )
    with session_factory() as session:
        rating_repository.save_rating(
            session,
            Rating(
                competitor_id="veteran",
                kind=CompetitorKind.PLAYER,
                scope=GLOBAL_SCOPE,
                current_rating=1200,
                matches_played=100,
                highest_rating=1200,
            ),
        )
        session.commit()

    _queue(session_factory, outcome_repository, [MatchOutcome("veteran", "rookie", 1, 0, completed_at=T0)])
    service.process_pending_outcomes()

    with session_factory() as session:
        veteran = rating_repository.get_rating(session, Competitor("veteran"), GLOBAL_SCOPE)
    assert veteran.current_rating == 1220


def test_tier_changes_are_logged(service, session_factory, rating_repository, outcome_repository, caplog) -> None:
    with session_factory() as session:
        rating_repository.save_rating(
            session, Rating.initial(Competitor("climber"), GLOBAL_SCOPE, rating=1395, recorded_at=T0)
        )
        session.commit()
    _queue(session_factory, outcome_repository, [MatchOutcome("climber", "x", 1, 0, completed_at=T0)])

    with caplog.at_level(logging.INFO, logger="domain.pipeline"):
        service.process_pending_outcomes()

    assert any("tier change competitor=climber" in message for message in caplog.messages)
