"""Tests for reporting results and advancing winners."""

from __future__ import annotations

import copy
import random

import pytest

from domain.brackets.engine import generate_bracket, report_result, start_match
from domain.brackets.models import BracketStatus, MatchScore, MatchStatus, SeedingPolicy
from domain.common import Competitor
from domain.errors import (
    AlreadyCompleted,
    InvalidMatchState,
    InvalidScoreOrdering,
    UnknownCompetitor,
    UnknownMatch,
)


def _players(count: int) -> list[Competitor]:
    return [Competitor(f"p{index}") for index in range(1, count + 1)]


def test_reporting_advances_winner_into_successor_slot() -> None:
    bracket = generate_bracket(_players(4), SeedingPolicy.REGISTRATION_ORDER)
    first, second = bracket.round_matches(1)

    report_result(bracket, first.match_id, "p4", (2, 1))

    assert first.status is MatchStatus.COMPLETED
    assert first.winner_id == "p4"
    assert first.loser_id == "p1"
    assert first.score == MatchScore(2, 1)
    final = bracket.final_match
    assert final.slots[0] == Competitor("p4")
    assert final.seeds == [4, None]
    assert final.status is MatchStatus.PARTIALLY_FILLED

    report_result(bracket, second.match_id, "p2", MatchScore(3, 0))
    assert final.status is MatchStatus.READY
    assert [slot.competitor_id for slot in final.slots] == ["p4", "p2"]
    assert bracket.version == 2


def test_completing_final_crowns_champion() -> None:
    bracket = generate_bracket(_players(3), SeedingPolicy.REGISTRATION_ORDER)
    semi = bracket.round_matches(1)[1]

    report_result(bracket, semi.match_id, "p3", (2, 0))
    assert not bracket.is_completed
    report_result(bracket, bracket.final_match.match_id, "p3", (2, 1))

    assert bracket.status is BracketStatus.COMPLETED
    assert bracket.champion_id == "p3"
    assert bracket.playable_matches() == []


def test_duplicate_report_is_rejected_and_state_unchanged() -> None:
    bracket = generate_bracket(_players(4), SeedingPolicy.REGISTRATION_ORDER)
    match_id = bracket.round_matches(1)[0].match_id
    report_result(bracket, match_id, "p1", (2, 0))
    snapshot = copy.deepcopy(bracket)

    with pytest.raises(AlreadyCompleted):
        report_result(bracket, match_id, "p1", (2, 0))
    with pytest.raises(AlreadyCompleted):
        report_result(bracket, match_id, "p4", (2, 0))

    assert bracket == snapshot


def test_bye_match_cannot_be_reported() -> None:
    bracket = generate_bracket(_players(3), SeedingPolicy.REGISTRATION_ORDER)
    bye = bracket.round_matches(1)[0]
    assert bye.status is MatchStatus.BYE_COMPLETED

    with pytest.raises(AlreadyCompleted):
        report_result(bracket, bye.match_id, "p1")


def test_match_waiting_for_opponent_rejects_results() -> None:
    bracket = generate_bracket(_players(3), SeedingPolicy.REGISTRATION_ORDER)
    final = bracket.final_match
    assert final.status is MatchStatus.PARTIALLY_FILLED

    with pytest.raises(InvalidMatchState):
        report_result(bracket, final.match_id, "p1", (2, 0))


def test_unknown_match_is_rejected() -> None:
    bracket = generate_bracket(_players(4), SeedingPolicy.REGISTRATION_ORDER)
    with pytest.raises(UnknownMatch):
        report_result(bracket, 99, "p1")
    with pytest.raises(InvalidMatchState):
        report_result(bracket, 99, "p1")


def test_winner_must_be_assigned_to_match() -> None:
    bracket = generate_bracket(_players(4), SeedingPolicy.REGISTRATION_ORDER)
    match = bracket.round_matches(1)[0]

    with pytest.raises(UnknownCompetitor):
        report_result(bracket, match.match_id, "p2", (2, 0))
    assert match.status is MatchStatus.READY
    assert bracket.version == 0


def test_score_must_favour_the_winner() -> None:
    bracket = generate_bracket(_players(2), SeedingPolicy.REGISTRATION_ORDER)
    final = bracket.final_match

    with pytest.raises(InvalidScoreOrdering):
        report_result(bracket, final.match_id, "p1", (1, 1))
    assert final.status is MatchStatus.READY
    assert final.winner_id is None


def test_result_without_score_is_accepted() -> None:
    bracket = generate_bracket(_players(2), SeedingPolicy.REGISTRATION_ORDER)
    report_result(bracket, bracket.final_match.match_id, "p2")
    assert bracket.champion_id == "p2"
    assert bracket.final_match.score is None


def test_start_match_moves_ready_match_into_play() -> None:
    bracket = generate_bracket(_players(4), SeedingPolicy.REGISTRATION_ORDER)
    match = bracket.round_matches(1)[0]

    start_match(bracket, match.match_id)
    assert match.status is MatchStatus.IN_PROGRESS
    with pytest.raises(InvalidMatchState):
        start_match(bracket, match.match_id)

    report_result(bracket, match.match_id, "p1", (2, 0))
    assert match.status is MatchStatus.COMPLETED
    with pytest.raises(InvalidMatchState):
        start_match(bracket, bracket.final_match.match_id)


def test_random_paths_always_produce_one_champion() -> None:
    rng = random.Random(2026)
    for trial in range(60):
        count = rng.randint(2, 33)
        players = _players(count)
        bracket = generate_bracket(players, SeedingPolicy.RANDOM, rng=rng)
        finals = [match for match in bracket.matches.values() if match.next_match_id is None]
        assert len(finals) == 1

        reports = 0
        while not bracket.is_completed:
            playable = bracket.playable_matches()
            assert playable, f"trial={trial} stalled with no playable matches"
            match = rng.choice(playable)
            winner = rng.choice([slot for slot in match.slots if slot is not None])
            report_result(bracket, match.match_id, winner.competitor_id, (rng.randint(1, 5), 0))
            reports += 1

        assert reports == count - 1
        assert bracket.champion_id == bracket.final_match.winner_id
        assert bracket.champion_id in {player.competitor_id for player in players}
        assert all(match.status.is_finished for match in bracket.matches.values())
        eliminated = {match.loser_id for match in bracket.matches.values() if match.loser_id is not None}
        assert len(eliminated) == count - 1
        assert bracket.champion_id not in eliminated
