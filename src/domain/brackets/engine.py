"""Single-elimination bracket generation and result-driven advancement."""

from __future__ import annotations

import random
from collections.abc import Sequence

from domain.brackets.models import (
    Bracket,
    BracketMatch,
    BracketStatus,
    MatchScore,
    MatchStatus,
    SeedingPolicy,
)
from domain.brackets.seeding import next_power_of_two, order_registrants, standard_seed_order
from domain.common import Competitor
from domain.errors import (
    AlreadyCompleted,
    InsufficientParticipants,
    InvalidMatchState,
    UnknownCompetitor,
)


def generate_bracket(
    registrants: Sequence[Competitor],
    seeding: SeedingPolicy | str = SeedingPolicy.REGISTRATION_ORDER,
    *,
    tournament_id: str | None = None,
    rng: random.Random | None = None,
) -> Bracket:
    """Build a seeded bracket and resolve every bye before returning."""
    policy = SeedingPolicy(seeding)
    entrants = list(registrants)
    if len(entrants) < 2:
        raise InsufficientParticipants(len(entrants))

    competitor_ids = [competitor.competitor_id for competitor in entrants]
    if len(competitor_ids) != len(set(competitor_ids)):
        raise ValueError(f"Duplicate competitors in registrant list: {competitor_ids}")

    seeded = order_registrants(entrants, policy, rng=rng)
    bracket_size = next_power_of_two(len(seeded))
    rounds = bracket_size.bit_length() - 1

    matches: dict[int, BracketMatch] = {}
    round_ids: list[list[int]] = []
    next_id = 1
    for round_number in range(1, rounds + 1):
        ids: list[int] = []
        for position in range(bracket_size >> round_number):
            matches[next_id] = BracketMatch(match_id=next_id, round_number=round_number, position=position)
            ids.append(next_id)
            next_id += 1
        round_ids.append(ids)

    for round_index in range(rounds - 1):
        for position, match_id in enumerate(round_ids[round_index]):
            match = matches[match_id]
            match.next_match_id = round_ids[round_index + 1][position // 2]
            match.next_slot_index = position % 2

    for slot_number, seed in enumerate(standard_seed_order(bracket_size)):
        if seed > len(seeded):
            continue
        match = matches[round_ids[0][slot_number // 2]]
        match.slots[slot_number % 2] = seeded[seed - 1]
        match.seeds[slot_number % 2] = seed

    for match in matches.values():
        match.refresh_fill_status()

    bracket = Bracket(
        bracket_size=bracket_size,
        rounds=rounds,
        seeding=policy,
        matches=matches,
        tournament_id=tournament_id,
    )
    _resolve_byes(bracket)
    return bracket


def start_match(bracket: Bracket, match_id: int) -> Bracket:
    """Move a ready match into play."""
    match = bracket.match(match_id)
    if match.status is not MatchStatus.READY:
        raise InvalidMatchState(
            f"Match {match_id} is {match.status.value}; only ready matches can be started"
        )
    match.status = MatchStatus.IN_PROGRESS
    bracket.version += 1
    return bracket


def report_result(
    bracket: Bracket,
    match_id: int,
    winner_id: str,
    score: MatchScore | tuple[int, int] | None = None,
) -> Bracket:
    """Record a match result and move the winner to its successor slot.

    Validation happens before any mutation, so a rejected report leaves the
    bracket untouched.
    """
    match = bracket.match(match_id)
    if match.status.is_finished:
        raise AlreadyCompleted(match_id)
    if match.status not in (MatchStatus.READY, MatchStatus.IN_PROGRESS):
        raise InvalidMatchState(
            f"Match {match_id} is {match.status.value}; results need both competitors assigned"
        )

    winner = match.competitor(winner_id)
    if winner is None:
        raise UnknownCompetitor(match_id, winner_id)

    if score is not None and not isinstance(score, MatchScore):
        score = MatchScore(*score)

    match.status = MatchStatus.COMPLETED
    match.winner_id = winner.competitor_id
    match.score = score
    _advance(bracket, match, winner)
    bracket.version += 1
    return bracket


def _advance(bracket: Bracket, match: BracketMatch, winner: Competitor) -> None:
    if match.next_match_id is None:
        bracket.status = BracketStatus.COMPLETED
        bracket.champion_id = winner.competitor_id
        return

    slot_index = match.next_slot_index or 0
    successor = bracket.matches[match.next_match_id]
    successor.slots[slot_index] = winner
    successor.seeds[slot_index] = _seed_of(match, winner)
    successor.refresh_fill_status()

    if _slot_is_dead(bracket, successor, 1 - slot_index):
        _complete_with_bye(bracket, successor, winner)


def _complete_with_bye(bracket: Bracket, match: BracketMatch, winner: Competitor) -> None:
    match.status = MatchStatus.BYE_COMPLETED
    match.winner_id = winner.competitor_id
    _advance(bracket, match, winner)


def _resolve_byes(bracket: Bracket) -> None:
    for round_number in range(1, bracket.rounds + 1):
        for match in bracket.round_matches(round_number):
            if match.status.is_finished:
                continue
            live = [index for index in (0, 1) if not _slot_is_dead(bracket, match, index)]
            if len(live) == 2:
                continue
            if not live:
                # Nobody can ever reach this match; its successor slot is dead too.
                match.status = MatchStatus.BYE_COMPLETED
                continue
            survivor = match.slots[live[0]]
            if survivor is not None:
                _complete_with_bye(bracket, match, survivor)


def _slot_is_dead(bracket: Bracket, match: BracketMatch, slot_index: int) -> bool:
    """True when ``slot_index`` of ``match`` can never receive a competitor."""
    if match.slots[slot_index] is not None:
        return False
    if match.round_number == 1:
        return True
    for feeder in bracket.predecessors(match.match_id):
        if feeder.next_slot_index == slot_index:
            return feeder.status is MatchStatus.BYE_COMPLETED and feeder.winner_id is None
    return True


def _seed_of(match: BracketMatch, competitor: Competitor) -> int | None:
    for slot, seed in zip(match.slots, match.seeds):
        if slot is not None and slot.competitor_id == competitor.competitor_id:
            return seed
    return None


__all__ = ["generate_bracket", "report_result", "start_match"]
