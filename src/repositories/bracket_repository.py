"""Persistence for bracket graphs with optimistic version checks."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from domain.brackets.models import (
    Bracket,
    BracketMatch,
    BracketStatus,
    MatchScore,
    MatchStatus,
    SeedingPolicy,
)
from domain.common import Competitor, CompetitorKind
from domain.errors import BracketAlreadyExists, StaleBracketError
from models import BracketMatchRecord, BracketRecord
from repositories.base import BaseRepository, utcnow

logger = logging.getLogger(__name__)


def _slots_to_json(match: BracketMatch) -> list[dict[str, Any] | None]:
    payload: list[dict[str, Any] | None] = []
    for slot, seed in zip(match.slots, match.seeds):
        if slot is None:
            payload.append(None)
            continue
        payload.append(
            {
                "competitor_id": slot.competitor_id,
                "kind": slot.kind.value,
                "rating": slot.rating,
                "seed": seed,
            }
        )
    return payload


def _match_values(match: BracketMatch) -> dict[str, Any]:
    return {
        "status": match.status.value,
        "slots_json": _slots_to_json(match),
        "winner_id": match.winner_id,
        "winner_score": None if match.score is None else match.score.winner_score,
        "loser_score": None if match.score is None else match.score.loser_score,
    }


def _record_to_match(record: BracketMatchRecord) -> BracketMatch:
    slots: list[Competitor | None] = []
    seeds: list[int | None] = []
    for item in record.slots_json or [None, None]:
        if item is None:
            slots.append(None)
            seeds.append(None)
            continue
        rating = item.get("rating")
        slots.append(
            Competitor(
                competitor_id=str(item["competitor_id"]),
                kind=CompetitorKind(item["kind"]),
                rating=None if rating is None else int(rating),
            )
        )
        seed = item.get("seed")
        seeds.append(None if seed is None else int(seed))

    score = None
    if record.winner_score is not None and record.loser_score is not None:
        score = MatchScore(record.winner_score, record.loser_score)

    return BracketMatch(
        match_id=record.match_number,
        round_number=record.round_number,
        position=record.position,
        slots=slots,
        seeds=seeds,
        status=MatchStatus(record.status),
        winner_id=record.winner_id,
        score=score,
        next_match_id=record.next_match_number,
        next_slot_index=record.next_slot_index,
    )


class BracketRepository(BaseRepository):
    """SQLAlchemy implementation of the bracket store."""

    def __init__(self) -> None:
        super().__init__(tables=(BracketRecord.__table__, BracketMatchRecord.__table__))

    def _record_id(self, session: Session, tournament_id: str) -> int | None:
        return session.scalar(select(BracketRecord.id).where(BracketRecord.tournament_id == tournament_id))

    def create_bracket(self, session: Session, bracket: Bracket) -> None:
        """Insert a freshly generated bracket; a tournament only ever gets one."""
        if bracket.tournament_id is None:
            raise ValueError("bracket.tournament_id is required to persist a bracket")
        if self._record_id(session, bracket.tournament_id) is not None:
            raise BracketAlreadyExists(bracket.tournament_id)

        record = BracketRecord(
            tournament_id=bracket.tournament_id,
            bracket_size=bracket.bracket_size,
            rounds=bracket.rounds,
            seeding=bracket.seeding.value,
            status=bracket.status.value,
            champion_id=bracket.champion_id,
            version=bracket.version,
        )
        for match in sorted(bracket.matches.values(), key=lambda item: item.match_id):
            record.matches.append(
                BracketMatchRecord(
                    match_number=match.match_id,
                    round_number=match.round_number,
                    position=match.position,
                    next_match_number=match.next_match_id,
                    next_slot_index=match.next_slot_index,
                    **_match_values(match),
                )
            )
        session.add(record)
        session.flush()
        logger.info(
            "created bracket tournament=%s size=%d rounds=%d seeding=%s",
            bracket.tournament_id,
            bracket.bracket_size,
            bracket.rounds,
            bracket.seeding.value,
        )

    def load_bracket(self, session: Session, tournament_id: str) -> Bracket | None:
        record = session.execute(
            select(BracketRecord).where(BracketRecord.tournament_id == tournament_id)
        ).scalar_one_or_none()
        if record is None:
            return None

        matches = {item.match_number: _record_to_match(item) for item in record.matches}
        return Bracket(
            bracket_size=record.bracket_size,
            rounds=record.rounds,
            seeding=SeedingPolicy(record.seeding),
            matches=matches,
            tournament_id=record.tournament_id,
            status=BracketStatus(record.status),
            champion_id=record.champion_id,
            version=record.version,
        )

    def save_bracket(self, session: Session, bracket: Bracket, *, expected_version: int) -> None:
        """Write slot contents and results back if nobody else saved in between."""
        if bracket.tournament_id is None:
            raise ValueError("bracket.tournament_id is required to persist a bracket")
        record_id = self._record_id(session, bracket.tournament_id)
        if record_id is None:
            raise ValueError(f"No stored bracket for tournament {bracket.tournament_id}")

        result = session.execute(
            update(BracketRecord)
            .where(BracketRecord.id == record_id, BracketRecord.version == expected_version)
            .values(
                status=bracket.status.value,
                champion_id=bracket.champion_id,
                version=bracket.version,
                updated_at=utcnow(),
            )
        )
        if result.rowcount != 1:
            raise StaleBracketError(bracket.tournament_id, expected_version)

        for match in bracket.matches.values():
            session.execute(
                update(BracketMatchRecord)
                .where(
                    BracketMatchRecord.bracket_id == record_id,
                    BracketMatchRecord.match_number == match.match_id,
                )
                .values(**_match_values(match))
            )
        session.flush()


BRACKET_REPOSITORY = BracketRepository()
