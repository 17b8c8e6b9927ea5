"""Shared fixtures for persistence and pipeline tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from repositories.bracket_repository import BracketRepository
from repositories.outcome_repository import OutcomeRepository
from repositories.rating_repository import RatingRepository


@pytest.fixture
def rating_repository() -> RatingRepository:
    return RatingRepository()


@pytest.fixture
def bracket_repository() -> BracketRepository:
    return BracketRepository()


@pytest.fixture
def outcome_repository() -> OutcomeRepository:
    return OutcomeRepository()


@pytest.fixture
def engine(
    rating_repository: RatingRepository,
    bracket_repository: BracketRepository,
    outcome_repository: OutcomeRepository,
) -> Iterator[Engine]:
    engine = create_db_engine("sqlite://")
    for repository in (rating_repository, bracket_repository, outcome_repository):
        repository.ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)
