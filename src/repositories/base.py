"""Shared schema scaffold for repositories."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import Table
from sqlalchemy.engine import Engine


class BaseRepository:
    """Owns a set of tables and creates them on demand."""

    def __init__(self, *, tables: Sequence[Table]) -> None:
        self.tables = tuple(tables)

    def ensure_schema(self, engine: Engine) -> None:
        """Create required tables and indexes when missing."""
        with engine.begin() as connection:
            for table in self.tables:
                table.create(bind=connection, checkfirst=True)


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)
