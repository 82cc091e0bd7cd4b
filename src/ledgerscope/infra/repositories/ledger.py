"""SQLModel implementation of the ledger repository."""

from __future__ import annotations

from typing import Callable, Iterable

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.ledger_entry import LedgerEntry
from ...models.record import LedgerRecord


class SQLModelLedgerRepository:
    """SQLModel-based ledger repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def load_records(self) -> list[LedgerRecord]:
        """Load the full snapshot in insertion order."""
        with self.session_factory() as session:
            statement = select(LedgerEntry).order_by(LedgerEntry.id)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            return [row.to_record() for row in rows]

    def add_records(self, records: Iterable[LedgerRecord]) -> int:
        """Bulk insert records."""
        entries = [LedgerEntry.from_record(record) for record in records]
        if not entries:
            return 0
        with self.session_factory() as session:
            session.add_all(entries)
            session.commit()
        return len(entries)

    def count(self) -> int:
        with self.session_factory() as session:
            return int(session.exec(select(func.count()).select_from(LedgerEntry)).one())
