"""Ledger repository protocol."""

from __future__ import annotations

from typing import Iterable, Protocol

from ...models.record import LedgerRecord


class LedgerRepository(Protocol):
    """Data source supplying the full ledger snapshot."""

    def load_records(self) -> list[LedgerRecord]:
        """Return every ledger record in source order."""
        ...

    def add_records(self, records: Iterable[LedgerRecord]) -> int:
        """Persist records and return how many were written."""
        ...

    def count(self) -> int:
        """Return the number of stored records."""
        ...
