"""Ledger record types and SQLModel table exports."""

from .ledger_entry import LedgerEntry
from .record import LedgerRecord, record_from_mapping

__all__ = [
    "LedgerEntry",
    "LedgerRecord",
    "record_from_mapping",
]
