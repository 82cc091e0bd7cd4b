"""Repository protocols for the ledger data source."""

from .ledger import LedgerRepository

__all__ = ["LedgerRepository"]
