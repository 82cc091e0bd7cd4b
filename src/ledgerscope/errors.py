"""Exception types raised by the ledger engine."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger engine errors."""


class MalformedRecordError(LedgerError, ValueError):
    """A source row carries a value that cannot be interpreted.

    Raised by the value parsers. :func:`record_from_mapping` catches it,
    substitutes the field default and logs a warning.
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        super().__init__(f"{field}={value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason


class OutOfRangeError(LedgerError, IndexError):
    """A page index outside ``[0, page_count)`` was requested."""

    def __init__(self, page_index: int, page_count: int) -> None:
        super().__init__(
            f"page index {page_index} is out of range for {page_count} page(s)"
        )
        self.page_index = page_index
        self.page_count = page_count
