"""Ordering and fixed-size paging of the filtered ledger."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Sequence

from ..errors import OutOfRangeError
from ..models.record import LedgerRecord

ASC = "asc"
DESC = "desc"
DEFAULT_SORT_COLUMN = "date"

# Columns the table can be ordered by; amounts and element compare numerically.
SORTABLE_COLUMNS = (
    "date",
    "nature",
    "type",
    "managing_unit",
    "budget_unit",
    "program",
    "element",
    "creditor",
    "description",
    "revenue",
    "revenue_cancellation",
    "expense",
    "expense_cancellation",
)
NUMERIC_COLUMNS = frozenset(
    {"element", "revenue", "revenue_cancellation", "expense", "expense_cancellation"}
)


def _validate(column: str, direction: str) -> None:
    if column not in SORTABLE_COLUMNS:
        raise ValueError(f"Unknown sort column: {column}")
    if direction not in (ASC, DESC):
        raise ValueError(f"Sort direction must be '{ASC}' or '{DESC}', got {direction!r}")


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction."""

    column: str = DEFAULT_SORT_COLUMN
    direction: str = ASC

    def __post_init__(self) -> None:
        _validate(self.column, self.direction)

    def toggle(self, column: str) -> "SortState":
        """Same column flips direction; a new column starts ascending."""

        if column == self.column:
            return SortState(column, DESC if self.direction == ASC else ASC)
        return SortState(column, ASC)


def _sort_key(record: LedgerRecord, column: str) -> tuple[int, Any]:
    if column == "date":
        value: Any = record.date_iso
    else:
        value = getattr(record, column, None)
    if value is None or value == "":
        # Absent values order before present ones when ascending.
        return (0, Decimal(0) if column in NUMERIC_COLUMNS else "")
    if column in NUMERIC_COLUMNS:
        return (1, Decimal(str(value)))
    return (1, str(value))


def sort_records(
    records: Iterable[LedgerRecord], column: str = DEFAULT_SORT_COLUMN, direction: str = ASC
) -> list[LedgerRecord]:
    """Stable sort; records with equal keys keep their relative order."""

    _validate(column, direction)
    return sorted(records, key=lambda record: _sort_key(record, column), reverse=direction == DESC)


@dataclass(frozen=True)
class Page:
    records: tuple[LedgerRecord, ...]
    index: int
    size: int
    total: int
    page_count: int

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < self.page_count - 1

    @property
    def label(self) -> str:
        return f"Página {self.index + 1} de {max(self.page_count, 1)} ({self.total} registros)"


def page_count(total: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    return math.ceil(total / page_size)


def paginate(records: Sequence[LedgerRecord], page_size: int, page_index: int) -> Page:
    """Return the zero-based ``page_index`` slice.

    Raises :class:`OutOfRangeError` for an index outside the available pages.
    An empty record set has a single empty page at index 0.
    """

    total = len(records)
    count = page_count(total, page_size)
    last_index = max(count - 1, 0)
    if page_index < 0 or page_index > last_index:
        raise OutOfRangeError(page_index, count)
    start = page_index * page_size
    return Page(
        records=tuple(records[start : start + page_size]),
        index=page_index,
        size=page_size,
        total=total,
        page_count=count,
    )


def clamp_page_index(total: int, page_size: int, page_index: int) -> int:
    """Nearest valid page index, for interactive callers."""

    last_index = max(page_count(total, page_size) - 1, 0)
    return min(max(page_index, 0), last_index)
