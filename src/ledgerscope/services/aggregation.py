"""Totals, monthly series and ranked groupings over a record set."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Hashable, Iterable, Optional, TypeVar

from ..models.record import ZERO, LedgerRecord

K = TypeVar("K", bound=Hashable)

NO_DATE_BUCKET = "N/A"
TOP_CREDITORS_LIMIT = 10

_GROUP_ORDERS = ("encounter", "key", "value_desc")


@dataclass(frozen=True)
class Totals:
    """Summed amounts of a record set."""

    revenue: Decimal = ZERO
    revenue_cancellation: Decimal = ZERO
    expense: Decimal = ZERO
    expense_cancellation: Decimal = ZERO

    def __add__(self, other: "Totals") -> "Totals":
        if not isinstance(other, Totals):
            return NotImplemented
        return Totals(
            revenue=self.revenue + other.revenue,
            revenue_cancellation=self.revenue_cancellation + other.revenue_cancellation,
            expense=self.expense + other.expense,
            expense_cancellation=self.expense_cancellation + other.expense_cancellation,
        )

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "revenue": self.revenue,
            "revenue_cancellation": self.revenue_cancellation,
            "expense": self.expense,
            "expense_cancellation": self.expense_cancellation,
        }


@dataclass(frozen=True)
class MonthlyTotals:
    month: str
    revenue: Decimal
    expense: Decimal


@dataclass(frozen=True)
class AnalysisSummary:
    """Everything the financial-analysis charts need for one filtered set."""

    totals: Totals
    expense_by_unit: list[tuple[str, Decimal]]
    monthly: list[MonthlyTotals]
    top_creditors: list[tuple[str, Decimal]]

    @property
    def is_empty(self) -> bool:
        return not (self.expense_by_unit or self.monthly or self.top_creditors)


def _amount(record: LedgerRecord, field: str) -> Decimal:
    value = getattr(record, field, None)
    return value if isinstance(value, Decimal) else Decimal(str(value or 0))


def compute_totals(records: Iterable[LedgerRecord]) -> Totals:
    """Plain sums of the four amount columns; missing amounts count as zero."""

    revenue = revenue_cancellation = expense = expense_cancellation = ZERO
    for record in records:
        revenue += _amount(record, "revenue")
        revenue_cancellation += _amount(record, "revenue_cancellation")
        expense += _amount(record, "expense")
        expense_cancellation += _amount(record, "expense_cancellation")
    return Totals(revenue, revenue_cancellation, expense, expense_cancellation)


def compute_group_totals(
    records: Iterable[LedgerRecord],
    key_fn: Callable[[LedgerRecord], Optional[K]],
    value_fn: Callable[[LedgerRecord], Optional[Decimal]],
    *,
    order: str = "encounter",
    limit: Optional[int] = None,
    drop_zero: bool = False,
) -> list[tuple[K, Decimal]]:
    """Sum ``value_fn`` per ``key_fn`` group.

    Records whose key is ``None`` or empty are left out. A missing value
    counts as zero. ``order`` is ``"encounter"`` (first occurrence),
    ``"key"`` (ascending key) or ``"value_desc"`` (descending sum, ties in
    first-occurrence order).
    """

    if order not in _GROUP_ORDERS:
        raise ValueError(f"Unknown group order: {order}")

    sums: dict[K, Decimal] = {}
    for record in records:
        key = key_fn(record)
        if key is None or key == "":
            continue
        value = value_fn(record)
        sums[key] = sums.get(key, ZERO) + (value if value is not None else ZERO)

    groups = list(sums.items())
    if drop_zero:
        groups = [(key, total) for key, total in groups if total != 0]
    if order == "key":
        groups.sort(key=lambda item: item[0])
    elif order == "value_desc":
        groups.sort(key=lambda item: item[1], reverse=True)
    if limit is not None:
        groups = groups[:limit]
    return groups


def expense_by_managing_unit(records: Iterable[LedgerRecord]) -> list[tuple[str, Decimal]]:
    """Expense per managing unit; units with no expense are dropped."""

    return compute_group_totals(
        records,
        lambda record: record.managing_unit,
        lambda record: _amount(record, "expense"),
        drop_zero=True,
    )


def monthly_totals(records: Iterable[LedgerRecord]) -> list[MonthlyTotals]:
    """Revenue and expense per ``YYYY-MM``, ascending by month."""

    snapshot = list(records)

    def month_of(record: LedgerRecord) -> str:
        return record.month_key or NO_DATE_BUCKET

    revenue = dict(
        compute_group_totals(snapshot, month_of, lambda r: _amount(r, "revenue"), order="key")
    )
    expense = dict(
        compute_group_totals(snapshot, month_of, lambda r: _amount(r, "expense"), order="key")
    )
    return [MonthlyTotals(month, revenue[month], expense[month]) for month in sorted(revenue)]


def top_creditors(
    records: Iterable[LedgerRecord], limit: int = TOP_CREDITORS_LIMIT
) -> list[tuple[str, Decimal]]:
    return compute_group_totals(
        records,
        lambda record: record.creditor,
        lambda record: _amount(record, "expense"),
        order="value_desc",
        limit=limit,
    )


def summarize(records: Iterable[LedgerRecord]) -> AnalysisSummary:
    snapshot = list(records)
    return AnalysisSummary(
        totals=compute_totals(snapshot),
        expense_by_unit=expense_by_managing_unit(snapshot),
        monthly=monthly_totals(snapshot),
        top_creditors=top_creditors(snapshot),
    )
