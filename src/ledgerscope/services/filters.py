"""Cascading multi-facet filtering over the ledger snapshot.

Every selector in :class:`FilterState` maps to one predicate. The same
predicate chain serves two purposes:

* :func:`apply_filters` runs all active predicates and yields the filtered set.
* :func:`compute_facet_options` runs all active predicates *except* the one
  belonging to the facet being listed, so a facet's option list narrows when
  other facets are constrained but never loses its own current selection.

Both go through :func:`candidate_set`, which keeps the two behaviors in sync.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional

from ..logging_config import get_logger
from ..models.record import LedgerRecord

logger = get_logger(__name__)

NATURE_ALL = "all"
ALL_SENTINELS = frozenset({"all", "todos", "todas", "__all__"})

Predicate = Callable[[LedgerRecord, str], bool]


def is_unset(value: Any) -> bool:
    """Return True when a selector value means "no constraint"."""

    if value is None:
        return True
    text = str(value).strip()
    return not text or text.lower() in ALL_SENTINELS


def _selector_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


@dataclass(frozen=True)
class FilterState:
    """Active constraints, passed by value into every engine call."""

    date_from: str = ""
    date_to: str = ""
    nature: str = NATURE_ALL
    type: str = ""
    managing_unit: str = ""
    budget_unit: str = ""
    program: str = ""
    element: str = ""
    creditor: str = ""
    cash_doc: str = ""
    description: str = ""
    year: str = ""
    month: str = ""

    def __post_init__(self) -> None:
        for spec in fields(self):
            object.__setattr__(self, spec.name, _selector_text(getattr(self, spec.name)))
        if not self.nature:
            object.__setattr__(self, "nature", NATURE_ALL)
        if self.month.isdigit() and len(self.month) == 1:
            object.__setattr__(self, "month", self.month.zfill(2))

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(spec.name for spec in fields(cls))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FilterState":
        """Build a state from a mapping, ignoring unknown keys."""

        known = set(cls.field_names())
        return cls(**{key: value for key, value in data.items() if key in known})

    def value(self, field: str) -> str:
        return getattr(self, field, "") if field in self.field_names() else ""

    def is_active(self, field: str) -> bool:
        return not is_unset(self.value(field))

    def active_filters(self) -> list[tuple[str, str]]:
        """Active selectors in the order used by the report's filter line."""

        return [(field, self.value(field)) for field in REPORT_FILTER_ORDER if self.is_active(field)]

    def with_value(self, field: str, value: Any) -> "FilterState":
        if field not in self.field_names():
            raise ValueError(f"Unknown filter field: {field}")
        return replace(self, **{field: value})

    @classmethod
    def cleared(cls) -> "FilterState":
        return cls()

    def cache_key(self) -> str:
        """Stable identifier for caching data derived from this filter set."""
        return hashlib.sha256(repr(self).encode("utf-8")).hexdigest()[:16]


REPORT_FILTER_ORDER = (
    "date_from",
    "date_to",
    "nature",
    "type",
    "creditor",
    "year",
    "month",
    "managing_unit",
    "budget_unit",
    "program",
    "element",
)


def _exact(attr: str) -> Predicate:
    def predicate(record: LedgerRecord, wanted: str) -> bool:
        value = getattr(record, attr, None)
        if value is None or value == "":
            return False
        return str(value).lower() == wanted.lower()

    return predicate


def _derived(attr: str) -> Predicate:
    def predicate(record: LedgerRecord, wanted: str) -> bool:
        value = getattr(record, attr, "")
        return bool(value) and value == wanted

    return predicate


def _substring(attr: str) -> Predicate:
    def predicate(record: LedgerRecord, wanted: str) -> bool:
        value = getattr(record, attr, None) or ""
        return wanted.lower() in str(value).lower()

    return predicate


def _date_from(record: LedgerRecord, wanted: str) -> bool:
    value = getattr(record, "date_iso", "")
    return bool(value) and value >= wanted


def _date_to(record: LedgerRecord, wanted: str) -> bool:
    value = getattr(record, "date_iso", "")
    return bool(value) and value <= wanted


PREDICATES: dict[str, Predicate] = {
    "date_from": _date_from,
    "date_to": _date_to,
    "creditor": _substring("creditor"),
    "cash_doc": _substring("cash_doc"),
    "description": _substring("description"),
    "year": _derived("year"),
    "month": _derived("month"),
    "nature": _exact("nature"),
    "type": _exact("type"),
    "managing_unit": _exact("managing_unit"),
    "budget_unit": _exact("budget_unit"),
    "program": _exact("program"),
    "element": _derived("element_text"),
}

# Facet -> record attribute holding the value the facet's predicate compares.
FACET_PROJECTIONS: dict[str, str] = {
    "year": "year",
    "month": "month",
    "nature": "nature",
    "type": "type",
    "managing_unit": "managing_unit",
    "budget_unit": "budget_unit",
    "program": "program",
    "element": "element_text",
}

FACET_FIELDS = tuple(FACET_PROJECTIONS)


def candidate_set(
    records: Iterable[LedgerRecord],
    filter_state: FilterState,
    excluded_field: Optional[str] = None,
) -> list[LedgerRecord]:
    """Apply every active predicate except ``excluded_field``'s own.

    Source order is preserved.
    """

    active = [
        (predicate, filter_state.value(field))
        for field, predicate in PREDICATES.items()
        if field != excluded_field and filter_state.is_active(field)
    ]
    if not active:
        return list(records)
    return [record for record in records if all(pred(record, wanted) for pred, wanted in active)]


def apply_filters(records: Iterable[LedgerRecord], filter_state: FilterState) -> list[LedgerRecord]:
    """Return the records matching every active constraint, in source order."""

    return candidate_set(records, filter_state, None)


def compute_facet_options(
    records: Iterable[LedgerRecord], filter_state: FilterState, field: str
) -> list[str]:
    """Sorted distinct values still selectable for ``field``.

    The facet's own selection is ignored while deriving candidates and is
    always kept in the returned list.
    """

    attr = FACET_PROJECTIONS.get(field)
    if attr is None:
        logger.debug("Facet options requested for unknown field", extra={"field": field})
        return []

    values = set()
    for record in candidate_set(records, filter_state, field):
        value = getattr(record, attr, None)
        if value is None:
            continue
        text = str(value)
        if text:
            values.add(text)

    if filter_state.is_active(field):
        # The literal selection is listed even when only another spelling matched.
        values.add(filter_state.value(field))

    return sorted(values)


def compute_all_facet_options(
    records: Iterable[LedgerRecord], filter_state: FilterState
) -> dict[str, list[str]]:
    """Option lists for every facet."""

    snapshot = records if isinstance(records, (list, tuple)) else list(records)
    return {field: compute_facet_options(snapshot, filter_state, field) for field in FACET_FIELDS}
