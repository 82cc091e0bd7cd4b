"""Session facade over the ledger engine with memoized recomputation."""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from ..config import ReportSettings
from ..logging_config import get_logger
from ..models.record import LedgerRecord
from .aggregation import AnalysisSummary, Totals, compute_totals, summarize
from .filters import FilterState, apply_filters, compute_all_facet_options
from .ledger_store import LedgerStore, LoadStatus
from .report_export import DocumentBuilder, export_report
from .sorting import Page, SortState, clamp_page_index, paginate, sort_records

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20
CACHE_SIZE = 64


class LedgerExplorer:
    """Interactive view state: filters, sort and page over one immutable store.

    Every derived value is a pure function of ``(FilterState, SortState)``
    and is cached on those keys. Page requests are clamped to the nearest
    valid page, unlike :func:`paginate`.
    """

    def __init__(self, store: LedgerStore, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.store = store
        self.page_size = page_size
        self._filtered = lru_cache(maxsize=CACHE_SIZE)(self._compute_filtered)
        self._sorted = lru_cache(maxsize=CACHE_SIZE)(self._compute_sorted)
        self._facets = lru_cache(maxsize=CACHE_SIZE)(self._compute_facets)
        self._totals = lru_cache(maxsize=CACHE_SIZE)(self._compute_totals)
        self._summary = lru_cache(maxsize=CACHE_SIZE)(self._compute_summary)

    @property
    def status(self) -> LoadStatus:
        return self.store.status

    def _compute_filtered(self, filters: FilterState) -> tuple[LedgerRecord, ...]:
        result = tuple(apply_filters(self.store.records, filters))
        logger.debug(
            "Filters applied",
            extra={"filters": filters.cache_key(), "matched": len(result), "total": len(self.store)},
        )
        return result

    def _compute_sorted(self, filters: FilterState, sort: SortState) -> tuple[LedgerRecord, ...]:
        return tuple(sort_records(self._filtered(filters), sort.column, sort.direction))

    def _compute_facets(self, filters: FilterState) -> Mapping[str, tuple[str, ...]]:
        options = compute_all_facet_options(self.store.records, filters)
        # Read-only so callers cannot corrupt the cached entry.
        return MappingProxyType({field: tuple(values) for field, values in options.items()})

    def _compute_totals(self, filters: FilterState) -> Totals:
        return compute_totals(self._filtered(filters))

    def _compute_summary(self, filters: FilterState) -> AnalysisSummary:
        return summarize(self._filtered(filters))

    def filtered(self, filters: FilterState) -> tuple[LedgerRecord, ...]:
        return self._filtered(filters)

    def is_empty_result(self, filters: FilterState) -> bool:
        """True when the store is loaded but nothing matches ``filters``."""
        return self.store.is_loaded and not self._filtered(filters)

    def sorted_records(self, filters: FilterState, sort: SortState) -> tuple[LedgerRecord, ...]:
        return self._sorted(filters, sort)

    def facet_options(self, filters: FilterState) -> Mapping[str, tuple[str, ...]]:
        return self._facets(filters)

    def totals(self, filters: FilterState) -> Totals:
        return self._totals(filters)

    def summary(self, filters: FilterState) -> AnalysisSummary:
        return self._summary(filters)

    def page(self, filters: FilterState, sort: SortState, page_index: int) -> Page:
        rows = self._sorted(filters, sort)
        index = clamp_page_index(len(rows), self.page_size, page_index)
        if index != page_index:
            logger.debug("Page index clamped", extra={"requested": page_index, "page": index})
        return paginate(rows, self.page_size, index)

    def export(
        self,
        filters: FilterState,
        sort: SortState,
        output_dir: Path,
        *,
        export_date: Optional[date] = None,
        builder: Optional[DocumentBuilder] = None,
        settings: Optional[ReportSettings] = None,
    ) -> Path:
        """Export the rows and totals currently on screen."""

        return export_report(
            self._sorted(filters, sort),
            filters,
            output_dir,
            totals=self._totals(filters),
            export_date=export_date,
            builder=builder,
            settings=settings,
        )

    def cache_clear(self) -> None:
        for cached in (self._filtered, self._sorted, self._facets, self._totals, self._summary):
            cached.cache_clear()
