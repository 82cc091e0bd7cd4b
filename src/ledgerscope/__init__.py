"""Ledgerscope: ledger exploration engine for municipal financial records."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, ReportSettings
from .models.record import LedgerRecord
from .services.aggregation import compute_group_totals, compute_totals
from .services.filters import FilterState, apply_filters, candidate_set, compute_facet_options
from .services.report_export import export_report
from .services.sorting import SortState, paginate, sort_records

__all__ = [
    "BaseConfig",
    "DevConfig",
    "FilterState",
    "LedgerRecord",
    "ReportSettings",
    "SortState",
    "apply_filters",
    "candidate_set",
    "compute_facet_options",
    "compute_group_totals",
    "compute_totals",
    "export_report",
    "paginate",
    "sort_records",
]
