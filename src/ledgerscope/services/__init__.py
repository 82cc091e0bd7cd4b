"""Service module exports."""

from . import (
    aggregation,
    charts,
    explorer,
    filters,
    import_csv,
    ledger_store,
    report_export,
    sorting,
)

__all__ = [
    "aggregation",
    "charts",
    "explorer",
    "filters",
    "import_csv",
    "ledger_store",
    "report_export",
    "sorting",
]
