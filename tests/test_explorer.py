"""Tests for the memoized interactive facade."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledgerscope.services.explorer import LedgerExplorer
from ledgerscope.services.filters import FilterState
from ledgerscope.services.ledger_store import LedgerStore, LoadStatus
from ledgerscope.services.report_export import FPDFDocumentBuilder
from ledgerscope.services.sorting import SortState


@pytest.fixture
def explorer(ledger_records) -> LedgerExplorer:
    return LedgerExplorer(LedgerStore.from_records(ledger_records), page_size=2)


def test_page_requests_are_clamped(explorer):
    page = explorer.page(FilterState(), SortState(), 99)

    assert page.index == 2
    assert page.page_count == 3
    assert explorer.page(FilterState(), SortState(), -4).index == 0


def test_pages_follow_sort_state(explorer):
    sort = SortState("expense", "desc")

    first = explorer.page(FilterState(), sort, 0)

    assert [r.creditor for r in first.records] == ["Folha de Pagamento", "Farmácia Central LTDA"]


def test_totals_come_from_filtered_not_paged_rows(explorer):
    state = FilterState(nature="despesa")

    assert explorer.totals(state).expense == Decimal("9850.50")
    assert len(explorer.page(state, SortState(), 0).records) == 2


def test_results_are_memoized_per_state(explorer):
    state = FilterState(year="2024")

    assert explorer.filtered(state) is explorer.filtered(FilterState(year="2024"))
    assert explorer.facet_options(state) is explorer.facet_options(state)
    assert explorer.sorted_records(state, SortState()) is explorer.sorted_records(state, SortState())

    explorer.cache_clear()
    assert explorer.filtered(state) == explorer.filtered(FilterState(year="2024"))


def test_empty_result_is_distinct_from_not_loaded(ledger_records):
    loaded = LedgerExplorer(LedgerStore.from_records(ledger_records))
    unloaded = LedgerExplorer(LedgerStore())

    assert loaded.is_empty_result(FilterState(year="1999"))
    assert not loaded.is_empty_result(FilterState())
    assert not unloaded.is_empty_result(FilterState())
    assert unloaded.status is LoadStatus.NOT_LOADED
    assert unloaded.page(FilterState(), SortState(), 3).records == ()


def test_summary_matches_filtered_set(explorer):
    summary = explorer.summary(FilterState(managing_unit="Secretaria de Saúde"))

    assert summary.expense_by_unit == [("Secretaria de Saúde", Decimal("1840.50"))]
    assert [m.month for m in summary.monthly] == ["2024-01", "2024-02"]


def test_export_uses_on_screen_order_and_totals(tmp_path, explorer):
    state = FilterState(nature="despesa")
    sort = SortState("creditor", "asc")

    path = explorer.export(state, sort, tmp_path, export_date=date(2024, 7, 1))

    assert path.name == "relatorio-digitalizacao-01-07-2024.pdf"
    assert path.read_bytes().startswith(b"%PDF")


def test_invalid_page_size():
    with pytest.raises(ValueError):
        LedgerExplorer(LedgerStore(), page_size=0)


def test_cached_facet_options_are_read_only(explorer):
    state = FilterState(year="2024")
    options = explorer.facet_options(state)

    with pytest.raises(TypeError):
        options["nature"] = ("Outro",)  # type: ignore[index]

    assert "Outro" not in explorer.facet_options(state)["nature"]
    assert explorer.facet_options(state)["year"] == ("2023", "2024")
