"""Tests for sorting and pagination of the filtered ledger."""

from __future__ import annotations

from decimal import Decimal

import pytest

from ledgerscope.errors import OutOfRangeError
from ledgerscope.services.aggregation import Totals, compute_totals
from ledgerscope.services.sorting import (
    ASC,
    DESC,
    SortState,
    clamp_page_index,
    page_count,
    paginate,
    sort_records,
)


def test_default_sort_state():
    state = SortState()

    assert (state.column, state.direction) == ("date", "asc")


def test_toggle_flips_same_column_and_resets_new_column():
    state = SortState()

    flipped = state.toggle("date")
    assert flipped == SortState("date", DESC)
    assert flipped.toggle("date") == state
    assert flipped.toggle("expense") == SortState("expense", ASC)


def test_invalid_sort_state_is_rejected():
    with pytest.raises(ValueError):
        SortState("process_link")
    with pytest.raises(ValueError):
        SortState("date", "up")


def test_sort_by_date_puts_undated_first(ledger_records):
    ordered = sort_records(ledger_records, "date", ASC)

    assert [r.date_iso for r in ordered] == [
        "",
        "2023-12-28",
        "2024-01-10",
        "2024-01-22",
        "2024-02-03",
        "2024-02-15",
    ]


def test_amounts_sort_numerically(record_factory):
    records = [record_factory(expense=v) for v in ("9", "100", "25.5")]

    ordered = sort_records(records, "expense", ASC)

    assert [r.expense for r in ordered] == [Decimal("9"), Decimal("25.5"), Decimal("100")]


def test_element_sorts_numerically_with_missing_first(record_factory):
    records = [record_factory(element=339030), record_factory(), record_factory(element=44)]

    ordered = sort_records(records, "element", ASC)

    assert [r.element for r in ordered] == [None, 44, 339030]


def test_equal_keys_keep_relative_order(record_factory):
    records = [record_factory(creditor=f"c{i}", nature="Despesa" if i % 2 else "Receita") for i in range(6)]

    ascending = sort_records(records, "nature", ASC)
    descending = sort_records(records, "nature", DESC)

    assert [r.creditor for r in ascending] == ["c1", "c3", "c5", "c0", "c2", "c4"]
    assert [r.creditor for r in descending] == ["c0", "c2", "c4", "c1", "c3", "c5"]


def test_toggling_direction_twice_restores_order(record_factory):
    records = [
        record_factory(creditor=name, type=kind)
        for name, kind in [("c0", "B"), ("c1", "A"), ("c2", "B"), ("c3", ""), ("c4", "A"), ("c5", "B")]
    ]
    state = SortState().toggle("type")

    first = sort_records(records, state.column, state.direction)
    state = state.toggle("type")
    reversed_order = sort_records(first, state.column, state.direction)
    state = state.toggle("type")
    again = sort_records(reversed_order, state.column, state.direction)

    assert [r.creditor for r in first] == ["c3", "c1", "c4", "c0", "c2", "c5"]
    assert [r.creditor for r in reversed_order] == ["c0", "c2", "c5", "c1", "c4", "c3"]
    assert again == first


def test_sorting_is_idempotent(ledger_records):
    once = sort_records(ledger_records, "creditor", DESC)

    assert sort_records(once, "creditor", DESC) == once


def test_sorting_does_not_mutate_input(ledger_records):
    snapshot = list(ledger_records)

    sort_records(ledger_records, "expense", DESC)

    assert ledger_records == snapshot


def test_unknown_column_raises(ledger_records):
    with pytest.raises(ValueError):
        sort_records(ledger_records, "colour", ASC)


def test_paginate_slices_zero_based(ledger_records):
    page = paginate(ledger_records, 4, 1)

    assert page.records == tuple(ledger_records[4:])
    assert page.page_count == 2
    assert page.total == 6
    assert page.has_previous and not page.has_next
    assert page.label == "Página 2 de 2 (6 registros)"


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_out_of_range_page_raises(ledger_records, index):
    with pytest.raises(OutOfRangeError) as excinfo:
        paginate(ledger_records, 4, index)

    assert excinfo.value.page_count == 2
    assert isinstance(excinfo.value, IndexError)


def test_empty_set_has_single_empty_page():
    page = paginate([], 20, 0)

    assert page.records == ()
    assert page.page_count == 0
    with pytest.raises(OutOfRangeError):
        paginate([], 20, 1)


def test_page_size_must_be_positive(ledger_records):
    with pytest.raises(ValueError):
        paginate(ledger_records, 0, 0)
    with pytest.raises(ValueError):
        page_count(3, -1)


def test_clamp_page_index():
    assert clamp_page_index(45, 20, 7) == 2
    assert clamp_page_index(45, 20, -3) == 0
    assert clamp_page_index(0, 20, 4) == 0
    assert clamp_page_index(45, 20, 1) == 1


@pytest.mark.parametrize("page_size", [1, 2, 3, 4, 5, 6, 7])
def test_page_totals_add_up_to_filtered_totals(ledger_records, page_size):
    count = page_count(len(ledger_records), page_size)

    combined = Totals()
    for index in range(count):
        combined = combined + compute_totals(paginate(ledger_records, page_size, index).records)

    assert combined == compute_totals(ledger_records)
