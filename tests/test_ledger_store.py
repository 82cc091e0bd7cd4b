"""Tests for the session snapshot and its load status."""

from __future__ import annotations

import dataclasses

import pytest

from ledgerscope.services.ledger_store import LedgerStore, LoadStatus, load_store


class _StaticRepository:
    def __init__(self, records):
        self._records = records

    def load_records(self):
        return list(self._records)


class _BrokenRepository:
    def load_records(self):
        raise ConnectionError("database offline")


def test_default_store_is_not_loaded():
    store = LedgerStore()

    assert store.status is LoadStatus.NOT_LOADED
    assert not store.is_loaded
    assert len(store) == 0


def test_load_store_snapshots_records(ledger_records):
    store = load_store(_StaticRepository(ledger_records))

    assert store.status is LoadStatus.READY
    assert store.records == tuple(ledger_records)
    assert list(store) == ledger_records


def test_empty_source_is_a_loaded_empty_state():
    store = load_store(_StaticRepository([]))

    assert store.status is LoadStatus.EMPTY
    assert store.is_loaded


def test_failing_source_degrades_to_unavailable_empty_store(caplog):
    store = load_store(_BrokenRepository())

    assert store.status is LoadStatus.UNAVAILABLE
    assert store.records == ()
    assert "database offline" in (store.error or "")
    assert any(r.levelname == "ERROR" for r in caplog.records)


def test_store_is_immutable(ledger_records):
    store = LedgerStore.from_records(ledger_records)

    with pytest.raises(dataclasses.FrozenInstanceError):
        store.records = ()  # type: ignore[misc]
