"""Tests for CSV ingestion of ledger dumps."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

from ledgerscope.infra.repositories import SQLModelLedgerRepository
from ledgerscope.services.import_csv import import_csv_file, read_ledger_csv, records_from_rows

CSV_TEXT = """data,natureza,tipo,unid_gestora,unid_ocamentaria,programa,elemento,doc_caixa,credor,descricao,receitas,anulac_receitas,despesas,anulac_despesa,processo
2024-01-10,Despesa,Empenho,Secretaria de Saúde,FMS,Atenção Básica,339030,CX-1,Farmácia,Medicamentos,,,1200.50,,https://processos.example.org/1
2024-01-22,Receita,Arrecadação,Secretaria de Finanças,Tesouro,Gestão Fiscal,,CX-2,Contribuintes,IPTU,5000,0,,,
,,,,,,,,,,,,,,
not-a-date,Despesa,Empenho,Secretaria de Saúde,FMS,Atenção Básica,00339039,CX-3,Clínica,Exames,,,-3,,
"""


def _write_csv(tmp_path: Path) -> Path:
    path = tmp_path / "ledger.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


def test_read_ledger_csv_maps_source_columns(tmp_path):
    records = read_ledger_csv(_write_csv(tmp_path))

    assert len(records) == 3
    first, second, third = records
    assert first.date == date(2024, 1, 10)
    assert first.managing_unit == "Secretaria de Saúde"
    assert first.element == 339030
    assert first.expense == Decimal("1200.50")
    assert first.process_link == "https://processos.example.org/1"
    assert second.revenue == Decimal("5000")
    assert second.element is None
    assert second.process_link is None
    assert third.date is None
    assert third.expense == Decimal("0")
    assert third.element == 339039


def test_records_from_rows_skips_blank_rows():
    rows = [{"credor": "", "despesas": None}, {"credor": "A", "despesas": "1"}]

    records = records_from_rows(rows)

    assert [r.creditor for r in records] == ["A"]


def test_import_csv_file_persists_records(tmp_path, session_factory):
    repository = SQLModelLedgerRepository(session_factory)

    stored = import_csv_file(csv_path=_write_csv(tmp_path), repository=repository)

    assert stored == 3
    assert [r.creditor for r in repository.load_records()] == ["Farmácia", "Contribuintes", "Clínica"]
