"""Pytest configuration and shared fixtures for Ledgerscope tests.

Provides record factories, the reference three-record scenario, a mixed
municipal ledger sample, and an isolated SQLModel database per test.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from sqlmodel import Session, SQLModel, create_engine

from ledgerscope.models import LedgerRecord

# =============================================================================
# Record Factories
# =============================================================================


@pytest.fixture
def record_factory():
    """Factory for building immutable ledger records.

    Returns:
        Callable: Function that creates LedgerRecord instances with defaults
    """

    def _create_record(
        day: str | None = "2024-01-10",
        *,
        expense: str | Decimal = "0",
        revenue: str | Decimal = "0",
        revenue_cancellation: str | Decimal = "0",
        expense_cancellation: str | Decimal = "0",
        **fields,
    ) -> LedgerRecord:
        return LedgerRecord(
            date=date.fromisoformat(day) if day else None,
            expense=Decimal(str(expense)),
            revenue=Decimal(str(revenue)),
            revenue_cancellation=Decimal(str(revenue_cancellation)),
            expense_cancellation=Decimal(str(expense_cancellation)),
            **fields,
        )

    return _create_record


@pytest.fixture
def scenario_records(record_factory) -> list[LedgerRecord]:
    """Three records spanning two years, expenses 100 / 50 / 30."""

    return [
        record_factory("2024-01-10", expense="100.00", creditor="Alpha"),
        record_factory("2024-02-05", expense="50.00", creditor="Beta"),
        record_factory("2023-12-20", expense="30.00", creditor="Gamma"),
    ]


@pytest.fixture
def ledger_records(record_factory) -> list[LedgerRecord]:
    """A small but varied municipal ledger."""

    return [
        record_factory(
            "2024-01-10",
            nature="Despesa",
            type="Empenho",
            managing_unit="Secretaria de Saúde",
            budget_unit="Fundo Municipal de Saúde",
            program="Atenção Básica",
            element=339030,
            cash_doc="CX-001",
            creditor="Farmácia Central LTDA",
            description="Compra de medicamentos",
            expense="1200.50",
            process_link="https://processos.example.org/1",
        ),
        record_factory(
            "2024-01-22",
            nature="Receita",
            type="Arrecadação",
            managing_unit="Secretaria de Finanças",
            budget_unit="Tesouro",
            program="Gestão Fiscal",
            cash_doc="CX-002",
            creditor="Contribuintes",
            description="IPTU janeiro",
            revenue="5000.00",
        ),
        record_factory(
            "2024-02-03",
            nature="Despesa",
            type="Pagamento",
            managing_unit="Secretaria de Educação",
            budget_unit="FUNDEB",
            program="Ensino Fundamental",
            element=319011,
            cash_doc="CX-003",
            creditor="Folha de Pagamento",
            description="Salários professores",
            expense="8000.00",
            expense_cancellation="150.00",
        ),
        record_factory(
            "2024-02-15",
            nature="despesa",
            type="Empenho",
            managing_unit="Secretaria de Saúde",
            budget_unit="Fundo Municipal de Saúde",
            program="Média Complexidade",
            element=339039,
            cash_doc="CX-004",
            creditor="Clínica Vida",
            description="Serviços laboratoriais",
            expense="640.00",
            process_link="https://processos.example.org/4",
        ),
        record_factory(
            "2023-12-28",
            nature="Receita",
            type="Arrecadação",
            managing_unit="Secretaria de Finanças",
            budget_unit="Tesouro",
            program="Gestão Fiscal",
            cash_doc="CX-005",
            creditor="Contribuintes",
            description="ISS dezembro",
            revenue="2300.00",
            revenue_cancellation="100.00",
        ),
        record_factory(
            None,
            nature="Despesa",
            type="Empenho",
            managing_unit="",
            creditor="Sem Data",
            description="Registro sem data",
            expense="10.00",
        ),
    ]


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def session_factory():
    """Isolated in-memory database wrapped in the repository session contract."""

    engine = create_engine("sqlite:///:memory:")
    SQLModel.metadata.create_all(engine)

    @contextmanager
    def session_context() -> Iterator[Session]:
        session = Session(engine, expire_on_commit=False)
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    yield session_context
    engine.dispose()
