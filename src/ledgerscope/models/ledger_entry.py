"""SQLModel definition for persisted ledger rows."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .record import LedgerRecord, record_from_mapping


class LedgerEntry(SQLModel, table=True):
    """A ledger line item as stored by the data source."""

    __tablename__: ClassVar[str] = "ledger_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    entry_date: Optional[date] = Field(default=None, index=True)
    nature: str = Field(default="", max_length=64, index=True)
    entry_type: str = Field(default="", max_length=128)
    managing_unit: str = Field(default="", max_length=255)
    budget_unit: str = Field(default="", max_length=255)
    program: str = Field(default="", max_length=255)
    element: Optional[int] = Field(default=None)
    cash_doc: str = Field(default="", max_length=128)
    creditor: str = Field(default="", max_length=255)
    description: str = Field(default="")
    revenue: Decimal = Field(default=Decimal("0"), max_digits=16, decimal_places=2)
    revenue_cancellation: Decimal = Field(default=Decimal("0"), max_digits=16, decimal_places=2)
    expense: Decimal = Field(default=Decimal("0"), max_digits=16, decimal_places=2)
    expense_cancellation: Decimal = Field(default=Decimal("0"), max_digits=16, decimal_places=2)
    process_link: Optional[str] = Field(default=None, max_length=1024)

    def to_record(self) -> LedgerRecord:
        """Convert the row to an immutable record, recovering malformed values."""

        return record_from_mapping(
            {
                "date": self.entry_date,
                "nature": self.nature,
                "type": self.entry_type,
                "managing_unit": self.managing_unit,
                "budget_unit": self.budget_unit,
                "program": self.program,
                "element": self.element,
                "cash_doc": self.cash_doc,
                "creditor": self.creditor,
                "description": self.description,
                "revenue": self.revenue,
                "revenue_cancellation": self.revenue_cancellation,
                "expense": self.expense,
                "expense_cancellation": self.expense_cancellation,
                "process_link": self.process_link,
            }
        )

    @classmethod
    def from_record(cls, record: LedgerRecord) -> "LedgerEntry":
        return cls(
            entry_date=record.date,
            nature=record.nature,
            entry_type=record.type,
            managing_unit=record.managing_unit,
            budget_unit=record.budget_unit,
            program=record.program,
            element=record.element,
            cash_doc=record.cash_doc,
            creditor=record.creditor,
            description=record.description,
            revenue=record.revenue,
            revenue_cancellation=record.revenue_cancellation,
            expense=record.expense,
            expense_cancellation=record.expense_cancellation,
            process_link=record.process_link,
        )
