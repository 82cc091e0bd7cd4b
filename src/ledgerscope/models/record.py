"""Immutable ledger line items and their construction from raw source rows."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Mapping, Optional, TypeVar

from ..errors import MalformedRecordError
from ..logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

ZERO = Decimal("0")

AMOUNT_FIELDS = ("revenue", "revenue_cancellation", "expense", "expense_cancellation")
TEXT_FIELDS = (
    "nature",
    "type",
    "managing_unit",
    "budget_unit",
    "program",
    "cash_doc",
    "creditor",
    "description",
)

# Column names used by the municipal data source (table ``pmt_digitalizacao``).
SOURCE_COLUMNS = {
    "data": "date",
    "natureza": "nature",
    "tipo": "type",
    "unid_gestora": "managing_unit",
    "unid_ocamentaria": "budget_unit",
    "programa": "program",
    "elemento": "element",
    "doc_caixa": "cash_doc",
    "credor": "creditor",
    "descricao": "description",
    "receitas": "revenue",
    "anulac_receitas": "revenue_cancellation",
    "despesas": "expense",
    "anulac_despesa": "expense_cancellation",
    "processo": "process_link",
}


@dataclass(frozen=True)
class LedgerRecord:
    """One accounting line item as loaded from the data source."""

    date: Optional[date] = None
    nature: str = ""
    type: str = ""
    managing_unit: str = ""
    budget_unit: str = ""
    program: str = ""
    element: Optional[int] = None
    cash_doc: str = ""
    creditor: str = ""
    description: str = ""
    revenue: Decimal = ZERO
    revenue_cancellation: Decimal = ZERO
    expense: Decimal = ZERO
    expense_cancellation: Decimal = ZERO
    process_link: Optional[str] = None

    @property
    def date_iso(self) -> str:
        return self.date.isoformat() if self.date is not None else ""

    @property
    def year(self) -> str:
        return self.date_iso[:4]

    @property
    def month(self) -> str:
        return self.date_iso[5:7]

    @property
    def month_key(self) -> str:
        """``YYYY-MM`` bucket used by the monthly series."""
        return self.date_iso[:7]

    @property
    def element_text(self) -> str:
        return str(self.element) if self.element is not None else ""


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def parse_date(value: Any) -> Optional[date]:
    """Return a calendar date from a date, datetime or ISO-like string."""

    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise MalformedRecordError("date", value, "not an ISO calendar date") from exc


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """Return a non-negative Decimal amount; missing values count as zero."""

    if _is_missing(value):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = str(value).strip().replace("R$", "").strip()
        if "," in text:
            # pt-BR notation: 1.234,56
            text = text.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(text)
        except InvalidOperation as exc:
            raise MalformedRecordError(field, value, "not a number") from exc
    if not amount.is_finite():
        raise MalformedRecordError(field, value, "not a finite number")
    if amount < 0:
        raise MalformedRecordError(field, value, "negative amount")
    return amount


def parse_element(value: Any) -> Optional[int]:
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        raise MalformedRecordError("element", value, "not an integer")
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise MalformedRecordError("element", value, "not an integer") from exc
    if not number.is_integer():
        raise MalformedRecordError("element", value, "not an integer")
    return int(number)


def _text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def _recover(parser: Callable[[Any], T], value: Any, default: T) -> T:
    try:
        return parser(value)
    except MalformedRecordError as exc:
        logger.warning(
            "Malformed ledger value replaced with default",
            extra={"field": exc.field, "value": repr(exc.value), "reason": exc.reason},
        )
        return default


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Map data-source column names onto record field names."""

    normalized: dict[str, Any] = {}
    for key, value in row.items():
        name = str(key).strip()
        field = SOURCE_COLUMNS.get(name.lower(), name)
        normalized[field] = value
    return normalized


def record_from_mapping(row: Mapping[str, Any]) -> LedgerRecord:
    """Build a :class:`LedgerRecord` from a raw row.

    Accepts either record field names or the data-source column names.
    Malformed dates, amounts and elements are replaced by their defaults
    (``None`` / ``0``) and logged; this function does not raise for bad data.
    """

    data = normalize_row(row)
    link = _text(data.get("process_link"))
    values: dict[str, Any] = {
        "date": _recover(parse_date, data.get("date"), None),
        "element": _recover(parse_element, data.get("element"), None),
        "process_link": link or None,
    }
    for field in TEXT_FIELDS:
        values[field] = _text(data.get(field))
    for field in AMOUNT_FIELDS:
        values[field] = _recover(
            lambda raw, name=field: parse_amount(raw, name), data.get(field), ZERO
        )
    return LedgerRecord(**values)
