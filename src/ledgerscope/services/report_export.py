"""PDF export of the ledger exactly as it is shown on screen.

The exporter never filters or sorts. Callers hand it the already filtered and
sorted records plus the totals they displayed; :func:`build_report_layout`
turns them into a :class:`ReportLayout` (pure data, no clock, no I/O) and a
:class:`DocumentBuilder` draws that layout. The fpdf2 builder is the only
place that knows about pages, coordinates and link annotations.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, Optional, Protocol, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ..config import ReportSettings
from ..logging_config import get_logger
from ..models.record import LedgerRecord
from .aggregation import Totals, compute_totals
from .filters import FilterState

logger = get_logger(__name__)

FILENAME_PREFIX = "relatorio-digitalizacao"
PROCESS_MARKER = "Link"
FILTER_SEPARATOR = " | "

FILTER_LABELS = {
    "date_from": "De",
    "date_to": "Até",
    "nature": "Natureza",
    "type": "Tipo",
    "creditor": "Credor",
    "year": "Ano",
    "month": "Mês",
    "managing_unit": "Unid. Gestora",
    "budget_unit": "Unid. Orçamentária",
    "program": "Programa",
    "element": "Elemento",
}

TOTAL_LABELS = (
    ("Receitas", "revenue"),
    ("Anul. Receitas", "revenue_cancellation"),
    ("Despesas", "expense"),
    ("Anul. Despesas", "expense_cancellation"),
)

TABLE_HEADERS = (
    "Data",
    "Natureza",
    "Tipo",
    "Unid. Gestora",
    "Unid. Orçament.",
    "Programa",
    "Elemento",
    "Credor",
    "Descrição",
    "Receitas",
    "Anul. Rec.",
    "Despesas",
    "Anul. Desp.",
    "Processo",
)
PROCESS_COLUMN = len(TABLE_HEADERS) - 1
AMOUNT_COLUMNS = frozenset({9, 10, 11, 12})

_CENT = Decimal("0.01")
_PT_BR_SEPARATORS = str.maketrans({",": ".", ".": ","})


def format_amount(value: Decimal) -> str:
    """pt-BR number with two fraction digits: ``1.234,56``."""

    quantized = Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    return f"{quantized:,.2f}".translate(_PT_BR_SEPARATORS)


def format_currency(value: Decimal) -> str:
    """pt-BR currency string: ``R$ 1.234,56``."""

    return f"R$ {format_amount(value)}"


def report_filename(export_date: date) -> str:
    return f"{FILENAME_PREFIX}-{export_date:%d-%m-%Y}.pdf"


@dataclass(frozen=True)
class ReportLayout:
    title: str
    subtitle: str
    filters_line: Optional[str]
    totals: tuple[tuple[str, str], ...]
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    links: tuple[Optional[str], ...]
    footer: str

    @property
    def totals_line(self) -> str:
        return FILTER_SEPARATOR.join(f"{label}: {value}" for label, value in self.totals)


def filters_summary(filter_state: FilterState) -> Optional[str]:
    """``" | "``-joined active filters in fixed order, or None when unfiltered."""

    parts = [f"{FILTER_LABELS[field]}: {value}" for field, value in filter_state.active_filters()]
    return FILTER_SEPARATOR.join(parts) if parts else None


def _row(record: LedgerRecord) -> tuple[str, ...]:
    return (
        record.date_iso,
        record.nature,
        record.type,
        record.managing_unit,
        record.budget_unit,
        record.program,
        record.element_text,
        record.creditor,
        record.description,
        format_amount(record.revenue),
        format_amount(record.revenue_cancellation),
        format_amount(record.expense),
        format_amount(record.expense_cancellation),
        PROCESS_MARKER if record.process_link else "",
    )


def build_report_layout(
    records: Iterable[LedgerRecord],
    totals: Totals,
    filter_state: FilterState,
    settings: ReportSettings,
) -> ReportLayout:
    snapshot = list(records)
    return ReportLayout(
        title=settings.title,
        subtitle=settings.subtitle,
        filters_line=filters_summary(filter_state),
        totals=tuple(
            (label, format_currency(getattr(totals, field))) for label, field in TOTAL_LABELS
        ),
        headers=TABLE_HEADERS,
        rows=tuple(_row(record) for record in snapshot),
        links=tuple(record.process_link or None for record in snapshot),
        footer=settings.footer,
    )


class DocumentBuilder(Protocol):
    """Narrow drawing interface the layout is rendered through."""

    def begin(self, title: str, subtitle: str, footer: str) -> None:  # pragma: no cover - interface
        ...

    def add_filters(self, text: str) -> None:  # pragma: no cover - interface
        ...

    def add_totals(self, items: Sequence[tuple[str, str]]) -> None:  # pragma: no cover - interface
        ...

    def add_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        links: Sequence[Optional[str]],
    ) -> None:  # pragma: no cover - interface
        ...

    def save(self, path: Path) -> Path:  # pragma: no cover - interface
        ...


def render_layout(layout: ReportLayout, builder: DocumentBuilder) -> None:
    builder.begin(layout.title, layout.subtitle, layout.footer)
    if layout.filters_line:
        builder.add_filters(layout.filters_line)
    builder.add_totals(layout.totals)
    builder.add_table(layout.headers, layout.rows, layout.links)


# ---- fpdf2 rendering

PALETTE = {
    "heading": (30, 64, 175),
    "link": (0, 100, 200),
    "rule": (180, 180, 180),
    "grid": (200, 200, 200),
    "ink": (0, 0, 0),
}
MARGIN = 14
BOTTOM_MARGIN = 18
FOOTER_RULE_OFFSET = 12
FOOTER_TEXT_OFFSET = 9
TABLE_FONT_SIZE = 6
LINE_HEIGHT = 3.2
MAX_CELL_LINES = 8
# Relative widths of the 14 table columns.
COLUMN_WEIGHTS = (16, 16, 20, 24, 24, 22, 13, 28, 40, 16, 14, 16, 14, 11)
TOTAL_OFFSETS = (0, 71, 146, 216)


def _pdf_safe_text(text: str) -> str:
    if text is None:
        return ""
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _wrap_pdf_line(pdf: FPDF, text: str, max_w: float) -> list[str]:
    safe_text = _pdf_safe_text(text)
    if max_w <= 0 or not safe_text:
        return [safe_text]
    lines: list[str] = []
    current = ""
    for word in safe_text.split(" "):
        if word == "":
            continue
        candidate = word if not current else f"{current} {word}"
        if pdf.get_string_width(candidate) <= max_w:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        if pdf.get_string_width(word) <= max_w:
            current = word
            continue
        chunk = ""
        for ch in word:
            if not chunk or pdf.get_string_width(chunk + ch) <= max_w:
                chunk += ch
            else:
                lines.append(chunk)
                chunk = ch
        current = chunk
    if current:
        lines.append(current)
    return lines or [safe_text]


class _LedgerPDF(FPDF):
    def __init__(self, title: str, subtitle: str, footer_text: str):
        super().__init__(orientation="L", unit="mm", format="A4")
        self.report_title = title
        self.report_subtitle = subtitle
        self.footer_text = footer_text

    def header(self):
        self.set_text_color(*PALETTE["ink"])
        self.set_y(8)
        self.set_font("Helvetica", "", 14)
        self.cell(0, 6, _pdf_safe_text(self.report_title), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 5, _pdf_safe_text(self.report_subtitle), align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.set_draw_color(*PALETTE["rule"])
        self.line(MARGIN, 21, self.w - MARGIN, 21)
        self.set_y(25)

    def footer(self):
        self.set_draw_color(*PALETTE["rule"])
        rule_y = self.h - FOOTER_RULE_OFFSET
        self.line(MARGIN, rule_y, self.w - MARGIN, rule_y)
        self.set_y(-FOOTER_TEXT_OFFSET)
        self.set_text_color(*PALETTE["ink"])
        self.set_font("Helvetica", "", 7)
        self.cell(0, 4, _pdf_safe_text(self.footer_text), align="C")


class FPDFDocumentBuilder:
    """Landscape A4 renderer backed by fpdf2."""

    def __init__(self, compress: bool = True) -> None:
        self.compress = compress
        self.pdf: Optional[_LedgerPDF] = None

    def _require_pdf(self) -> _LedgerPDF:
        if self.pdf is None:
            raise RuntimeError("begin() must be called before drawing")
        return self.pdf

    def _rule(self) -> None:
        pdf = self._require_pdf()
        y = pdf.get_y()
        pdf.set_draw_color(*PALETTE["rule"])
        pdf.line(MARGIN, y, pdf.w - MARGIN, y)
        pdf.ln(4)

    def begin(self, title: str, subtitle: str, footer: str) -> None:
        pdf = _LedgerPDF(title, subtitle, footer)
        pdf.set_compression(self.compress)
        pdf.set_margins(MARGIN, 25, MARGIN)
        pdf.set_auto_page_break(auto=True, margin=BOTTOM_MARGIN)
        pdf.add_page()
        self.pdf = pdf

    def add_filters(self, text: str) -> None:
        pdf = self._require_pdf()
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(0, 5, "Filtros aplicados:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 8)
        max_w = pdf.w - 2 * MARGIN
        for line in _wrap_pdf_line(pdf, text, max_w):
            pdf.cell(0, 4, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(1)
        self._rule()

    def add_totals(self, items: Sequence[tuple[str, str]]) -> None:
        pdf = self._require_pdf()
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(0, 5, "Subtotais filtrados:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", "", 8)
        y = pdf.get_y()
        for offset, (label, value) in zip(TOTAL_OFFSETS, items):
            pdf.set_xy(MARGIN + offset, y)
            pdf.cell(70, 4, _pdf_safe_text(f"{label}: {value}"))
        pdf.set_xy(MARGIN, y + 5)
        self._rule()

    def _column_widths(self) -> list[float]:
        pdf = self._require_pdf()
        available = pdf.w - 2 * MARGIN
        weight = sum(COLUMN_WEIGHTS)
        return [available * w / weight for w in COLUMN_WEIGHTS]

    def _draw_headings(self, headers: Sequence[str], widths: Sequence[float]) -> None:
        pdf = self._require_pdf()
        pdf.set_font("Helvetica", "B", TABLE_FONT_SIZE)
        pdf.set_fill_color(*PALETTE["heading"])
        pdf.set_text_color(255, 255, 255)
        pdf.set_draw_color(*PALETTE["grid"])
        pdf.set_x(MARGIN)
        for width, heading in zip(widths, headers):
            pdf.cell(width, 6, _pdf_safe_text(heading), border=1, fill=True)
        pdf.ln(6)
        pdf.set_text_color(*PALETTE["ink"])
        pdf.set_font("Helvetica", "", TABLE_FONT_SIZE)

    def add_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        links: Sequence[Optional[str]],
    ) -> None:
        pdf = self._require_pdf()
        widths = self._column_widths()
        self._draw_headings(headers, widths)

        for row, link in zip(rows, links):
            cell_lines = []
            for width, text in zip(widths, row):
                lines = _wrap_pdf_line(pdf, text, width - 2 * pdf.c_margin)
                if len(lines) > MAX_CELL_LINES:
                    lines = lines[: MAX_CELL_LINES - 1] + [lines[MAX_CELL_LINES - 1] + "..."]
                cell_lines.append(lines)
            row_h = max(len(lines) for lines in cell_lines) * LINE_HEIGHT + 1

            if pdf.get_y() + row_h > pdf.page_break_trigger:
                pdf.add_page()
                self._draw_headings(headers, widths)

            y = pdf.get_y()
            x = MARGIN
            for column, (width, lines) in enumerate(zip(widths, cell_lines)):
                pdf.rect(x, y, width, row_h)
                is_link = column == PROCESS_COLUMN and link and lines[0] == PROCESS_MARKER
                if is_link:
                    pdf.set_text_color(*PALETTE["link"])
                align = "R" if column in AMOUNT_COLUMNS else "L"
                for offset, line in enumerate(lines):
                    pdf.set_xy(x, y + 0.5 + offset * LINE_HEIGHT)
                    pdf.cell(width, LINE_HEIGHT, line, align=align)
                if is_link:
                    pdf.set_text_color(*PALETTE["ink"])
                    pdf.link(x, y, width, row_h, link)
                x += width
            pdf.set_xy(MARGIN, y + row_h)

    def to_bytes(self) -> bytes:
        return bytes(self._require_pdf().output())

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        return path


def export_report(
    records: Iterable[LedgerRecord],
    filter_state: FilterState,
    output_dir: Path,
    *,
    totals: Optional[Totals] = None,
    export_date: Optional[date] = None,
    builder: Optional[DocumentBuilder] = None,
    settings: Optional[ReportSettings] = None,
) -> Path:
    """Render the given records and totals to ``output_dir`` and return the file path.

    ``records`` must already be filtered and sorted; ``totals`` should be the
    totals shown alongside them (computed from ``records`` when omitted).
    """

    snapshot = list(records)
    shown_totals = totals if totals is not None else compute_totals(snapshot)
    layout = build_report_layout(snapshot, shown_totals, filter_state, settings or ReportSettings())
    document = builder if builder is not None else FPDFDocumentBuilder()
    render_layout(layout, document)

    path = Path(output_dir) / report_filename(export_date or date.today())
    saved = document.save(path)
    logger.info(
        "Ledger report exported",
        extra={"path": str(saved), "rows": len(layout.rows), "filters": layout.filters_line or ""},
    )
    return saved
