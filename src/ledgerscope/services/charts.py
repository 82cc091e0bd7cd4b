"""Matplotlib charts for the financial-analysis view."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from .aggregation import AnalysisSummary
from .report_export import format_currency

COLORS = [
    "#1e40af", "#3b82f6", "#60a5fa", "#93c5fd", "#2563eb",
    "#1d4ed8", "#1e3a8a", "#3730a3", "#4f46e5", "#6366f1",
]
REVENUE_COLOR = "#16a34a"
EXPENSE_COLOR = "#dc2626"


def _placeholder(title: str, message: str) -> Figure:
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=12, color="#666")
    ax.set_title(title, fontsize=13, fontweight="bold")
    ax.axis("off")
    return fig


def expense_by_unit_chart(summary: AnalysisSummary) -> Figure:
    """Pie of expenses per managing unit."""

    title = "Despesas por Unidade Gestora"
    if not summary.expense_by_unit:
        return _placeholder(title, "Nenhum dado de despesa disponível")

    labels = [name for name, _ in summary.expense_by_unit]
    sizes = [float(value) for _, value in summary.expense_by_unit]
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.pie(
        sizes,
        labels=labels,
        autopct=lambda pct: f"{pct:.0f}%",
        colors=[COLORS[i % len(COLORS)] for i in range(len(sizes))],
        startangle=90,
        wedgeprops=dict(edgecolor="white", linewidth=1),
    )
    ax.axis("equal")
    ax.set_title(title, fontsize=13, fontweight="bold")
    plt.tight_layout()
    return fig


def monthly_trend_chart(summary: AnalysisSummary) -> Figure:
    """Monthly revenue and expense lines."""

    title = "Evolução Mensal"
    if not summary.monthly:
        return _placeholder(title, "Nenhum dado mensal disponível")

    months = [entry.month for entry in summary.monthly]
    fig, ax = plt.subplots(figsize=(9, 5))
    ax.plot(months, [float(e.revenue) for e in summary.monthly], marker="o",
            color=REVENUE_COLOR, linewidth=2, label="Receitas")
    ax.plot(months, [float(e.expense) for e in summary.monthly], marker="o",
            color=EXPENSE_COLOR, linewidth=2, label="Despesas")
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.tick_params(axis="x", labelrotation=45, labelsize=8)
    ax.legend()
    ax.set_title(title, fontsize=13, fontweight="bold")
    plt.tight_layout()
    return fig


def revenue_vs_expense_chart(summary: AnalysisSummary) -> Figure:
    """Side-by-side monthly bars of revenue against expense."""

    title = "Receitas vs Despesas"
    if not summary.monthly:
        return _placeholder(title, "Nenhum dado mensal disponível")

    months = [entry.month for entry in summary.monthly]
    positions = range(len(months))
    width = 0.4
    fig, ax = plt.subplots(figsize=(9, 5))
    ax.bar([p - width / 2 for p in positions], [float(e.revenue) for e in summary.monthly],
           width=width, color=REVENUE_COLOR, label="Receitas")
    ax.bar([p + width / 2 for p in positions], [float(e.expense) for e in summary.monthly],
           width=width, color=EXPENSE_COLOR, label="Despesas")
    ax.set_xticks(list(positions))
    ax.set_xticklabels(months, rotation=45, fontsize=8)
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    ax.legend()
    ax.set_title(title, fontsize=13, fontweight="bold")
    plt.tight_layout()
    return fig


def top_creditors_chart(summary: AnalysisSummary) -> Figure:
    """Horizontal bars of the creditors with the largest expense."""

    title = "Top 10 Credores"
    if not summary.top_creditors:
        return _placeholder(title, "Nenhum credor com despesas")

    # Largest on top
    names = [name for name, _ in reversed(summary.top_creditors)]
    values = [float(value) for _, value in reversed(summary.top_creditors)]
    fig, ax = plt.subplots(figsize=(9, 5))
    bars = ax.barh(names, values, color=COLORS[0])
    ax.bar_label(bars, labels=[format_currency(v) for _, v in reversed(summary.top_creditors)],
                 fontsize=7, padding=3)
    ax.tick_params(axis="y", labelsize=8)
    ax.grid(True, axis="x", linestyle="--", alpha=0.4)
    ax.set_title(title, fontsize=13, fontweight="bold")
    plt.tight_layout()
    return fig


CHART_BUILDERS = {
    "expense_by_unit": expense_by_unit_chart,
    "monthly_trend": monthly_trend_chart,
    "revenue_vs_expense": revenue_vs_expense_chart,
    "top_creditors": top_creditors_chart,
}


def save_chart_png(fig: Figure, output_path: Path, dpi: int = 120) -> Path:
    """Write ``fig`` to PNG and release it."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, bbox_inches="tight", dpi=dpi)
    plt.close(fig)
    return output_path


def export_analysis_charts(summary: AnalysisSummary, output_dir: Path) -> dict[str, Path]:
    """Render every analysis chart to ``output_dir`` as ``<name>.png``."""

    return {
        name: save_chart_png(builder(summary), Path(output_dir) / f"{name}.png")
        for name, builder in CHART_BUILDERS.items()
    }
