"""Tests for analysis chart rendering."""

from __future__ import annotations

from matplotlib.figure import Figure

from ledgerscope.services.aggregation import summarize
from ledgerscope.services.charts import (
    CHART_BUILDERS,
    export_analysis_charts,
    save_chart_png,
    top_creditors_chart,
)


def test_every_chart_builds_a_figure(ledger_records):
    summary = summarize(ledger_records)

    for builder in CHART_BUILDERS.values():
        assert isinstance(builder(summary), Figure)


def test_charts_render_placeholders_for_empty_data():
    summary = summarize([])

    fig = top_creditors_chart(summary)

    assert isinstance(fig, Figure)
    assert not fig.axes[0].axison


def test_export_analysis_charts_writes_pngs(tmp_path, ledger_records):
    paths = export_analysis_charts(summarize(ledger_records), tmp_path / "charts")

    assert set(paths) == set(CHART_BUILDERS)
    for path in paths.values():
        assert path.exists()
        assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_save_chart_png_creates_parent(tmp_path, ledger_records):
    fig = top_creditors_chart(summarize(ledger_records))

    path = save_chart_png(fig, tmp_path / "nested" / "top.png")

    assert path.exists()
