"""Command-line entry points for Ledgerscope."""

from __future__ import annotations

import functools
from pathlib import Path

import click

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories.ledger import SQLModelLedgerRepository
from .logging_config import setup_logging
from .services.aggregation import summarize
from .services.charts import export_analysis_charts
from .services.explorer import LedgerExplorer
from .services.filters import FACET_FIELDS, FilterState
from .services.import_csv import import_csv_file
from .services.ledger_store import LoadStatus, load_store
from .services.report_export import format_currency
from .services.sorting import ASC, DESC, SORTABLE_COLUMNS, SortState

_FILTER_OPTIONS = (
    ("--date-from", "date_from", "Inclusive lower date bound (YYYY-MM-DD)."),
    ("--date-to", "date_to", "Inclusive upper date bound (YYYY-MM-DD)."),
    ("--nature", "nature", "Nature (receita/despesa); 'all' disables."),
    ("--type", "type", "Exact type."),
    ("--managing-unit", "managing_unit", "Exact managing unit."),
    ("--budget-unit", "budget_unit", "Exact budget unit."),
    ("--program", "program", "Exact program."),
    ("--element", "element", "Exact element code."),
    ("--creditor", "creditor", "Creditor substring."),
    ("--cash-doc", "cash_doc", "Cash document substring."),
    ("--description", "description", "Description substring."),
    ("--year", "year", "Year (YYYY)."),
    ("--month", "month", "Month (MM)."),
)


def filter_options(func):
    """Attach the shared filter flags and pass a FilterState as ``filters``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        values = {dest: kwargs.pop(dest) for _, dest, _ in _FILTER_OPTIONS}
        kwargs["filters"] = FilterState.from_mapping({k: v for k, v in values.items() if v is not None})
        return func(*args, **kwargs)

    for flag, dest, help_text in reversed(_FILTER_OPTIONS):
        wrapper = click.option(flag, dest, default=None, help=help_text)(wrapper)
    return wrapper


def _explorer(ctx: click.Context) -> LedgerExplorer:
    config: BaseConfig = ctx.obj["config"]
    store = load_store(ctx.obj["repository"])
    if store.status is LoadStatus.UNAVAILABLE:
        raise click.ClickException(f"Ledger data unavailable: {store.error}")
    return LedgerExplorer(store, page_size=config.PAGE_SIZE)


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Explore, summarize and export the municipal ledger."""

    config = BaseConfig()
    setup_logging(config)
    _, session_factory = bootstrap_database(config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["repository"] = SQLModelLedgerRepository(session_factory)


@main.command("import-csv")
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--encoding", default="utf-8", show_default=True)
@click.pass_context
def import_csv_command(ctx: click.Context, csv_path: Path, encoding: str) -> None:
    """Load a CSV dump of the ledger table into the local store."""

    stored = import_csv_file(csv_path=csv_path, repository=ctx.obj["repository"], encoding=encoding)
    click.echo(f"Imported {stored} record(s) from {csv_path}")


@main.command("facets")
@filter_options
@click.pass_context
def facets_command(ctx: click.Context, filters: FilterState) -> None:
    """Print the selectable values of every facet."""

    options = _explorer(ctx).facet_options(filters)
    for field in FACET_FIELDS:
        click.echo(f"{field}: {', '.join(options[field]) or '-'}")


@main.command("summary")
@filter_options
@click.pass_context
def summary_command(ctx: click.Context, filters: FilterState) -> None:
    """Print totals, monthly series and top creditors."""

    explorer = _explorer(ctx)
    if explorer.is_empty_result(filters):
        click.echo("Nenhum dado encontrado na base")
        return
    summary = explorer.summary(filters)
    click.echo(f"Registros: {len(explorer.filtered(filters))}")
    for name, value in summary.totals.as_dict().items():
        click.echo(f"{name}: {format_currency(value)}")
    click.echo("Mensal:")
    for entry in summary.monthly:
        click.echo(f"  {entry.month}  {format_currency(entry.revenue)}  {format_currency(entry.expense)}")
    click.echo("Top credores:")
    for name, value in summary.top_creditors:
        click.echo(f"  {name}: {format_currency(value)}")


@main.command("export")
@filter_options
@click.option("--sort", "sort_column", type=click.Choice(SORTABLE_COLUMNS), default="date", show_default=True)
@click.option("--direction", type=click.Choice([ASC, DESC]), default=ASC, show_default=True)
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--charts", "with_charts", is_flag=True, default=False, help="Also render analysis charts as PNG.")
@click.pass_context
def export_command(
    ctx: click.Context,
    filters: FilterState,
    sort_column: str,
    direction: str,
    output_dir: Path | None,
    with_charts: bool,
) -> None:
    """Write the PDF report of the filtered, sorted ledger."""

    config: BaseConfig = ctx.obj["config"]
    target = output_dir or config.EXPORT_DIR
    explorer = _explorer(ctx)
    sort = SortState(sort_column, direction)
    path = explorer.export(filters, sort, target, settings=config.report_settings())
    click.echo(f"Report written: {path}")
    if with_charts:
        charts = export_analysis_charts(summarize(explorer.filtered(filters)), target / "charts")
        for chart_path in charts.values():
            click.echo(f"Chart written: {chart_path}")


if __name__ == "__main__":  # pragma: no cover
    main()
