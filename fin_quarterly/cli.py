"""
fin_quarterly/cli.py
====================
Command line entry point.

    fin-quarterly import ./exports          parse the tree and upsert every record
    fin-quarterly preview ./exports         parse only, print the records
    fin-quarterly companies | categories    list what is stored
    fin-quarterly metric revenue -c SBER    print one metric as a company × quarter table
    fin-quarterly delete-company SBER
"""
from __future__ import annotations
import signal
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer

from .config import load_config
from .exceptions import (
    CompanyNotFoundError, FinQuarterlyError, ImportCancelled, RootPathError, UnknownMetricError,
)
from .formatting import metric_label
from .frames import pivot_metric, records_frame
from .importer import run_import
from .log import configure_logging, get_logger
from .parser import parse_tree
from .repository import QuarterRepository

log = get_logger(__name__)

EXIT_CANCELLED = 130

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Quarterly financials importer")


@app.callback()
def main(
    ctx: typer.Context,
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="SQLAlchemy URL; defaults to $DATABASE_URL.",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Root logging level; defaults to $LOG_LEVEL or INFO.",
    ),
) -> None:
    cfg = load_config()
    if database_url:
        cfg.database_url = database_url
    if log_level:
        cfg.log_level = log_level.upper()
    configure_logging(cfg.log_level)
    ctx.obj = cfg


def _open_repository(ctx: typer.Context) -> QuarterRepository:
    repo = QuarterRepository.from_url(ctx.obj.database_url)
    repo.create_schema()
    return repo


@contextmanager
def _stop_on_signals(stop: threading.Event) -> Iterator[None]:
    """SIGINT/SIGTERM set the stop event instead of killing the run mid-write."""
    def _handler(signum, frame):
        log.warning("stop requested", extra={"extra": {"signal": signum}})
        stop.set()

    previous = {}
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGINT, signal.SIGTERM):
            previous[sig] = signal.getsignal(sig)
            signal.signal(sig, _handler)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@app.command("import")
def import_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Root of the CSV tree; defaults to $CSV_PATH."),
) -> None:
    """Parse every CSV under PATH and upsert the quarter records."""
    root = path or ctx.obj.csv_path
    if not root:
        raise typer.BadParameter("a CSV path is required (argument or $CSV_PATH)", param_hint="PATH")

    repo = _open_repository(ctx)
    stop = threading.Event()
    try:
        with _stop_on_signals(stop):
            stats = run_import(root, repo, stop_event=stop)
    except ImportCancelled as exc:
        typer.echo(f"cancelled after {exc.stats.records_saved} records", err=True)
        raise typer.Exit(EXIT_CANCELLED)
    except FinQuarterlyError as exc:
        log.error("import failed", extra={"extra": {"error": str(exc)}})
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        repo.dispose()

    typer.echo(
        f"saved {stats.records_saved}/{stats.records_total} records "
        f"from {stats.files_parsed} files ({stats.files_failed} files failed, "
        f"{stats.records_failed} writes failed)"
    )


@app.command("preview")
def preview_command(path: str = typer.Argument(..., help="CSV file or directory.")) -> None:
    """Parse without writing and print the resulting records."""
    try:
        result = parse_tree(path)
    except RootPathError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)

    df = records_frame(result.records)
    if df.empty:
        typer.echo("no records")
    else:
        typer.echo(df.to_string(index=False))
    for err in result.errors:
        typer.echo(f"skipped {err.path}: {err.reason}", err=True)


@app.command("companies")
def companies_command(
    ctx: typer.Context,
    with_category: bool = typer.Option(False, "--with-category", help="Show the category next to each company."),
) -> None:
    repo = _open_repository(ctx)
    try:
        if with_category:
            for info in repo.get_companies_with_categories():
                typer.echo(f"{info.company}\t{info.category}")
        else:
            for company in repo.get_all_companies():
                typer.echo(company)
    finally:
        repo.dispose()


@app.command("categories")
def categories_command(ctx: typer.Context) -> None:
    repo = _open_repository(ctx)
    try:
        for category in repo.get_all_categories():
            typer.echo(category)
    finally:
        repo.dispose()


@app.command("metric")
def metric_command(
    ctx: typer.Context,
    metric: str = typer.Argument(..., help="capitalization, revenue, net_profit, ebitda, debt, pe or roe"),
    company: Optional[List[str]] = typer.Option(None, "--company", "-c", help="Restrict to these companies."),
) -> None:
    """Print one metric as a company × quarter table."""
    repo = _open_repository(ctx)
    try:
        rows = repo.get_companies_metric(company or [], metric)
    except UnknownMetricError as exc:
        raise typer.BadParameter(str(exc), param_hint="METRIC")
    finally:
        repo.dispose()

    if not rows:
        typer.echo("no data")
        return
    typer.echo(metric_label(metric))
    typer.echo(pivot_metric(rows).to_string(na_rep="—"))


@app.command("delete-company")
def delete_company_command(ctx: typer.Context, company: str = typer.Argument(...)) -> None:
    repo = _open_repository(ctx)
    try:
        deleted = repo.delete_company(company)
    except (CompanyNotFoundError, ValueError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        repo.dispose()
    typer.echo(f"deleted {deleted} rows for {company.strip()}")


if __name__ == "__main__":
    app()
