"""Mini README: Entry point CLI for the EKO Prints back office.

Commands:
    * run - start the FastAPI task board and expense ledger with uvicorn.
    * countdown - watch one deadline tick down in the terminal.
    * export-expenses - write the demo ledger as CSV and/or a printable report.

Settings come from ``EKOPRINTS_`` environment variables when available and
command-line options override them.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from ekoprints.clock import now_utc
from ekoprints.configuration import get_settings
from ekoprints.expenses.view import ExpenseView
from ekoprints.export import ExpenseReportExporter, FilePrintSurface
from ekoprints.logging_utils import configure_root_logger
from ekoprints.notifications import NotificationService, Severity, Toast
from ekoprints.store import InMemoryBackOffice
from ekoprints.tasks import CountdownTicker, DeadlineState

cli = typer.Typer(help="Launch and manage the EKO Prints back office.")


def _echo_toast(toast: Toast) -> None:
    typer.echo(f"[{toast.severity.value}] {toast.message}", err=toast.severity is Severity.ERROR)


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the wildcard bind address; point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        "Starting EKO Prints back office on "
        f"{effective_host}:{effective_port}.\n"
        "Open your browser at "
        f"http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "ekoprints.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def countdown(
    deadline: str = typer.Argument(..., help="ISO deadline; naive values use the configured zone."),
    interval: Optional[float] = typer.Option(None, help="Seconds between re-evaluations."),
    ticks: int = typer.Option(0, help="Stop after this many updates (0 runs until overdue)."),
) -> None:
    """Print the remaining time to DEADLINE until it is overdue or interrupted."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    period = interval or settings.countdown_interval_seconds

    async def _watch() -> None:
        finished = asyncio.Event()
        seen = 0

        def _show(state: DeadlineState) -> None:
            nonlocal seen
            seen += 1
            typer.echo(f"{datetime.now(settings.zone):%H:%M:%S}  {state.label}")
            if state.is_overdue or (ticks and seen >= ticks):
                finished.set()

        ticker = CountdownTicker(
            deadline, _show, interval_seconds=period, clock=now_utc, zone=settings.zone
        )
        ticker.start()
        try:
            await finished.wait()
        finally:
            ticker.cancel()

    try:
        asyncio.run(_watch())
    except ValueError as error:
        raise typer.BadParameter(str(error), param_hint="DEADLINE") from error
    except KeyboardInterrupt:
        typer.echo("Countdown stopped.")


@cli.command("export-expenses")
def export_expenses(
    user: str = typer.Option("", help="Only include expenses by this user id."),
    category: str = typer.Option("", help="Only include this category."),
    date_from: Optional[datetime] = typer.Option(
        None, "--from", formats=["%Y-%m-%d"], help="First day to include."
    ),
    date_to: Optional[datetime] = typer.Option(
        None, "--to", formats=["%Y-%m-%d"], help="Last day to include."
    ),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write the CSV export here."),
    report_path: Optional[Path] = typer.Option(
        None, "--report", help="Write the printable HTML report here."
    ),
) -> None:
    """Export the demo ledger as an administrator would see it."""

    settings = get_settings()
    configure_root_logger(settings.log_level)
    if csv_path is None and report_path is None:
        raise typer.BadParameter("Pass --csv and/or --report.")

    store = InMemoryBackOffice(seed_demo=True, zone=settings.zone)
    admin = next(candidate for candidate in store.list_users() if candidate.is_admin)
    notifier = NotificationService(_echo_toast)
    ledger = ExpenseView(
        admin,
        store.expense_actions(admin),
        store.category_actions(),
        notifier,
        exporter=ExpenseReportExporter(
            currency=settings.currency_code,
            filename_prefix=settings.export_filename_prefix,
            zone=settings.zone,
        ),
        zone=settings.zone,
    )
    ledger.refresh(store.snapshot())
    ledger.set_filters(
        user_id=user,
        category=category,
        date_start=date_from.date() if date_from else None,
        date_end=date_to.date() if date_to else None,
    )

    if csv_path is not None:
        export = ledger.export_csv()
        csv_path.write_text(export.content, encoding="utf-8")
        typer.echo(f"CSV written to {csv_path} (suggested name {export.filename}).")
    if report_path is not None:
        surface = ledger.print_report(FilePrintSurface.factory(report_path))
        if surface is None:
            raise typer.Exit(code=1)
        typer.echo(f"Report written to {report_path}.")


if __name__ == "__main__":
    cli()
