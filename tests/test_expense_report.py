"""Mini README: Tests for CSV and printable expense exports plus amount formatting.

Structure:
    * test_format_currency_* - half-up rounding, grouping and the zero fallback.
    * test_export_csv_* - header, quoting, raw amounts and the dated filename.
    * test_render_report_* - filter summary and the closing total row.
    * test_print_report_* - surfaces, print trigger, the popup-blocked toast and
      rendering before any surface is opened.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from ekoprints.access import ExpenseFilters
from ekoprints.expenses import Expense
from ekoprints.export import BrowserPrintSurface, ExpenseReportExporter, FilePrintSurface
from ekoprints.notifications import Severity
from ekoprints.utils.formatting import format_currency, format_locale_date, js_number

NOW = datetime(2024, 3, 7, 12, 0, tzinfo=timezone.utc)

ROWS = [
    Expense("exp_0002", "u_grace", "2024-03-07", "Supplies", 'A4 paper "premium"', 64500.0, "grace"),
    Expense("exp_0001", "u_admin", "2024-02-15", "Rent", "Workshop rent", 850000.5, "amina"),
]


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (12345.6, "12,346 UGX"),
        (0.5, "1 UGX"),
        (1000000, "1,000,000 UGX"),
        (-2.5, "-2 UGX"),
        (float("nan"), "0 UGX"),
        (float("inf"), "0 UGX"),
        ("12", "0 UGX"),
        (None, "0 UGX"),
    ],
)
def test_format_currency_rounds_and_groups(amount, expected) -> None:
    assert format_currency(amount) == expected


def test_formatting_helpers() -> None:
    assert js_number(850000.0) == "850000"
    assert js_number(850000.5) == "850000.5"
    assert format_locale_date(date(2024, 3, 7)) == "3/7/2024"


def test_export_csv_content_and_filename() -> None:
    exporter = ExpenseReportExporter()

    export = exporter.export_csv(ROWS, NOW)

    assert export.filename == "eko_prints_expenses_2024-03-07.csv"
    assert export.content.splitlines() == [
        "Date,User,Category,Description,Amount (UGX)",
        '3/7/2024,"grace","Supplies","A4 paper ""premium""",64500',
        '2/15/2024,"amina","Rent","Workshop rent",850000.5',
    ]
    assert exporter.export_csv(ROWS, NOW) == export


def test_export_csv_with_no_rows_keeps_the_header() -> None:
    export = ExpenseReportExporter().export_csv([], NOW)

    assert export.content == "Date,User,Category,Description,Amount (UGX)\n"


def test_export_csv_filename_uses_the_utc_day() -> None:
    late = datetime(2024, 3, 7, 23, 30, tzinfo=timezone.utc)

    assert ExpenseReportExporter().csv_filename(late) == "eko_prints_expenses_2024-03-07.csv"


def test_render_report_lists_filters_and_total(users) -> None:
    exporter = ExpenseReportExporter()
    filters = ExpenseFilters(user_id="u_grace", category="Supplies", date_start=date(2024, 3, 1))

    document = exporter.render_report(ROWS, filters=filters, users=users, now=NOW)

    assert "<title>Expenses Report</title>" in document
    assert "Generated on: 3/7/2024" in document
    assert "Filters: User: grace; Category: Supplies; From: 3/1/2024" in document
    assert "A4 paper &#34;premium&#34;" in document
    assert "64,500 UGX" in document
    assert 'class="total-row"' in document
    assert "914,501 UGX" in document


def test_render_report_omits_the_filter_line_when_inactive(users) -> None:
    document = ExpenseReportExporter().render_report(
        ROWS, filters=ExpenseFilters(), users=users, now=NOW
    )

    assert "Filters:" not in document


def test_print_report_to_browser_surface(users, notifier) -> None:
    surface = ExpenseReportExporter().print_report(
        ROWS,
        filters=ExpenseFilters(),
        users=users,
        now=NOW,
        surface_factory=BrowserPrintSurface,
        notifier=notifier,
    )

    assert isinstance(surface, BrowserPrintSurface)
    assert surface.printed
    assert "window.print()" in surface.document
    assert surface.document.index("window.print()") < surface.document.index("</body>")
    assert notifier.pending == []


def test_print_report_to_file(tmp_path: Path, users, notifier) -> None:
    destination = tmp_path / "report.html"

    surface = ExpenseReportExporter().print_report(
        ROWS,
        filters=ExpenseFilters(),
        users=users,
        now=NOW,
        surface_factory=FilePrintSurface.factory(destination),
        notifier=notifier,
    )

    assert surface is not None
    written = destination.read_text(encoding="utf-8")
    assert "Workshop rent" in written
    assert "window.print()" in written


def test_print_report_without_surface_reports_popup_blocked(tmp_path: Path, users, notifier) -> None:
    blocked = tmp_path / "missing" / "report.html"

    surface = ExpenseReportExporter().print_report(
        ROWS,
        filters=ExpenseFilters(),
        users=users,
        now=NOW,
        surface_factory=FilePrintSurface.factory(blocked),
        notifier=notifier,
    )

    assert surface is None
    assert not blocked.exists()
    [toast] = notifier.drain()
    assert toast.severity is Severity.ERROR
    assert toast.message == "Could not open print window. Please disable popup blockers."


def test_print_report_renders_before_opening_a_surface(tmp_path: Path, users, notifier) -> None:
    destination = tmp_path / "report.html"
    opened = []

    def _factory():
        opened.append(destination)
        return FilePrintSurface.factory(destination)()

    broken = [Expense("exp_0100", "u_grace", "2024-3-07", "Supplies", "Toner", 1000.0, "grace")]

    with pytest.raises(ValueError):
        ExpenseReportExporter().print_report(
            broken,
            filters=ExpenseFilters(),
            users=users,
            now=NOW,
            surface_factory=_factory,
            notifier=notifier,
        )

    assert opened == []
    assert not destination.exists()
