"""Mini README: Export the visible expense ledger as CSV or a printable report.

Structure:
    * CsvExport - filename plus delimited text ready for download.
    * PrintSurface - where the printable document is written before printing.
    * BrowserPrintSurface / FilePrintSurface - new browser tab or file on disk.
    * ExpenseReportExporter - renders both artefacts from already-filtered rows.

The exporter never filters; it is handed exactly the rows the ledger shows,
so the report total always matches the screen. The CSV keeps raw amounts for
spreadsheets while the printable report uses formatted currency. When no
print surface can be opened the caller is told through an error toast and
the document is discarded.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..access import ExpenseFilters
from ..directory import User, username_for
from ..expenses.records import Expense, coerce_amount, expense_date
from ..logging_utils import get_logger
from ..notifications import NotificationService
from ..utils.formatting import format_currency, format_locale_date, js_number

LOGGER = get_logger(__name__)

REPORT_TITLE = "Expenses Report"
POPUP_BLOCKED_MESSAGE = "Could not open print window. Please disable popup blockers."
_PRINT_TRIGGER = (
    "<script>window.addEventListener('load', function () "
    "{ window.focus(); window.print(); });</script>"
)


@dataclass(slots=True, frozen=True)
class CsvExport:
    filename: str
    content: str
    media_type: str = "text/csv; charset=utf-8"


class PrintSurface(ABC):
    """A display that receives one document and then prints it."""

    @abstractmethod
    def write(self, document: str) -> None:
        """Receive the complete HTML document."""

    @abstractmethod
    def print(self) -> None:
        """Trigger printing of the written document."""

    @staticmethod
    def with_print_trigger(document: str) -> str:
        """Append the script that opens the print dialog once the page loads."""

        if "</body>" in document:
            return document.replace("</body>", f"{_PRINT_TRIGGER}</body>", 1)
        return document + _PRINT_TRIGGER


SurfaceFactory = Callable[[], Optional[PrintSurface]]


class BrowserPrintSurface(PrintSurface):
    """Buffer the report for a freshly opened browser tab."""

    def __init__(self) -> None:
        self.document = ""
        self.printed = False

    def write(self, document: str) -> None:
        self.document = document

    def print(self) -> None:
        self.document = self.with_print_trigger(self.document)
        self.printed = True


class FilePrintSurface(PrintSurface):
    """Write the report to disk; opening the file in a browser prints it."""

    def __init__(self, handle: TextIO, path: Path) -> None:
        self._handle = handle
        self.path = path
        self._document = ""

    @classmethod
    def factory(cls, path: Path) -> SurfaceFactory:
        """Return a factory yielding ``None`` when ``path`` cannot be opened."""

        def _open() -> Optional[FilePrintSurface]:
            try:
                handle = path.open("w", encoding="utf-8")
            except OSError as error:
                LOGGER.warning("Cannot open report destination %s: %s", path, error)
                return None
            return cls(handle, path)

        return _open

    def write(self, document: str) -> None:
        self._document = document

    def print(self) -> None:
        with self._handle:
            self._handle.write(self.with_print_trigger(self._document))
        LOGGER.info("Printable report written to %s", self.path)


class ExpenseReportExporter:
    """Render CSV and printable artefacts for a set of visible expenses."""

    def __init__(
        self,
        *,
        currency: str = "UGX",
        filename_prefix: str = "eko_prints_expenses",
        zone: tzinfo = timezone.utc,
    ) -> None:
        self.currency = currency
        self.filename_prefix = filename_prefix
        self.zone = zone
        self._templates = Environment(
            loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
            autoescape=select_autoescape(["html"]),
        )

    # -- CSV ------------------------------------------------------------------

    def csv_filename(self, now: datetime) -> str:
        return f"{self.filename_prefix}_{now.astimezone(timezone.utc).date().isoformat()}.csv"

    def export_csv(self, rows: Sequence[Expense], now: datetime) -> CsvExport:
        """Build the delimited export; identical rows and ``now`` give identical bytes."""

        headers = ["Date", "User", "Category", "Description", f"Amount ({self.currency})"]
        lines = [",".join(headers)]
        for expense in rows:
            lines.append(
                ",".join(
                    [
                        format_locale_date(expense_date(expense.date, self.zone)),
                        _quoted(expense.user_name),
                        _quoted(expense.category),
                        _quoted(expense.description),
                        js_number(expense.amount),
                    ]
                )
            )
        LOGGER.info("Exported %s expenses to CSV", len(rows))
        return CsvExport(filename=self.csv_filename(now), content="\n".join(lines) + "\n")

    # -- printable report -----------------------------------------------------

    @staticmethod
    def total(rows: Sequence[Expense]) -> float:
        return sum(coerce_amount(expense.amount) for expense in rows)

    def summarise_filters(self, filters: ExpenseFilters, users: Sequence[User]) -> str:
        """List only the active filters, separated by semicolons."""

        parts: List[str] = []
        if filters.user_id:
            parts.append(f"User: {username_for(users, filters.user_id)}")
        if filters.category:
            parts.append(f"Category: {filters.category}")
        if filters.date_start:
            parts.append(f"From: {format_locale_date(filters.date_start)}")
        if filters.date_end:
            parts.append(f"To: {format_locale_date(filters.date_end)}")
        return "; ".join(parts)

    def render_report(
        self,
        rows: Sequence[Expense],
        *,
        filters: ExpenseFilters,
        users: Sequence[User],
        now: datetime,
    ) -> str:
        """Render the printable HTML document with a closing total row."""

        template = self._templates.get_template("expense_report.html")
        return template.render(
            title=REPORT_TITLE,
            generated_on=format_locale_date(now.astimezone(self.zone)),
            filters_used=self.summarise_filters(filters, users),
            rows=[
                {
                    "date": format_locale_date(expense_date(expense.date, self.zone)),
                    "user": expense.user_name,
                    "category": expense.category,
                    "description": expense.description,
                    "amount": format_currency(expense.amount, self.currency),
                }
                for expense in rows
            ],
            total=format_currency(self.total(rows), self.currency),
        )

    def print_report(
        self,
        rows: Sequence[Expense],
        *,
        filters: ExpenseFilters,
        users: Sequence[User],
        now: datetime,
        surface_factory: SurfaceFactory,
        notifier: NotificationService,
    ) -> Optional[PrintSurface]:
        """Hand the report to a new surface and print it, or report why not.

        Rendering finishes before any surface is opened.
        """

        document = self.render_report(rows, filters=filters, users=users, now=now)
        surface = surface_factory()
        if surface is None:
            LOGGER.warning("Print surface unavailable; report discarded")
            notifier.error(POPUP_BLOCKED_MESSAGE)
            return None
        surface.write(document)
        surface.print()
        LOGGER.info("Printed expense report with %s rows", len(rows))
        return surface


def _quoted(value: object) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'
