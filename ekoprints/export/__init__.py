"""Mini README: Export utilities for the expense ledger.

Exposes the CSV and printable-report exporter together with the print
surfaces it writes to. Additional formats can be added next to it.
"""

from .expense_report import (
    BrowserPrintSurface,
    CsvExport,
    ExpenseReportExporter,
    FilePrintSurface,
    PrintSurface,
)

__all__ = [
    "BrowserPrintSurface",
    "CsvExport",
    "ExpenseReportExporter",
    "FilePrintSurface",
    "PrintSurface",
]
