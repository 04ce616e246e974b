"""Mini README: Utility helper functions for the back office.

Exports display formatting shared by the web pages, the CSV export and the
printable report.
"""

from .formatting import (
    format_currency,
    format_deadline_stamp,
    format_locale_date,
    js_number,
)

__all__ = ["format_currency", "format_deadline_stamp", "format_locale_date", "js_number"]
