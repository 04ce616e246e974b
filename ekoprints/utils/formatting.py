"""Mini README: Human-readable formatting helpers.

Amounts are shown rounded half up and grouped by thousands with a currency
suffix; anything that is not a finite number shows as zero instead of
raising. Dates follow the short US style used across the office
(``3/7/2024``) so exported files read the same on every machine. Keeping
the helpers here avoids importing the web framework in exporters or tests.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from numbers import Real


def _finite_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def format_currency(amount: object, currency: str = "UGX") -> str:
    """Return ``12,346 UGX`` for ``12345.6``; non-numeric input gives ``0 UGX``."""

    number = _finite_number(amount)
    rounded = math.floor(number + 0.5) if number is not None else 0
    return f"{rounded:,} {currency}"


def js_number(value: object) -> str:
    """Render a raw amount the way the browser did: no trailing ``.0``."""

    number = _finite_number(value)
    if number is None:
        return "0"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def format_locale_date(value: date | datetime) -> str:
    """Short month/day/year date without zero padding."""

    return f"{value.month}/{value.day}/{value.year}"


def format_deadline_stamp(value: datetime) -> str:
    """Medium date with a short 12-hour time, e.g. ``Jan 5, 2024, 2:30 PM``."""

    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value:%b} {value.day}, {value.year}, {hour}:{value.minute:02d} {meridiem}"
