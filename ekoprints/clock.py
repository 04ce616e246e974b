"""Mini README: Clock helpers shared by the task board and expense ledger.

Structure:
    * now_utc - timezone-aware current instant.
    * local_today - calendar day in the configured business zone.
    * parse_instant - ISO strings or datetimes to aware datetimes.
    * to_iso_instant - aware datetime to ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

Views take a ``Clock`` callable so tests can pin "now".
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Union

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """Return the current time in UTC."""

    return datetime.now(timezone.utc)


def local_today(zone: tzinfo, now: datetime | None = None) -> date:
    """Return the calendar day ``now`` falls on in ``zone``."""

    current = now or now_utc()
    return current.astimezone(zone).date()


def parse_instant(value: Union[str, datetime], zone: tzinfo = timezone.utc) -> datetime:
    """Parse an ISO-8601 instant; naive values are read as ``zone`` wall time."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Timestamp must not be empty.")
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError("Timestamps must be ISO strings or datetime instances.")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def to_iso_instant(value: datetime) -> str:
    """Render an aware datetime as a UTC ISO instant with millisecond precision."""

    if value.tzinfo is None:
        raise ValueError("Only timezone-aware datetimes can be rendered as instants.")
    utc_value = value.astimezone(timezone.utc)
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"
