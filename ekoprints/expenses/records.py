"""Mini README: Expense ledger records.

Structure:
    * Expense - a recorded expenditure with its author and category label.
    * ExpenseCategory - admin-managed label offered as a suggestion.
    * coerce_amount - numeric coercion that falls back to zero.
    * expense_date - calendar day of an ISO date or timestamp.
    * checked_expense_date - stored form of a date, rejecting malformed text.

Category labels on expenses are free text; renaming or deleting a category
leaves historical expenses untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, Union

from ..clock import parse_instant


@dataclass(slots=True, frozen=True)
class Expense:
    """Represent a ledger entry authored by a user."""

    expense_id: str
    user_id: str
    date: str
    category: str
    description: str
    amount: float = 0.0
    user_name: str = ""

    def as_dict(self) -> Dict[str, object]:
        return {
            "expense_id": self.expense_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "date": self.date,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
        }


@dataclass(slots=True, frozen=True)
class ExpenseCategory:
    category_id: str
    name: str


def coerce_amount(value: object) -> float:
    """Coerce form input to a number, defaulting to ``0`` when it is not one."""

    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def expense_date(value: Union[str, date, datetime], zone: tzinfo) -> date:
    """Return the local calendar day of an expense date.

    Plain ``YYYY-MM-DD`` strings are already calendar days. Full timestamps
    are moved into ``zone`` first so late-evening entries stay on their day.
    """

    if isinstance(value, datetime):
        return parse_instant(value, zone).astimezone(zone).date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    return parse_instant(text, zone).astimezone(zone).date()


def checked_expense_date(value: Union[str, date, datetime], zone: tzinfo = timezone.utc) -> str:
    """Return the text stored for an expense date, raising ``ValueError`` when malformed.

    Calendar days are normalised to ``YYYY-MM-DD``; full timestamps are kept
    as given once they parse.
    """

    if isinstance(value, (date, datetime)):
        return value.isoformat()
    text = str(value).strip()
    try:
        day = expense_date(text, zone)
    except ValueError as error:
        raise ValueError(f"Expense date must be YYYY-MM-DD, got '{value}'.") from error
    return day.isoformat() if len(text) <= 10 else text
