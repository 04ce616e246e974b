"""Mini README: Expense and category drafts plus their persistence callbacks.

Structure:
    * ExpenseActions / CategoryActions - async callbacks from the data layer.
    * ExpenseDraft - add/edit form state with amount coercion.
    * update_payload - editable fields of an expense; identity and author are stripped.
    * CategoryDraft - single name field.

Amounts typed into the form are coerced on every change, so a stray
character leaves the draft at ``0`` rather than blocking the submit button.
Dates are stricter: a malformed day raises ``ValueError`` and leaves the
draft unchanged, because every later render and export reads it back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional

from .records import Expense, checked_expense_date, coerce_amount

ExpensePayload = Dict[str, Any]

IMMUTABLE_EXPENSE_FIELDS = frozenset({"expense_id", "user_id", "user_name"})


@dataclass(slots=True, frozen=True)
class ExpenseActions:
    add: Callable[[ExpensePayload], Awaitable[object]]
    update: Callable[[str, ExpensePayload], Awaitable[object]]
    delete: Callable[[str], Awaitable[object]]


@dataclass(slots=True, frozen=True)
class CategoryActions:
    add: Callable[[str], Awaitable[object]]
    update: Callable[[str, str], Awaitable[object]]
    delete: Callable[[str], Awaitable[object]]


@dataclass(slots=True)
class ExpenseDraft:
    """Form state shared by the add and edit dialogs."""

    date: str = ""
    category: str = ""
    description: str = ""
    amount: float = 0.0

    @classmethod
    def for_day(cls, day: date) -> "ExpenseDraft":
        return cls(date=day.isoformat())

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseDraft":
        return cls(
            date=expense.date.split("T")[0],
            category=expense.category,
            description=expense.description,
            amount=coerce_amount(expense.amount),
        )

    @property
    def is_complete(self) -> bool:
        """Date, category and description are required; amount never blocks."""

        return bool(self.date and self.category and self.description)

    def update(self, **fields: Optional[object]) -> "ExpenseDraft":
        changes: Dict[str, object] = {}
        for key, value in fields.items():
            if key not in ExpenseDraft.__dataclass_fields__:
                raise ValueError(f"Expense form has no field '{key}'.")
            if value is None:
                continue
            if key == "amount":
                changes[key] = coerce_amount(value)
            elif key == "date" and str(value).strip():
                changes[key] = checked_expense_date(value)
            else:
                changes[key] = str(value)
        for key, value in changes.items():
            setattr(self, key, value)
        return self

    def as_payload(self) -> ExpensePayload:
        if not self.is_complete:
            raise ValueError("Date, category and description are required.")
        return {
            "date": checked_expense_date(self.date),
            "category": self.category,
            "description": self.description,
            "amount": coerce_amount(self.amount),
        }


def update_payload(expense: Expense, draft: ExpenseDraft) -> ExpensePayload:
    """Merge the edited fields over ``expense`` and drop the fields this path cannot change."""

    merged = {**expense.as_dict(), **draft.as_payload()}
    return {key: value for key, value in merged.items() if key not in IMMUTABLE_EXPENSE_FIELDS}


@dataclass(slots=True)
class CategoryDraft:
    name: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.name)
