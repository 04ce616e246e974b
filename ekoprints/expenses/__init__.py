"""Mini README: Expense ledger for the back office.

This package groups the expense and category records, the coercion rules
applied to form input and the add/edit drafts. The ``view`` module builds
the per-user ledger screen on top of them and is imported directly by the
interfaces.
"""

from .editor import CategoryActions, CategoryDraft, ExpenseActions, ExpenseDraft, update_payload
from .records import (
    Expense,
    ExpenseCategory,
    checked_expense_date,
    coerce_amount,
    expense_date,
)

__all__ = [
    "CategoryActions",
    "CategoryDraft",
    "Expense",
    "ExpenseActions",
    "ExpenseCategory",
    "ExpenseDraft",
    "checked_expense_date",
    "coerce_amount",
    "expense_date",
    "update_payload",
]
