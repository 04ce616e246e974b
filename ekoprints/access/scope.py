"""Mini README: Access scope policy for tasks and expenses.

Structure:
    * ExpenseFilters - admin-only narrowing of the expense ledger.
    * visible_tasks - admins see every task, others only their assignments.
    * visible_expenses - admins get the annotated, filterable history; other
      users get their own entries for today only.

The asymmetry backs the "submit today's expense, then it locks" workflow.
It is enforced here and in the views, not by the data layer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence

from ..directory import User, username_for
from ..expenses.records import Expense, expense_date
from ..tasks.records import Task

UNKNOWN_USER = "Unknown User"


@dataclass(slots=True, frozen=True)
class ExpenseFilters:
    """Active admin filters; empty values mean "no constraint"."""

    user_id: str = ""
    category: str = ""
    date_start: Optional[date] = None
    date_end: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return bool(self.user_id or self.category or self.date_start or self.date_end)

    def matches(self, expense: Expense, zone: tzinfo = timezone.utc) -> bool:
        if self.user_id and expense.user_id != self.user_id:
            return False
        if self.category and expense.category != self.category:
            return False
        if self.date_start is None and self.date_end is None:
            return True
        occurred_on = expense_date(expense.date, zone)
        if self.date_start is not None and occurred_on < self.date_start:
            return False
        if self.date_end is not None and occurred_on > self.date_end:
            return False
        return True


NO_FILTERS = ExpenseFilters()


def visible_tasks(tasks: Iterable[Task], user: User) -> List[Task]:
    """Return the tasks ``user`` may see, preserving snapshot order."""

    if user.is_admin:
        return list(tasks)
    return [task for task in tasks if task.assigned_to == user.user_id]


def visible_expenses(
    expenses: Iterable[Expense],
    user: User,
    users: Sequence[User],
    *,
    today: date,
    filters: ExpenseFilters = NO_FILTERS,
    zone: tzinfo = timezone.utc,
) -> List[Expense]:
    """Return the expenses ``user`` may see.

    Admin rows carry the author's current username; a departed author shows
    as ``Unknown User``. Non-admin results ignore ``filters`` entirely.
    """

    if user.is_admin:
        annotated = (
            replace(expense, user_name=username_for(users, expense.user_id, UNKNOWN_USER))
            for expense in expenses
        )
        return [expense for expense in annotated if filters.matches(expense, zone)]
    return [
        expense
        for expense in expenses
        if expense.user_id == user.user_id and expense_date(expense.date, zone) == today
    ]
