"""Mini README: Role-scoped visibility shared by the task board and ledger.

The functions here decide which records a user may see. They are plain
policies over snapshots so both views, the exporter and the CLI apply the
exact same rules.
"""

from .scope import UNKNOWN_USER, ExpenseFilters, visible_expenses, visible_tasks

__all__ = ["UNKNOWN_USER", "ExpenseFilters", "visible_expenses", "visible_tasks"]
