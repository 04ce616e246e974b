"""Mini README: Per-user expense ledger screen and its category manager.

Structure:
    * ExpenseSummary - count, total and per-category totals of the visible rows.
    * CategoryManager - admin tab for creating, renaming and deleting categories.
    * ExpenseView - tabs, admin filters, add/edit dialogs, delete confirmation
      and CSV / printable exports of exactly the rows on screen.

Regular users get a daily log: they can add entries and see what they
submitted today, but nothing can be edited or deleted from their screen.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timezone, tzinfo
from typing import Dict, List, Optional, Tuple

from ..access import ExpenseFilters, visible_expenses
from ..clock import Clock, local_today, now_utc
from ..directory import User
from ..editing import ConfirmationPrompt, Dialog, FailurePolicy, commit
from ..export import CsvExport, ExpenseReportExporter, PrintSurface
from ..export.expense_report import SurfaceFactory
from ..logging_utils import get_logger
from ..notifications import NotificationService
from ..store.base import BackOfficeSnapshot
from .editor import CategoryActions, CategoryDraft, ExpenseActions, ExpenseDraft, update_payload
from .records import Expense, ExpenseCategory, coerce_amount

LOGGER = get_logger(__name__)

EXPENSES_TAB = "expenses"
CATEGORIES_TAB = "categories"


@dataclass(slots=True, frozen=True)
class ExpenseSummary:
    count: int = 0
    total: float = 0.0
    by_category: Tuple[Tuple[str, float], ...] = field(default_factory=tuple)


class CategoryManager:
    """Admin-only maintenance of the category suggestions."""

    def __init__(
        self,
        user: User,
        actions: CategoryActions,
        *,
        failure_policy: Optional[FailurePolicy] = None,
    ) -> None:
        self.user = user
        self._actions = actions
        self._failure_policy = failure_policy
        self.categories: Tuple[ExpenseCategory, ...] = ()
        self.add_dialog: Dialog[CategoryDraft] = Dialog(CategoryDraft)
        self.edit_dialog: Dialog[CategoryDraft] = Dialog(CategoryDraft)
        self.editing: Optional[ExpenseCategory] = None
        self.delete_prompt: ConfirmationPrompt[ExpenseCategory] = ConfirmationPrompt()

    def _require_admin(self) -> None:
        if not self.user.is_admin:
            raise PermissionError("Only administrators can manage expense categories.")

    def get_category(self, category_id: str) -> ExpenseCategory:
        for category in self.categories:
            if category.category_id == category_id:
                return category
        raise KeyError(f"Category {category_id} not found")

    def open_add(self) -> CategoryDraft:
        self._require_admin()
        return self.add_dialog.open()

    async def submit_add(self) -> bool:
        draft = self.add_dialog.draft
        if not draft.is_complete:
            raise ValueError("Category name is required.")
        LOGGER.info("Creating expense category '%s'", draft.name)
        return await commit(self.add_dialog, self._actions.add(draft.name), self._failure_policy)

    def open_edit(self, category: ExpenseCategory) -> CategoryDraft:
        self._require_admin()
        self.editing = category
        return self.edit_dialog.open(CategoryDraft(name=category.name))

    def close_edit(self) -> None:
        self.edit_dialog.close()
        self.editing = None

    async def submit_edit(self) -> bool:
        if self.editing is None:
            raise ValueError("No category is being edited.")
        draft = self.edit_dialog.draft
        if not draft.is_complete:
            raise ValueError("Category name is required.")
        category, self.editing = self.editing, None
        LOGGER.info("Renaming category %s to '%s'", category.category_id, draft.name)
        return await commit(
            self.edit_dialog,
            self._actions.update(category.category_id, draft.name),
            self._failure_policy,
        )

    def request_delete(self, category: ExpenseCategory) -> None:
        self._require_admin()
        self.delete_prompt.request(category)

    def cancel_delete(self) -> None:
        self.delete_prompt.cancel()

    async def confirm_delete(self) -> Optional[ExpenseCategory]:
        async def _delete(category: ExpenseCategory) -> None:
            LOGGER.info("Deleting category %s", category.category_id)
            await self._actions.delete(category.category_id)

        return await self.delete_prompt.confirm(_delete, self._failure_policy)


class ExpenseView:
    """Expense ledger for one signed-in user."""

    def __init__(
        self,
        user: User,
        actions: ExpenseActions,
        category_actions: CategoryActions,
        notifier: NotificationService,
        *,
        exporter: Optional[ExpenseReportExporter] = None,
        clock: Clock = now_utc,
        zone: tzinfo = timezone.utc,
        failure_policy: Optional[FailurePolicy] = None,
    ) -> None:
        self.user = user
        self._actions = actions
        self._notifier = notifier
        self._clock = clock
        self._zone = zone
        self._failure_policy = failure_policy
        self.exporter = exporter or ExpenseReportExporter(zone=zone)
        self._snapshot = BackOfficeSnapshot()
        self.active_tab = EXPENSES_TAB
        self.filters = ExpenseFilters()
        self.add_dialog: Dialog[ExpenseDraft] = Dialog(lambda: ExpenseDraft.for_day(self.today()))
        self.edit_dialog: Dialog[ExpenseDraft] = Dialog(ExpenseDraft)
        self.editing: Optional[Expense] = None
        self.delete_prompt: ConfirmationPrompt[Expense] = ConfirmationPrompt()
        self.category_manager = CategoryManager(
            user, category_actions, failure_policy=failure_policy
        )

    # -- data -----------------------------------------------------------------

    def refresh(self, snapshot: BackOfficeSnapshot) -> None:
        self._snapshot = snapshot
        self.category_manager.categories = snapshot.categories
        LOGGER.debug("Expense ledger for %s refreshed to v%s", self.user.user_id, snapshot.version)

    @property
    def users(self) -> List[User]:
        return list(self._snapshot.users)

    @property
    def categories(self) -> List[ExpenseCategory]:
        return list(self._snapshot.categories)

    @property
    def is_user_view(self) -> bool:
        return not self.user.is_admin

    def today(self) -> date:
        return local_today(self._zone, self._clock())

    def displayed_expenses(self) -> List[Expense]:
        return visible_expenses(
            self._snapshot.expenses,
            self.user,
            self._snapshot.users,
            today=self.today(),
            filters=self.filters,
            zone=self._zone,
        )

    def get_expense(self, expense_id: str) -> Expense:
        for expense in self.displayed_expenses():
            if expense.expense_id == expense_id:
                return expense
        raise KeyError(f"Expense {expense_id} not found")

    def summary(self) -> ExpenseSummary:
        """Aggregate the visible rows for the ledger header."""

        rows = self.displayed_expenses()
        per_category: Dict[str, float] = defaultdict(float)
        for expense in rows:
            per_category[expense.category] += coerce_amount(expense.amount)
        ordered = sorted(per_category.items(), key=lambda item: (-item[1], item[0]))
        return ExpenseSummary(
            count=len(rows),
            total=sum(per_category.values()),
            by_category=tuple(ordered),
        )

    # -- tabs and filters -----------------------------------------------------

    def select_tab(self, tab: str) -> None:
        if tab not in (EXPENSES_TAB, CATEGORIES_TAB):
            raise ValueError(f"Unknown tab '{tab}'")
        if tab == CATEGORIES_TAB and not self.user.is_admin:
            raise PermissionError("Only administrators can manage expense categories.")
        self.active_tab = tab

    def set_filters(
        self,
        *,
        user_id: str = "",
        category: str = "",
        date_start: Optional[date] = None,
        date_end: Optional[date] = None,
    ) -> ExpenseFilters:
        if not self.user.is_admin:
            raise PermissionError("Only administrators can filter the expense history.")
        self.filters = ExpenseFilters(
            user_id=user_id, category=category, date_start=date_start, date_end=date_end
        )
        LOGGER.debug("Expense filters for %s set to %s", self.user.user_id, self.filters)
        return self.filters

    def clear_filters(self) -> None:
        self.filters = ExpenseFilters()

    # -- add / edit -----------------------------------------------------------

    def open_add(self) -> ExpenseDraft:
        return self.add_dialog.open()

    def close_add(self) -> None:
        self.add_dialog.close()

    async def submit_add(self) -> bool:
        payload = self.add_dialog.draft.as_payload()
        LOGGER.info("Recording expense '%s' for %s", payload["description"], self.user.user_id)
        return await commit(self.add_dialog, self._actions.add(payload), self._failure_policy)

    @property
    def can_edit(self) -> bool:
        return self.user.is_admin

    def open_edit(self, expense: Expense) -> ExpenseDraft:
        if not self.can_edit:
            raise PermissionError("Submitted expenses are read-only.")
        self.editing = expense
        return self.edit_dialog.open(ExpenseDraft.from_expense(expense))

    def close_edit(self) -> None:
        self.edit_dialog.close()
        self.editing = None

    async def submit_edit(self) -> bool:
        if self.editing is None:
            raise ValueError("No expense is being edited.")
        payload = update_payload(self.editing, self.edit_dialog.draft)
        expense, self.editing = self.editing, None
        LOGGER.info("Updating expense %s", expense.expense_id)
        return await commit(
            self.edit_dialog,
            self._actions.update(expense.expense_id, payload),
            self._failure_policy,
        )

    # -- deletion -------------------------------------------------------------

    def request_delete(self, expense: Expense) -> None:
        if not self.can_edit:
            raise PermissionError("Submitted expenses are read-only.")
        self.delete_prompt.request(expense)

    def cancel_delete(self) -> None:
        self.delete_prompt.cancel()

    async def confirm_delete(self) -> Optional[Expense]:
        async def _delete(expense: Expense) -> None:
            LOGGER.info("Deleting expense %s", expense.expense_id)
            await self._actions.delete(expense.expense_id)

        return await self.delete_prompt.confirm(_delete, self._failure_policy)

    # -- exports --------------------------------------------------------------

    def export_csv(self) -> CsvExport:
        export = self.exporter.export_csv(self.displayed_expenses(), self._clock())
        self._notifier.success("CSV export started.")
        return export

    def print_report(self, surface_factory: SurfaceFactory) -> Optional[PrintSurface]:
        return self.exporter.print_report(
            self.displayed_expenses(),
            filters=self.filters,
            users=self._snapshot.users,
            now=self._clock(),
            surface_factory=surface_factory,
            notifier=self._notifier,
        )
