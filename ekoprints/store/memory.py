"""Mini README: In-memory data layer backing the task board and expense ledger.

Structure:
    * InMemoryBackOffice - async CRUD over users, sales, tasks, expenses and
      categories, publishing a fresh snapshot after every mutation.

The store is intentionally simple so the interface can be exercised without
external services. Identifiers are sequential per entity (``task_0001``,
``exp_0001``, ``cat_0001``). Without explicit records it seeds deterministic
demo data relative to its clock, so countdowns and the daily expense log
have something to show.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional

from ..clock import Clock, local_today, now_utc, to_iso_instant
from ..directory import Role, Sale, User, username_for
from ..expenses.editor import IMMUTABLE_EXPENSE_FIELDS
from ..expenses.records import Expense, ExpenseCategory, checked_expense_date, coerce_amount
from ..logging_utils import get_logger
from ..tasks.records import Task, TaskStatus
from .base import BackOfficeRepository, BackOfficeSnapshot

LOGGER = get_logger(__name__)

_TASK_FIELDS = frozenset(
    {
        "title",
        "description",
        "assigned_to",
        "assigned_to_name",
        "assigned_by",
        "deadline",
        "status",
        "sale_id",
        "created_at",
    }
)
_EXPENSE_FIELDS = frozenset({"date", "category", "description", "amount"})


class InMemoryBackOffice(BackOfficeRepository):
    """Keep every record in dictionaries and notify subscribers on change."""

    def __init__(
        self,
        *,
        users: Optional[Iterable[User]] = None,
        sales: Optional[Iterable[Sale]] = None,
        tasks: Optional[Iterable[Task]] = None,
        expenses: Optional[Iterable[Expense]] = None,
        categories: Optional[Iterable[ExpenseCategory]] = None,
        seed_demo: bool = True,
        clock: Clock = now_utc,
        zone: tzinfo = timezone.utc,
    ) -> None:
        super().__init__()
        self._clock = clock
        self._zone = zone
        self._users: Dict[str, User] = {}
        self._sales: Dict[str, Sale] = {}
        self._tasks: Dict[str, Task] = {}
        self._expenses: Dict[str, Expense] = {}
        self._categories: Dict[str, ExpenseCategory] = {}
        self._sequences: Dict[str, int] = {"task": 0, "exp": 0, "cat": 0}
        self._version = 0

        provided = [users, sales, tasks, expenses, categories]
        if any(collection is not None for collection in provided) or not seed_demo:
            for user in users or ():
                self._users[user.user_id] = user
            for sale in sales or ():
                self._sales[sale.sale_id] = sale
            for task in tasks or ():
                self._register(self._tasks, "task", task.task_id, task)
            for expense in expenses or ():
                self._register(self._expenses, "exp", expense.expense_id, expense)
            for category in categories or ():
                self._register(self._categories, "cat", category.category_id, category)
        else:
            self._seed_demo_records()
        LOGGER.debug(
            "Back office store initialised with %s users, %s tasks, %s expenses",
            len(self._users),
            len(self._tasks),
            len(self._expenses),
        )

    # -- bookkeeping ----------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        """Generate a sequential identifier for ``prefix``."""

        self._sequences[prefix] += 1
        return f"{prefix}_{self._sequences[prefix]:04d}"

    def _register(self, table: Dict[str, Any], prefix: str, record_id: str, record: Any) -> None:
        """Store a record ensuring identifiers remain unique."""

        if record_id in table:
            raise ValueError(f"Record {record_id} already exists.")
        table[record_id] = record
        suffix = record_id.rsplit("_", 1)[-1]
        if suffix.isdigit():
            self._sequences[prefix] = max(self._sequences[prefix], int(suffix))

    def _changed(self) -> None:
        self._version += 1
        self.publish()

    def _seed_demo_records(self) -> None:
        """Populate the store with deterministic demo data."""

        now = self._clock()
        today = local_today(self._zone, now)
        for user in (
            User("usr_admin", "admin", Role.ADMIN),
            User("usr_grace", "grace", Role.USER),
            User("usr_peter", "peter", Role.USER),
        ):
            self._users[user.user_id] = user
        for sale_id in ("5f2c9a71e04b", "a81d33c0f9e2", "c4e07b5d2a18"):
            self._sales[sale_id] = Sale(sale_id)
        for name in ("Rent", "Electricity", "Supplies", "Transport"):
            category_id = self._next_id("cat")
            self._categories[category_id] = ExpenseCategory(category_id, name)

        demo_tasks = [
            ("Design logo for client", "Two concepts, brand colours", "usr_grace", timedelta(days=2, hours=3), TaskStatus.PENDING, "5f2c9a71e04b"),
            ("Print 500 flyers", "A5 gloss, double sided", "usr_peter", timedelta(hours=5, minutes=20), TaskStatus.IN_PROGRESS, "a81d33c0f9e2"),
            ("Laminate menus", "Restaurant order, 40 pieces", "usr_grace", timedelta(hours=-3), TaskStatus.PENDING, None),
            ("Deliver banners", "Pick up from finishing", "usr_peter", timedelta(days=-1), TaskStatus.COMPLETED, None),
        ]
        for title, description, assignee, offset, status, sale_id in demo_tasks:
            task_id = self._next_id("task")
            self._tasks[task_id] = Task(
                task_id=task_id,
                title=title,
                description=description,
                assigned_to=assignee,
                assigned_to_name=self._users[assignee].username,
                assigned_by="usr_admin",
                deadline=to_iso_instant(now + offset),
                status=status,
                sale_id=sale_id,
                created_at=to_iso_instant(now - timedelta(days=1)),
            )

        demo_expenses = [
            ("usr_admin", today - timedelta(days=20), "Rent", "Workshop rent", 850000.0),
            ("usr_admin", today - timedelta(days=6), "Electricity", "Yaka tokens", 120000.0),
            ("usr_grace", today - timedelta(days=1), "Supplies", 'A4 paper "premium" reams', 64500.0),
            ("usr_grace", today, "Transport", "Boda to client site", 7000.0),
            ("usr_peter", today, "Supplies", "Ink cartridges", 210000.0),
        ]
        for author, day, category, description, amount in demo_expenses:
            expense_id = self._next_id("exp")
            self._expenses[expense_id] = Expense(
                expense_id=expense_id,
                user_id=author,
                user_name=self._users[author].username,
                date=day.isoformat(),
                category=category,
                description=description,
                amount=amount,
            )

    # -- reads ----------------------------------------------------------------

    def snapshot(self) -> BackOfficeSnapshot:
        tasks = sorted(
            self._tasks.values(), key=lambda task: (task.created_at, task.task_id), reverse=True
        )
        expenses = sorted(
            self._expenses.values(),
            key=lambda expense: (expense.date, expense.expense_id),
            reverse=True,
        )
        categories = sorted(self._categories.values(), key=lambda category: category.name.lower())
        return BackOfficeSnapshot(
            users=tuple(self._users.values()),
            sales=tuple(self._sales.values()),
            tasks=tuple(tasks),
            expenses=tuple(expenses),
            categories=tuple(categories),
            version=self._version,
        )

    def list_users(self) -> List[User]:
        return list(self._users.values())

    def get_user(self, user_id: str) -> User:
        if user_id not in self._users:
            raise KeyError(f"User {user_id} not found")
        return self._users[user_id]

    def get_task(self, task_id: str) -> Task:
        if task_id not in self._tasks:
            raise KeyError(f"Task {task_id} not found")
        return self._tasks[task_id]

    def get_expense(self, expense_id: str) -> Expense:
        if expense_id not in self._expenses:
            raise KeyError(f"Expense {expense_id} not found")
        return self._expenses[expense_id]

    def get_category(self, category_id: str) -> ExpenseCategory:
        if category_id not in self._categories:
            raise KeyError(f"Category {category_id} not found")
        return self._categories[category_id]

    # -- tasks ----------------------------------------------------------------

    async def add_task(self, payload: Dict[str, Any]) -> Task:
        unknown = set(payload) - _TASK_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {sorted(unknown)}")
        task = Task(
            task_id=self._next_id("task"),
            title=str(payload["title"]),
            description=str(payload.get("description", "")),
            assigned_to=str(payload["assigned_to"]),
            assigned_to_name=str(payload.get("assigned_to_name", "")),
            assigned_by=str(payload.get("assigned_by", "")),
            deadline=str(payload["deadline"]),
            status=TaskStatus.from_str(payload.get("status", TaskStatus.PENDING.value)),
            sale_id=payload.get("sale_id") or None,
            created_at=str(payload.get("created_at") or to_iso_instant(self._clock())),
        )
        self._tasks[task.task_id] = task
        LOGGER.info("Stored task %s '%s'", task.task_id, task.title)
        self._changed()
        return task

    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> Task:
        task = self.get_task(task_id)
        unknown = set(changes) - _TASK_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task fields: {sorted(unknown)}")
        coerced = dict(changes)
        if "status" in coerced:
            coerced["status"] = TaskStatus.from_str(coerced["status"])
        updated = replace(task, **coerced)
        self._tasks[task_id] = updated
        LOGGER.info("Updated task %s fields %s", task_id, sorted(changes))
        self._changed()
        return updated

    async def delete_task(self, task_id: str) -> None:
        self.get_task(task_id)
        del self._tasks[task_id]
        LOGGER.info("Deleted task %s", task_id)
        self._changed()

    # -- expenses -------------------------------------------------------------

    async def add_expense(self, author_id: str, payload: Dict[str, Any]) -> Expense:
        unknown = set(payload) - _EXPENSE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported expense fields: {sorted(unknown)}")
        day = checked_expense_date(payload["date"], self._zone)
        expense = Expense(
            expense_id=self._next_id("exp"),
            user_id=author_id,
            user_name=username_for(self._users.values(), author_id),
            date=day,
            category=str(payload["category"]),
            description=str(payload["description"]),
            amount=coerce_amount(payload.get("amount", 0)),
        )
        self._expenses[expense.expense_id] = expense
        LOGGER.info("Stored expense %s for %s", expense.expense_id, author_id)
        self._changed()
        return expense

    async def update_expense(self, expense_id: str, payload: Dict[str, Any]) -> Expense:
        expense = self.get_expense(expense_id)
        immutable = set(payload) & IMMUTABLE_EXPENSE_FIELDS
        if immutable:
            raise ValueError(f"Fields {sorted(immutable)} cannot be changed on an expense.")
        unknown = set(payload) - _EXPENSE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported expense fields: {sorted(unknown)}")
        changes = dict(payload)
        if "date" in changes:
            changes["date"] = checked_expense_date(changes["date"], self._zone)
        if "amount" in changes:
            changes["amount"] = coerce_amount(changes["amount"])
        updated = replace(expense, **changes)
        self._expenses[expense_id] = updated
        LOGGER.info("Updated expense %s", expense_id)
        self._changed()
        return updated

    async def delete_expense(self, expense_id: str) -> None:
        self.get_expense(expense_id)
        del self._expenses[expense_id]
        LOGGER.info("Deleted expense %s", expense_id)
        self._changed()

    # -- categories -----------------------------------------------------------

    async def add_category(self, name: str) -> ExpenseCategory:
        category = ExpenseCategory(category_id=self._next_id("cat"), name=str(name))
        self._categories[category.category_id] = category
        LOGGER.info("Stored category %s '%s'", category.category_id, category.name)
        self._changed()
        return category

    async def update_category(self, category_id: str, name: str) -> ExpenseCategory:
        category = replace(self.get_category(category_id), name=str(name))
        self._categories[category_id] = category
        LOGGER.info("Renamed category %s to '%s'", category_id, name)
        self._changed()
        return category

    async def delete_category(self, category_id: str) -> None:
        self.get_category(category_id)
        del self._categories[category_id]
        LOGGER.info("Deleted category %s", category_id)
        self._changed()
