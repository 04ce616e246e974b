"""Mini README: Contract between the views and the external data layer.

Structure:
    * BackOfficeSnapshot - immutable bundle of every record list a view renders.
    * SnapshotListener - callback receiving a fresh snapshot after each mutation.
    * BackOfficeRepository - abstract async CRUD surface plus the refresh feed.

Views never patch their lists. They call the repository's actions, and the
repository publishes a whole new snapshot to every subscriber once the
change is stored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..directory import Sale, User
from ..expenses.editor import CategoryActions, ExpenseActions
from ..expenses.records import Expense, ExpenseCategory
from ..logging_utils import get_logger
from ..tasks.editor import TaskActions
from ..tasks.records import Task

LOGGER = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class BackOfficeSnapshot:
    """Point-in-time copy of the records owned by the data layer."""

    users: Tuple[User, ...] = ()
    sales: Tuple[Sale, ...] = ()
    tasks: Tuple[Task, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    categories: Tuple[ExpenseCategory, ...] = ()
    version: int = 0


SnapshotListener = Callable[[BackOfficeSnapshot], None]


class BackOfficeRepository(ABC):
    """Base interface for stores backing the task board and ledger."""

    def __init__(self) -> None:
        self._listeners: List[SnapshotListener] = []

    @abstractmethod
    def snapshot(self) -> BackOfficeSnapshot:
        """Return the current records."""

    @abstractmethod
    async def add_task(self, payload: Dict[str, Any]) -> Task:
        """Create a task from an editor payload."""

    @abstractmethod
    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> Task:
        """Apply a partial update to a task."""

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Remove a task."""

    @abstractmethod
    async def add_expense(self, author_id: str, payload: Dict[str, Any]) -> Expense:
        """Record an expense on behalf of ``author_id``."""

    @abstractmethod
    async def update_expense(self, expense_id: str, payload: Dict[str, Any]) -> Expense:
        """Replace the editable fields of an expense."""

    @abstractmethod
    async def delete_expense(self, expense_id: str) -> None:
        """Remove an expense."""

    @abstractmethod
    async def add_category(self, name: str) -> ExpenseCategory:
        """Create an expense category."""

    @abstractmethod
    async def update_category(self, category_id: str, name: str) -> ExpenseCategory:
        """Rename an expense category."""

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        """Remove an expense category."""

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register ``listener`` for future snapshots; return an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, snapshot: Optional[BackOfficeSnapshot] = None) -> BackOfficeSnapshot:
        """Push a snapshot to every subscriber."""

        snapshot = snapshot or self.snapshot()
        LOGGER.debug(
            "Publishing snapshot v%s to %s listeners", snapshot.version, len(self._listeners)
        )
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def task_actions(self) -> TaskActions:
        return TaskActions(add=self.add_task, update=self.update_task, delete=self.delete_task)

    def expense_actions(self, author: User) -> ExpenseActions:
        """Bind expense callbacks to ``author``; new entries are stamped with them."""

        async def _add(payload: Dict[str, Any]) -> Expense:
            return await self.add_expense(author.user_id, payload)

        return ExpenseActions(add=_add, update=self.update_expense, delete=self.delete_expense)

    def category_actions(self) -> CategoryActions:
        return CategoryActions(
            add=self.add_category, update=self.update_category, delete=self.delete_category
        )
