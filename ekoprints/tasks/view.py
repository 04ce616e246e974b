"""Mini README: Per-user task board orchestrating filters, dialogs and countdowns.

Structure:
    * StatusAction - the button offered for a task (start, finish, pause).
    * TaskView - composes the access scope, the creation dialog, status
      changes, delete confirmation and one countdown ticker per visible task.

The view is "mounted" while its board is on screen. Mounting arms a ticker
for every visible task; refreshed snapshots re-target tickers whose deadline
changed and cancel the ones whose task disappeared; unmounting cancels all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone, tzinfo
from functools import partial
from typing import Dict, List, Optional

from ..access import visible_tasks
from ..clock import Clock, now_utc, parse_instant
from ..directory import Sale, User
from ..editing import ConfirmationPrompt, Dialog, FailurePolicy, commit
from ..logging_utils import get_logger
from ..notifications import NotificationService
from ..store.base import BackOfficeSnapshot
from ..utils.formatting import format_deadline_stamp
from .deadline import CountdownTicker, DeadlineState, evaluate_deadline
from .editor import TaskActions, TaskDraft, build_task_payload, status_payload
from .records import Task, TaskStatus, advance_status, pause_status

LOGGER = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class StatusAction:
    label: str
    next_status: TaskStatus
    can_pause: bool


class TaskView:
    """Task board for one signed-in user."""

    def __init__(
        self,
        user: User,
        actions: TaskActions,
        notifier: NotificationService,
        *,
        clock: Clock = now_utc,
        zone: tzinfo = timezone.utc,
        countdown_interval: float = 60.0,
        order_option_limit: int = 10,
        failure_policy: Optional[FailurePolicy] = None,
    ) -> None:
        self.user = user
        self._actions = actions
        self._notifier = notifier
        self._clock = clock
        self._zone = zone
        self._countdown_interval = countdown_interval
        self._order_option_limit = order_option_limit
        self._failure_policy = failure_policy
        self._snapshot = BackOfficeSnapshot()
        self._tickers: Dict[str, CountdownTicker] = {}
        self._countdowns: Dict[str, DeadlineState] = {}
        self.mounted = False
        self.add_dialog: Dialog[TaskDraft] = Dialog(TaskDraft)
        self.delete_prompt: ConfirmationPrompt[Task] = ConfirmationPrompt()

    # -- data -----------------------------------------------------------------

    def refresh(self, snapshot: BackOfficeSnapshot) -> None:
        """Replace the displayed records with a fresh snapshot."""

        self._snapshot = snapshot
        LOGGER.debug("Task board for %s refreshed to v%s", self.user.user_id, snapshot.version)
        if self.mounted:
            self._sync_tickers()

    @property
    def users(self) -> List[User]:
        return list(self._snapshot.users)

    @property
    def visible_tasks(self) -> List[Task]:
        return visible_tasks(self._snapshot.tasks, self.user)

    def get_task(self, task_id: str) -> Task:
        """Retrieve a task visible to this user."""

        for task in self.visible_tasks:
            if task.task_id == task_id:
                return task
        raise KeyError(f"Task {task_id} not found")

    # -- countdowns -----------------------------------------------------------

    def mount(self) -> None:
        """Start countdowns for every visible task; repeated calls are no-ops."""

        if self.mounted:
            return
        self.mounted = True
        self._sync_tickers()

    def unmount(self) -> None:
        """Cancel every countdown owned by this board."""

        for ticker in self._tickers.values():
            ticker.cancel()
        self._tickers.clear()
        self._countdowns.clear()
        self.mounted = False

    @property
    def active_timers(self) -> int:
        return sum(1 for ticker in self._tickers.values() if ticker.active)

    def countdown_for(self, task: Task) -> DeadlineState:
        state = self._countdowns.get(task.task_id)
        if state is None:
            state = evaluate_deadline(task.deadline, self._clock(), self._zone)
        return state

    def _sync_tickers(self) -> None:
        shown = {task.task_id: task for task in self.visible_tasks}
        for task_id in list(self._tickers):
            if task_id not in shown:
                self._tickers.pop(task_id).cancel()
                self._countdowns.pop(task_id, None)
        for task_id, task in shown.items():
            ticker = self._tickers.get(task_id)
            if ticker is None:
                ticker = CountdownTicker(
                    task.deadline,
                    partial(self._countdowns.__setitem__, task_id),
                    interval_seconds=self._countdown_interval,
                    clock=self._clock,
                    zone=self._zone,
                )
                self._tickers[task_id] = ticker
                ticker.start()
            elif ticker.retarget(task.deadline):
                LOGGER.debug("Deadline of task %s changed; countdown re-armed", task_id)

    # -- display helpers ------------------------------------------------------

    def order_options(self) -> List[Sale]:
        return list(self._snapshot.sales[: self._order_option_limit])

    @staticmethod
    def linked_order_label(task: Task) -> Optional[str]:
        if not task.sale_id:
            return None
        return f"Linked to Invoice {Sale(task.sale_id).reference}"

    def deadline_stamp(self, task: Task) -> str:
        local = parse_instant(task.deadline, self._zone).astimezone(self._zone)
        return format_deadline_stamp(local)

    @staticmethod
    def action_for(task: Task) -> Optional[StatusAction]:
        """Return the status button for ``task``; completed tasks get none."""

        if task.is_completed:
            return None
        label = "Start Task" if task.status is TaskStatus.PENDING else "Finish Task"
        return StatusAction(
            label=label,
            next_status=advance_status(task.status),
            can_pause=task.status is TaskStatus.IN_PROGRESS,
        )

    def can_change_status(self, task: Task) -> bool:
        return self.user.is_admin or task.assigned_to == self.user.user_id

    @property
    def can_create(self) -> bool:
        return self.user.is_admin

    @property
    def can_delete(self) -> bool:
        return self.user.is_admin

    # -- creation -------------------------------------------------------------

    def open_add(self) -> TaskDraft:
        if not self.can_create:
            raise PermissionError("Only administrators can create tasks.")
        return self.add_dialog.open()

    def close_add(self) -> None:
        self.add_dialog.close()

    @property
    def can_submit(self) -> bool:
        return self.add_dialog.is_open and self.add_dialog.draft.is_complete

    async def submit_add(self) -> bool:
        """Send the draft to the data layer and close the dialog."""

        if not self.add_dialog.is_open:
            raise ValueError("The task dialog is not open.")
        payload = build_task_payload(
            self.add_dialog.draft,
            users=self._snapshot.users,
            assigned_by=self.user,
            now=self._clock(),
            zone=self._zone,
        )
        LOGGER.info("Creating task '%s' for %s", payload["title"], payload["assigned_to"])
        return await commit(self.add_dialog, self._actions.add(payload), self._failure_policy)

    # -- status ---------------------------------------------------------------

    async def advance(self, task: Task) -> TaskStatus:
        return await self._change_status(task, advance_status(task.status))

    async def pause(self, task: Task) -> TaskStatus:
        return await self._change_status(task, pause_status(task.status))

    async def _change_status(self, task: Task, new_status: TaskStatus) -> TaskStatus:
        """Persist ``new_status`` and return the status the task now has."""

        if not self.can_change_status(task):
            raise PermissionError("Only the assignee or an administrator can update this task.")
        LOGGER.info("Task %s: %s -> %s", task.task_id, task.status.value, new_status.value)
        update = self._actions.update(task.task_id, status_payload(new_status))
        if not await commit(None, update, self._failure_policy):
            return task.status
        self._notifier.info(f"Status updated to {new_status.value}")
        return new_status

    # -- deletion -------------------------------------------------------------

    def request_delete(self, task: Task) -> None:
        if not self.can_delete:
            raise PermissionError("Only administrators can delete tasks.")
        self.delete_prompt.request(task)

    def cancel_delete(self) -> None:
        self.delete_prompt.cancel()

    async def confirm_delete(self) -> Optional[Task]:
        async def _delete(task: Task) -> None:
            LOGGER.info("Deleting task %s", task.task_id)
            await self._actions.delete(task.task_id)

        return await self.delete_prompt.confirm(_delete, self._failure_policy)
