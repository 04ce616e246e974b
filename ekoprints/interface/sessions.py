"""Mini README: Per-user view sessions for the web interface.

Structure:
    * WorkspaceSession - one user's notifier, task board and expense ledger.
    * SessionRegistry - creates sessions lazily and tears them down when the
      operator switches user or the app shuts down.

Each session subscribes its views to the repository feed so every mutation
re-renders from a fresh snapshot. Closing a session unmounts the task board
(cancelling its countdown timers) and unsubscribes from the feed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from ..clock import Clock, now_utc
from ..configuration import BackOfficeSettings
from ..directory import User
from ..editing import FailurePolicy
from ..expenses.view import ExpenseView
from ..export import ExpenseReportExporter
from ..logging_utils import get_logger
from ..notifications import NotificationService
from ..store import BackOfficeRepository, BackOfficeSnapshot
from ..tasks.view import TaskView

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class WorkspaceSession:
    user: User
    notifier: NotificationService
    tasks: TaskView
    expenses: ExpenseView
    unsubscribe: Callable[[], None]

    def refresh(self, snapshot: BackOfficeSnapshot) -> None:
        self.tasks.refresh(snapshot)
        self.expenses.refresh(snapshot)

    def close(self) -> None:
        self.tasks.unmount()
        self.unsubscribe()


class SessionRegistry:
    """Map signed-in users to their own view state."""

    def __init__(
        self,
        repository: BackOfficeRepository,
        settings: BackOfficeSettings,
        *,
        clock: Clock = now_utc,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._clock = clock
        self._sessions: Dict[str, WorkspaceSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def for_user(self, user: User) -> WorkspaceSession:
        """Return the session of ``user``, rebuilding it when the user record changed."""

        session = self._sessions.get(user.user_id)
        if session is not None and session.user == user:
            return session
        if session is not None:
            session.close()
        session = self._open(user)
        self._sessions[user.user_id] = session
        return session

    def close(self, user_id: str) -> bool:
        """Close the session of ``user_id``; return whether one was open."""

        session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        session.close()
        LOGGER.info("Closed workspace session for %s", user_id)
        return True

    def _open(self, user: User) -> WorkspaceSession:
        notifier = NotificationService()

        def _report_failure(error: Exception) -> None:
            LOGGER.error("Saving changes for %s failed", user.user_id, exc_info=error)
            notifier.error(f"Could not save changes: {error}")

        policy = FailurePolicy(on_failure=_report_failure)
        zone = self._settings.zone
        tasks = TaskView(
            user,
            self._repository.task_actions(),
            notifier,
            clock=self._clock,
            zone=zone,
            countdown_interval=self._settings.countdown_interval_seconds,
            order_option_limit=self._settings.order_option_limit,
            failure_policy=policy,
        )
        expenses = ExpenseView(
            user,
            self._repository.expense_actions(user),
            self._repository.category_actions(),
            notifier,
            exporter=ExpenseReportExporter(
                currency=self._settings.currency_code,
                filename_prefix=self._settings.export_filename_prefix,
                zone=zone,
            ),
            clock=self._clock,
            zone=zone,
            failure_policy=policy,
        )
        session = WorkspaceSession(
            user=user,
            notifier=notifier,
            tasks=tasks,
            expenses=expenses,
            unsubscribe=lambda: None,
        )
        session.unsubscribe = self._repository.subscribe(session.refresh)
        session.refresh(self._repository.snapshot())
        LOGGER.info("Opened workspace session for %s (%s)", user.username, user.role.value)
        return session

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        LOGGER.debug("Closed %s workspace sessions", len(self._sessions))
        self._sessions.clear()
