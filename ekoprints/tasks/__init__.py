"""Mini README: Production task tracking for the back office.

Groups the task record and its status lifecycle, the deadline countdown
evaluator with its cancelable ticker, and the creation draft. The
``view`` module composes them into the per-user task board and is imported
directly by the interfaces.
"""

from .deadline import (
    CountdownTicker,
    DaysLeft,
    DeadlineState,
    HoursLeft,
    MinutesLeft,
    Overdue,
    evaluate_deadline,
)
from .editor import TaskActions, TaskDraft, build_task_payload
from .records import Task, TaskStatus, advance_status, pause_status

__all__ = [
    "CountdownTicker",
    "DaysLeft",
    "DeadlineState",
    "HoursLeft",
    "MinutesLeft",
    "Overdue",
    "Task",
    "TaskActions",
    "TaskDraft",
    "TaskStatus",
    "advance_status",
    "build_task_payload",
    "evaluate_deadline",
    "pause_status",
]
