"""Mini README: Production task records and their status lifecycle.

Structure:
    * TaskStatus - Pending, In Progress, Completed.
    * Task - immutable snapshot of a work item as delivered by the data layer.
    * advance_status / pause_status - the only two status transitions offered.

Completed is terminal: neither transition accepts it. Pausing is the single
backwards move and only applies to work that is in progress.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional


class TaskStatus(str, Enum):
    """Enumerate the lifecycle stages of a task."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def from_str(cls, value: str) -> "TaskStatus":
        """Accept the display label or its snake-case form in any casing."""

        normalised = str(value).strip().replace("_", " ").lower()
        for status in cls:
            if status.value.lower() == normalised:
                return status
        raise ValueError(f"Unsupported task status: {value}")


_ADVANCE = {
    TaskStatus.PENDING: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.COMPLETED,
}


@dataclass(slots=True, frozen=True)
class Task:
    """Represent a deadline-bound work item."""

    task_id: str
    title: str
    description: str
    assigned_to: str
    assigned_to_name: str
    assigned_by: str
    deadline: str
    status: TaskStatus = TaskStatus.PENDING
    sale_id: Optional[str] = None
    created_at: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def as_dict(self) -> Dict[str, object]:
        """Export the task with serialisable values."""

        return {
            "task_id": self.task_id,
            "title": self.title,
            "description": self.description,
            "assigned_to": self.assigned_to,
            "assigned_to_name": self.assigned_to_name,
            "assigned_by": self.assigned_by,
            "deadline": self.deadline,
            "status": self.status.value,
            "sale_id": self.sale_id,
            "created_at": self.created_at,
        }


def advance_status(status: TaskStatus) -> TaskStatus:
    """Return the next forward status, refusing to move a completed task."""

    try:
        return _ADVANCE[status]
    except KeyError as error:
        raise ValueError(f"Task in status '{status.value}' cannot be advanced.") from error


def pause_status(status: TaskStatus) -> TaskStatus:
    """Return to Pending; only work in progress can be paused."""

    if status is not TaskStatus.IN_PROGRESS:
        raise ValueError(f"Task in status '{status.value}' cannot be paused.")
    return TaskStatus.PENDING
