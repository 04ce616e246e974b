"""Mini README: Task draft, submit gating and persistence callbacks.

Structure:
    * TaskActions - async create/update/delete callbacks supplied by the data layer.
    * TaskDraft - editable copy of the creation form.
    * build_task_payload - normalises a complete draft into a create payload.
    * status_payload - the update sent when a task changes status.

The assignee's username is resolved once at submit time and stored on the
task; later renames do not touch existing tasks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from ..clock import parse_instant, to_iso_instant
from ..directory import User, username_for
from .records import TaskStatus

TaskPayload = Dict[str, Any]


@dataclass(slots=True, frozen=True)
class TaskActions:
    add: Callable[[TaskPayload], Awaitable[object]]
    update: Callable[[str, TaskPayload], Awaitable[object]]
    delete: Callable[[str], Awaitable[object]]


@dataclass(slots=True)
class TaskDraft:
    """Form state for a new task; every field is raw user input."""

    title: str = ""
    description: str = ""
    assigned_to: str = ""
    deadline: str = ""
    sale_id: str = ""

    @property
    def is_complete(self) -> bool:
        """Title, assignee and deadline are required before submitting."""

        return bool(self.title and self.assigned_to and self.deadline)

    def update(self, **fields: Optional[str]) -> "TaskDraft":
        """Apply form fields, ignoring ``None`` and rejecting unknown names."""

        for key, value in fields.items():
            if key not in TaskDraft.__dataclass_fields__:
                raise ValueError(f"Task form has no field '{key}'.")
            if value is not None:
                setattr(self, key, str(value))
        return self


def build_task_payload(
    draft: TaskDraft,
    *,
    users: Sequence[User],
    assigned_by: User,
    now: datetime,
    zone: tzinfo = timezone.utc,
) -> TaskPayload:
    """Turn a complete draft into the payload handed to ``TaskActions.add``."""

    if not draft.is_complete:
        raise ValueError("Title, assignee and deadline are required.")
    return {
        "title": draft.title,
        "description": draft.description,
        "assigned_to": draft.assigned_to,
        "assigned_to_name": username_for(users, draft.assigned_to, default="Unknown"),
        "assigned_by": assigned_by.user_id,
        "deadline": to_iso_instant(parse_instant(draft.deadline, zone)),
        "status": TaskStatus.PENDING.value,
        "sale_id": draft.sale_id or None,
        "created_at": to_iso_instant(now),
    }


def status_payload(status: TaskStatus) -> TaskPayload:
    return {"status": status.value}
