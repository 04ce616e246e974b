"""Mini README: Shared fixtures pinning the clock, zone and directory records.

Every test runs against UTC with "now" fixed at 2024-03-07 12:00 so local
days and countdowns are deterministic. Tests request the ``clock`` and the
``admin``, ``grace`` and ``peter`` users as fixtures.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ekoprints.directory import Role, Sale, User
from ekoprints.expenses import Expense, ExpenseCategory
from ekoprints.notifications import NotificationService
from ekoprints.store import InMemoryBackOffice
from ekoprints.tasks import Task, TaskStatus

NOW = datetime(2024, 3, 7, 12, 0, tzinfo=timezone.utc)

ADMIN = User("u_admin", "amina", Role.ADMIN)
GRACE = User("u_grace", "grace", Role.USER)
PETER = User("u_peter", "peter", Role.USER)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture()
def clock():
    return fixed_clock


@pytest.fixture()
def admin() -> User:
    return ADMIN


@pytest.fixture()
def grace() -> User:
    return GRACE


@pytest.fixture()
def peter() -> User:
    return PETER


@pytest.fixture()
def users() -> list[User]:
    return [ADMIN, GRACE, PETER]


@pytest.fixture()
def notifier() -> NotificationService:
    return NotificationService()


@pytest.fixture()
def store(users: list[User]) -> InMemoryBackOffice:
    """Small deterministic store: two tasks, four expenses, two categories."""

    return InMemoryBackOffice(
        users=users,
        sales=[Sale(f"sale{index:02d}abcdef") for index in range(12)],
        tasks=[
            Task(
                task_id="task_0001",
                title="Print flyers",
                description="A5 gloss",
                assigned_to=GRACE.user_id,
                assigned_to_name=GRACE.username,
                assigned_by=ADMIN.user_id,
                deadline="2024-03-08T14:30:00.000Z",
                status=TaskStatus.PENDING,
                created_at="2024-03-06T09:00:00.000Z",
            ),
            Task(
                task_id="task_0002",
                title="Bind reports",
                description="",
                assigned_to=PETER.user_id,
                assigned_to_name=PETER.username,
                assigned_by=ADMIN.user_id,
                deadline="2024-03-07T11:00:00.000Z",
                status=TaskStatus.IN_PROGRESS,
                sale_id="ab12cd34ef56",
                created_at="2024-03-06T10:00:00.000Z",
            ),
        ],
        expenses=[
            Expense("exp_0001", ADMIN.user_id, "2024-02-15", "Rent", "Workshop rent", 850000.0),
            Expense("exp_0002", GRACE.user_id, "2024-03-07", "Supplies", "Paper", 64500.0),
            Expense("exp_0003", GRACE.user_id, "2024-03-06", "Transport", "Boda", 7000.0),
            Expense("exp_0004", "u_departed", "2024-03-01", "Rent", "Deposit", 100000.0),
        ],
        categories=[ExpenseCategory("cat_0001", "Rent"), ExpenseCategory("cat_0002", "Supplies")],
        clock=fixed_clock,
        zone=timezone.utc,
    )
