"""Mini README: Tests covering the in-memory back office store.

Structure:
    * test_demo_seed_* - deterministic demo records relative to the clock.
    * test_mutations_publish_snapshots - every change bumps the version.
    * test_update_expense_rejects_immutable_fields - author and id are fixed.
    * test_expense_dates_are_checked - malformed days never reach the store.
    * test_lookups_raise_for_unknown_ids - clear errors for missing records.
"""

from __future__ import annotations

from datetime import timezone

import pytest

from ekoprints.store import InMemoryBackOffice
from ekoprints.tasks import TaskStatus


def test_demo_seed_is_relative_to_the_clock(clock) -> None:
    store = InMemoryBackOffice(clock=clock, zone=timezone.utc)
    snapshot = store.snapshot()

    assert [user.username for user in snapshot.users] == ["admin", "grace", "peter"]
    assert [category.name for category in snapshot.categories] == [
        "Electricity",
        "Rent",
        "Supplies",
        "Transport",
    ]
    assert len(snapshot.tasks) == 4
    assert store.get_task("task_0001").deadline == "2024-03-09T15:00:00.000Z"
    assert store.get_task("task_0004").status is TaskStatus.COMPLETED
    todays = [expense for expense in snapshot.expenses if expense.date == "2024-03-07"]
    assert {expense.user_id for expense in todays} == {"usr_grace", "usr_peter"}


def test_explicit_records_disable_the_demo_seed(store) -> None:
    assert len(store.list_users()) == 3
    assert len(store.snapshot().expenses) == 4


@pytest.mark.asyncio
async def test_mutations_publish_snapshots(store) -> None:
    received = []
    unsubscribe = store.subscribe(received.append)

    task = await store.add_task(
        {"title": "Cut stickers", "assigned_to": "u_grace", "deadline": "2024-03-08T10:00:00.000Z"}
    )
    await store.update_task(task.task_id, {"status": "in_progress"})
    category = await store.add_category("Fuel")
    await store.update_category(category.category_id, "Generator fuel")
    unsubscribe()
    await store.delete_category(category.category_id)

    assert [snapshot.version for snapshot in received] == [1, 2, 3, 4]
    assert received[1].tasks[0].status is TaskStatus.IN_PROGRESS
    assert task.task_id == "task_0003"
    assert task.created_at == "2024-03-07T12:00:00.000Z"
    assert store.snapshot().version == 5


@pytest.mark.asyncio
async def test_add_expense_coerces_amount_and_stamps_author(store) -> None:
    expense = await store.add_expense(
        "u_peter",
        {"date": "2024-03-07", "category": "Fuel", "description": "Generator", "amount": "abc"},
    )

    assert expense.expense_id == "exp_0005"
    assert expense.amount == 0.0
    assert expense.user_name == "peter"


@pytest.mark.asyncio
async def test_update_expense_rejects_immutable_fields(store) -> None:
    with pytest.raises(ValueError):
        await store.update_expense("exp_0001", {"user_id": "u_grace"})
    with pytest.raises(ValueError):
        await store.add_task({"title": "x", "assigned_to": "u", "deadline": "d", "colour": "red"})


@pytest.mark.asyncio
async def test_expense_dates_are_checked(store) -> None:
    with pytest.raises(ValueError):
        await store.add_expense(
            "u_peter",
            {"date": "2024-3-07", "category": "Fuel", "description": "Generator", "amount": 1},
        )
    with pytest.raises(ValueError):
        await store.update_expense("exp_0002", {"date": "07/03/2024"})

    late = await store.add_expense(
        "u_peter",
        {"date": "2024-03-06T22:30:00.000Z", "category": "Fuel", "description": "Taxi"},
    )

    assert len(store.snapshot().expenses) == 5
    assert store.get_expense("exp_0002").date == "2024-03-07"
    assert late.date == "2024-03-06T22:30:00.000Z"


@pytest.mark.asyncio
async def test_lookups_raise_for_unknown_ids(store) -> None:
    with pytest.raises(KeyError):
        store.get_user("nobody")
    with pytest.raises(KeyError):
        await store.delete_task("task_9999")
    with pytest.raises(KeyError):
        await store.update_category("cat_9999", "Nothing")
