"""Mini README: Tests for deadline countdown evaluation and the ticker handle.

Structure:
    * test_evaluate_deadline_labels - day, hour, minute and overdue bands.
    * test_evaluate_deadline_reads_naive_input_in_zone - local wall-clock input.
    * test_ticker_* - immediate evaluation, periodic updates, retarget and cancel.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from ekoprints.tasks import (
    CountdownTicker,
    DaysLeft,
    HoursLeft,
    MinutesLeft,
    Overdue,
    evaluate_deadline,
)

NOW = datetime(2024, 3, 7, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("offset", "expected_state", "label"),
    [
        (timedelta(days=2, hours=3), DaysLeft(2, 3), "2d 3h left"),
        (timedelta(minutes=1440), DaysLeft(1, 0), "1d 0h left"),
        (timedelta(minutes=1439), HoursLeft(23, 59), "23h 59m left"),
        (timedelta(hours=5, minutes=20), HoursLeft(5, 20), "5h 20m left"),
        (timedelta(seconds=90), MinutesLeft(1), "1m left"),
        (timedelta(seconds=30), MinutesLeft(0), "0m left"),
        (timedelta(0), Overdue(), "OVERDUE"),
        (timedelta(hours=-3), Overdue(), "OVERDUE"),
    ],
)
def test_evaluate_deadline_labels(offset, expected_state, label) -> None:
    """Remaining time is floored into the largest non-zero band."""

    state = evaluate_deadline(NOW + offset, NOW)

    assert state == expected_state
    assert state.label == label
    assert state.is_overdue is isinstance(expected_state, Overdue)


def test_evaluate_deadline_accepts_iso_strings() -> None:
    state = evaluate_deadline("2024-03-08T14:30:00.000Z", "2024-03-07T12:00:00.000Z")

    assert state == DaysLeft(1, 2)


def test_evaluate_deadline_reads_naive_input_in_zone() -> None:
    """A naive datetime-local value is wall time in the business zone."""

    kampala = ZoneInfo("Africa/Kampala")
    # 15:00 in Kampala is 12:00 UTC, so the deadline is exactly now.
    assert evaluate_deadline("2024-03-07T15:00", NOW, kampala) == Overdue()
    assert evaluate_deadline("2024-03-07T16:30", NOW, kampala) == HoursLeft(1, 30)


def test_evaluate_deadline_rejects_empty_input() -> None:
    with pytest.raises(ValueError):
        evaluate_deadline("", NOW)


def test_ticker_requires_positive_interval() -> None:
    with pytest.raises(ValueError):
        CountdownTicker(NOW, lambda state: None, interval_seconds=0)


@pytest.mark.asyncio
async def test_ticker_evaluates_immediately_and_periodically() -> None:
    """The first state arrives on start; later ones follow the clock."""

    current = {"now": NOW}
    seen = []
    ticker = CountdownTicker(
        NOW + timedelta(minutes=2),
        seen.append,
        interval_seconds=0.01,
        clock=lambda: current["now"],
        zone=timezone.utc,
    )

    assert ticker.start() == MinutesLeft(2)
    assert seen == [MinutesLeft(2)]
    assert ticker.active

    current["now"] = NOW + timedelta(minutes=3)
    await asyncio.sleep(0.05)

    assert seen[-1] == Overdue()
    assert ticker.state == Overdue()
    ticker.cancel()


@pytest.mark.asyncio
async def test_ticker_retarget_and_cancel() -> None:
    seen = []
    ticker = CountdownTicker(
        NOW + timedelta(hours=1),
        seen.append,
        interval_seconds=60,
        clock=lambda: NOW,
    )
    ticker.start()

    assert ticker.retarget(NOW + timedelta(hours=1)) is False
    assert ticker.retarget(NOW + timedelta(days=3)) is True
    assert ticker.active
    assert seen == [HoursLeft(1, 0), DaysLeft(3, 0)]

    ticker.cancel()
    ticker.cancel()
    await asyncio.sleep(0)

    assert not ticker.active


def test_ticker_retarget_without_loop_only_evaluates() -> None:
    """An inactive ticker re-evaluates for the new deadline but stays idle."""

    seen = []
    ticker = CountdownTicker(NOW, seen.append, clock=lambda: NOW)

    assert ticker.retarget(NOW + timedelta(minutes=5)) is True
    assert seen == [MinutesLeft(5)]
    assert not ticker.active


def test_evaluate_deadline_accepts_aware_datetimes() -> None:
    assert evaluate_deadline(datetime(2024, 3, 7, 12, 45, tzinfo=timezone.utc), NOW) == MinutesLeft(45)
