"""Mini README: Deadline countdown evaluation and its re-evaluation timer.

Structure:
    * Overdue / DaysLeft / HoursLeft / MinutesLeft - countdown states.
    * evaluate_deadline - pure function of (deadline, now).
    * CountdownTicker - cancelable handle that re-evaluates on a fixed cadence.

Every component is an integer floor division of the millisecond difference,
so nothing is ever rounded up: 90 seconds left reads "1m left" and a
deadline equal to now is already overdue. The ticker evaluates once as soon
as it starts, then every ``interval_seconds`` on the running asyncio loop
until its owner cancels it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional, Union

from ..clock import Clock, now_utc, parse_instant
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


@dataclass(slots=True, frozen=True)
class Overdue:
    @property
    def label(self) -> str:
        return "OVERDUE"

    @property
    def is_overdue(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class DaysLeft:
    days: int
    hours: int

    @property
    def label(self) -> str:
        return f"{self.days}d {self.hours}h left"

    @property
    def is_overdue(self) -> bool:
        return False


@dataclass(slots=True, frozen=True)
class HoursLeft:
    hours: int
    minutes: int

    @property
    def label(self) -> str:
        return f"{self.hours}h {self.minutes}m left"

    @property
    def is_overdue(self) -> bool:
        return False


@dataclass(slots=True, frozen=True)
class MinutesLeft:
    minutes: int

    @property
    def label(self) -> str:
        return f"{self.minutes}m left"

    @property
    def is_overdue(self) -> bool:
        return False


DeadlineState = Union[Overdue, DaysLeft, HoursLeft, MinutesLeft]
DeadlineInput = Union[str, datetime]


def evaluate_deadline(
    deadline: DeadlineInput,
    now: DeadlineInput,
    zone: tzinfo = timezone.utc,
) -> DeadlineState:
    """Convert a deadline and the current time into a countdown state."""

    target = parse_instant(deadline, zone)
    current = parse_instant(now, zone)
    remaining_ms = (target - current) // timedelta(milliseconds=1)
    if remaining_ms <= 0:
        return Overdue()

    days = remaining_ms // MS_PER_DAY
    hours = (remaining_ms % MS_PER_DAY) // MS_PER_HOUR
    minutes = (remaining_ms % MS_PER_HOUR) // MS_PER_MINUTE
    if days > 0:
        return DaysLeft(days=days, hours=hours)
    if hours > 0:
        return HoursLeft(hours=hours, minutes=minutes)
    return MinutesLeft(minutes=minutes)


class CountdownTicker:
    """Re-evaluate one deadline periodically until cancelled."""

    def __init__(
        self,
        deadline: DeadlineInput,
        listener: Callable[[DeadlineState], None],
        *,
        interval_seconds: float = 60.0,
        clock: Clock = now_utc,
        zone: tzinfo = timezone.utc,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("Countdown interval must be positive.")
        self._deadline = deadline
        self._listener = listener
        self._interval = float(interval_seconds)
        self._clock = clock
        self._zone = zone
        self._task: Optional[asyncio.Task] = None
        self.state: Optional[DeadlineState] = None

    @property
    def deadline(self) -> DeadlineInput:
        return self._deadline

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def evaluate(self) -> DeadlineState:
        """Evaluate now and hand the state to the listener."""

        self.state = evaluate_deadline(self._deadline, self._clock(), self._zone)
        self._listener(self.state)
        return self.state

    def start(self) -> DeadlineState:
        """Evaluate immediately and schedule re-evaluation on the running loop."""

        if self.active and self.state is not None:
            return self.state
        state = self.evaluate()
        self._task = asyncio.get_running_loop().create_task(self._run())
        LOGGER.debug("Countdown armed for %s every %ss", self._deadline, self._interval)
        return state

    def retarget(self, deadline: DeadlineInput) -> bool:
        """Re-arm for a new deadline; unchanged deadlines keep the running timer."""

        if deadline == self._deadline:
            return False
        was_active = self.active
        self.cancel()
        self._deadline = deadline
        if was_active:
            self.start()
        else:
            self.evaluate()
        return True

    def cancel(self) -> None:
        """Stop re-evaluating. Safe to call more than once."""

        if self._task is not None:
            self._task.cancel()
            self._task = None
            LOGGER.debug("Countdown for %s cancelled", self._deadline)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.evaluate()
            except Exception:
                LOGGER.exception("Countdown evaluation failed for %s", self._deadline)
