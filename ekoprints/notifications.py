"""Mini README: Transient user notifications ("toasts").

Structure:
    * Severity - info / success / error.
    * Toast - one message with its severity.
    * NotificationService - queue injected into views; surfaces drain it.

Views never reach for a global channel: the web interface hands each user
session its own service and renders pending toasts on the next page, while
the CLI passes a listener that echoes them to the terminal.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional

from .logging_utils import get_logger

LOGGER = get_logger(__name__)


class Severity(str, Enum):
    """Visual weight of a toast."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Toast:
    message: str
    severity: Severity = Severity.INFO


class NotificationService:
    """Collect toasts until the displaying surface drains them."""

    def __init__(
        self,
        listener: Optional[Callable[[Toast], None]] = None,
        *,
        max_pending: int = 20,
    ) -> None:
        self._pending: Deque[Toast] = deque(maxlen=max_pending)
        self._listener = listener

    def notify(self, message: str, severity: Severity = Severity.INFO) -> Toast:
        """Publish a toast and forward it to the listener when one is set."""

        toast = Toast(message=message, severity=Severity(severity))
        LOGGER.debug("Toast [%s] %s", toast.severity.value, toast.message)
        self._pending.append(toast)
        if self._listener is not None:
            self._listener(toast)
        return toast

    def info(self, message: str) -> Toast:
        return self.notify(message, Severity.INFO)

    def success(self, message: str) -> Toast:
        return self.notify(message, Severity.SUCCESS)

    def error(self, message: str) -> Toast:
        return self.notify(message, Severity.ERROR)

    @property
    def pending(self) -> List[Toast]:
        return list(self._pending)

    def drain(self) -> List[Toast]:
        """Return and forget every pending toast, oldest first."""

        toasts = list(self._pending)
        self._pending.clear()
        return toasts
