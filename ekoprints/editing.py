"""Mini README: Dialog and confirmation state shared by every record editor.

Structure:
    * FailurePolicy - what a dialog does when the persistence call fails.
    * Dialog - open/closed flag plus a draft detached from the committed record.
    * ConfirmationPrompt - pending delete target with confirm/cancel.
    * commit - await a persistence call, then close the dialog.

Editors never update local lists themselves. They await the injected
callback and close; the data layer publishes a fresh snapshot afterwards.
By default a failed call still closes the dialog and the exception reaches
the caller. Callers that want to keep the dialog open or report the error
themselves pass a ``FailurePolicy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from .logging_utils import get_logger

LOGGER = get_logger(__name__)

DraftT = TypeVar("DraftT")
TargetT = TypeVar("TargetT")


@dataclass(slots=True)
class FailurePolicy:
    on_failure: Optional[Callable[[Exception], None]] = None
    close_on_failure: bool = True


class Dialog(Generic[DraftT]):
    """Modal with its own working copy of the entity fields."""

    def __init__(self, draft_factory: Callable[[], DraftT]) -> None:
        self._draft_factory = draft_factory
        self.draft: DraftT = draft_factory()
        self.is_open = False

    def open(self, draft: Optional[DraftT] = None) -> DraftT:
        self.draft = draft if draft is not None else self._draft_factory()
        self.is_open = True
        return self.draft

    def close(self) -> None:
        self.is_open = False


async def commit(
    dialog: Optional[Dialog],
    operation: Awaitable[object],
    policy: Optional[FailurePolicy] = None,
) -> bool:
    """Await ``operation`` and close ``dialog``; return whether the call succeeded."""

    policy = policy or FailurePolicy()
    try:
        await operation
    except Exception as error:
        if dialog is not None and policy.close_on_failure:
            dialog.close()
        if policy.on_failure is None:
            raise
        LOGGER.warning("Persistence call failed: %s", error)
        policy.on_failure(error)
        return False
    if dialog is not None:
        dialog.close()
    return True


class ConfirmationPrompt(Generic[TargetT]):
    """Hold a record awaiting an explicit confirm or cancel."""

    def __init__(self) -> None:
        self.target: Optional[TargetT] = None

    @property
    def is_open(self) -> bool:
        return self.target is not None

    def request(self, target: TargetT) -> None:
        self.target = target

    def cancel(self) -> Optional[TargetT]:
        """Discard the pending target without calling anything."""

        discarded, self.target = self.target, None
        return discarded

    async def confirm(
        self,
        action: Callable[[TargetT], Awaitable[object]],
        policy: Optional[FailurePolicy] = None,
    ) -> Optional[TargetT]:
        """Run ``action`` on the pending target; the prompt is cleared either way."""

        target = self.cancel()
        if target is None:
            return None
        await commit(None, action(target), policy)
        return target
