"""Workflow slots and the single-request board.

Each user-facing workflow (primary edit, synthesis, original image
generation, ...) owns a :class:`WorkflowSlot` that records whether its last
request is in flight, succeeded or failed. The :class:`WorkflowBoard` holds
every slot and enforces that at most one remote request is outstanding
across the whole application.

Slot Lifecycle
--------------
::

    idle | succeeded | failed  --begin-->    requesting
    requesting                --succeed-->  succeeded
    requesting                --fail-->     failed
    any                       --reset-->    idle

Any other transition raises :class:`InvalidTransitionError`.

Example:

    >>> board = WorkflowBoard()
    >>> result = board.run("primary", lambda: orchestrator.primary_edit(...))
    >>> board.get("primary").status
    <SlotStatus.SUCCEEDED: 'succeeded'>
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from atelier.core.errors import AtelierError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SLOTS = ("primary", "synthesis", "original", "special", "suggestion")

GENERIC_FAILURE_MESSAGE = "An unknown error occurred while processing the request."


class SlotStatus(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class InvalidTransitionError(Exception):
    """A slot was driven through a transition its current status does not allow."""

    pass


class WorkflowBusyError(AtelierError):
    """Another request is already in flight."""

    pass


@dataclass
class WorkflowSlot:
    """State of a single workflow.

    Attributes:
        name: Slot identifier
        status: Current lifecycle status
        result: Value produced by the last successful request
        error: User-facing message of the last failure
    """

    name: str
    status: SlotStatus = SlotStatus.IDLE
    result: Any = None
    error: str | None = None

    def begin(self) -> None:
        if self.status == SlotStatus.REQUESTING:
            raise InvalidTransitionError(f"Slot '{self.name}' is already requesting")
        self.status = SlotStatus.REQUESTING
        self.result = None
        self.error = None

    def succeed(self, result: Any = None) -> None:
        if self.status != SlotStatus.REQUESTING:
            raise InvalidTransitionError(
                f"Slot '{self.name}' cannot succeed from status '{self.status.value}'"
            )
        self.status = SlotStatus.SUCCEEDED
        self.result = result

    def fail(self, message: str) -> None:
        if self.status != SlotStatus.REQUESTING:
            raise InvalidTransitionError(
                f"Slot '{self.name}' cannot fail from status '{self.status.value}'"
            )
        self.status = SlotStatus.FAILED
        self.error = message

    def reset(self) -> None:
        self.status = SlotStatus.IDLE
        self.result = None
        self.error = None

    def snapshot(self) -> dict:
        return {"name": self.name, "status": self.status.value, "error": self.error}


class WorkflowBoard:
    """All workflow slots plus the global one-request-in-flight rule."""

    def __init__(self, slot_names: tuple[str, ...] = DEFAULT_SLOTS) -> None:
        self._slots = {name: WorkflowSlot(name=name) for name in slot_names}
        self._lock = threading.Lock()

    def get(self, name: str) -> WorkflowSlot:
        """Return the slot called *name*.

        Raises:
            KeyError: If no such slot exists
        """
        if name not in self._slots:
            raise KeyError(f"Unknown workflow slot '{name}'")
        return self._slots[name]

    @property
    def slots(self) -> list[WorkflowSlot]:
        return list(self._slots.values())

    @property
    def busy(self) -> bool:
        return any(slot.status == SlotStatus.REQUESTING for slot in self._slots.values())

    def begin(self, name: str) -> WorkflowSlot:
        """Move slot *name* to ``requesting``.

        Raises:
            WorkflowBusyError: If any slot is already requesting
        """
        slot = self.get(name)
        with self._lock:
            if self.busy:
                active = next(s.name for s in self._slots.values() if s.status == SlotStatus.REQUESTING)
                raise WorkflowBusyError(
                    f"Another request ('{active}') is still in progress. Please wait for it to finish."
                )
            slot.begin()
        return slot

    def reset(self, name: str) -> WorkflowSlot:
        """Return slot *name* to ``idle``.

        A slot whose request is still in flight cannot be reset; the
        running request owns it until it succeeds or fails.

        Raises:
            WorkflowBusyError: If the slot is requesting
        """
        slot = self.get(name)
        with self._lock:
            if slot.status == SlotStatus.REQUESTING:
                raise WorkflowBusyError(
                    f"Slot '{name}' has a request in progress and cannot be reset."
                )
            slot.reset()
        return slot

    def run(self, name: str, fn: Callable[[], T]) -> T:
        """Run *fn* inside slot *name*.

        The slot becomes ``succeeded`` with the return value, or ``failed``
        with the error message. Errors are always re-raised; unexpected ones
        are recorded on the slot with a generic message.

        Raises:
            WorkflowBusyError: If another request is in flight
        """
        slot = self.begin(name)
        try:
            result = fn()
        except AtelierError as e:
            logger.warning(f"Workflow '{name}' failed: {e}")
            slot.fail(str(e))
            raise
        except Exception as e:
            logger.error(f"Unexpected error in workflow '{name}': {e}", exc_info=True)
            slot.fail(GENERIC_FAILURE_MESSAGE)
            raise
        slot.succeed(result)
        return result
