"""Workflow slot state management for Atelier."""

from .base import (
    InvalidTransitionError,
    SlotStatus,
    WorkflowBoard,
    WorkflowBusyError,
    WorkflowSlot,
)

__all__ = [
    "InvalidTransitionError",
    "SlotStatus",
    "WorkflowBoard",
    "WorkflowBusyError",
    "WorkflowSlot",
]
