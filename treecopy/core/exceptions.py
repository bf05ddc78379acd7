"""Exceptions raised to callers that misuse the engine."""
from __future__ import annotations


class CopyInProgressError(RuntimeError):
    """Raised when state that is frozen for a run is changed mid-run."""

    def __init__(self, action: str = "modify the engine"):
        super().__init__(f"Cannot {action} while a copy is in progress")
        self.action = action
