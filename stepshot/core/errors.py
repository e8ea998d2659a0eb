"""Custom exception hierarchy for automation runs."""

from __future__ import annotations


class StepshotError(RuntimeError):
    """Base exception for runner-specific failures."""


class InvalidRequest(StepshotError):
    """Raised when a job is missing its url or steps."""


class StorageError(StepshotError):
    """Raised when the session artifact directory cannot be created."""


class StepFailure(StepshotError):
    """Raised when a single step cannot be completed."""


class UnknownActionError(StepFailure):
    """Raised for an action outside the supported set."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action


class RunFailure(StepshotError):
    """Raised when a failure escapes per-step isolation."""
