"""Core orchestration primitives."""

from .errors import InvalidRequest, RunFailure, StepFailure, StepshotError, StorageError, UnknownActionError

__all__ = [
    "InvalidRequest",
    "RunFailure",
    "StepFailure",
    "StepshotError",
    "StorageError",
    "UnknownActionError",
]
