"""Browser module exports."""

from .dispatcher import dispatch_step, parse_wait_timeout
from .executor import StepExecutor
from .schema import ActionKind, AutomationSession, RunRequest, RunResult, Step, StepOutcome
from .session import BrowserSession, BrowserSessionProvider

__all__ = [
    "ActionKind",
    "AutomationSession",
    "BrowserSession",
    "BrowserSessionProvider",
    "RunRequest",
    "RunResult",
    "Step",
    "StepExecutor",
    "StepOutcome",
    "dispatch_step",
    "parse_wait_timeout",
]
