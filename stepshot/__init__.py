"""Declarative browser step runner with per-step screenshots."""

from stepshot.browser.schema import RunResult, Step, StepOutcome
from stepshot.config_loader import RunnerConfig
from stepshot.core.orchestrator import run_automation, run_automation_sync

__all__ = [
    "RunResult",
    "RunnerConfig",
    "Step",
    "StepOutcome",
    "run_automation",
    "run_automation_sync",
]
