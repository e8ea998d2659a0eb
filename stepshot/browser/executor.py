"""Sequential step execution with per-step failure isolation."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from stepshot.browser.dispatcher import DEFAULT_WAIT_MS, dispatch_step
from stepshot.browser.schema import Step, StepOutcome
from stepshot.core.errors import RunFailure
from stepshot.utils.artifacts import SessionArtifacts, error_screenshot_name, success_screenshot_name

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"

Dispatcher = Callable[..., Awaitable[None]]


def _error_message(exc: BaseException) -> str:
    message = str(exc).strip()
    return message or UNKNOWN_ERROR


class StepExecutor:
    """Runs every step in order and records one outcome per step."""

    def __init__(
        self,
        artifacts: SessionArtifacts,
        *,
        default_wait_ms: int = DEFAULT_WAIT_MS,
        dispatcher: Dispatcher = dispatch_step,
    ) -> None:
        self.artifacts = artifacts
        self.default_wait_ms = default_wait_ms
        self._dispatch = dispatcher

    async def run(self, page: Any, steps: Sequence[Step]) -> List[StepOutcome]:
        """Execute all steps; a failed step never stops the ones after it."""

        outcomes: List[StepOutcome] = []
        for index, step in enumerate(steps, start=1):
            outcome = await self.run_step(page, step, index=index)
            outcomes.append(outcome)
            self.artifacts.log_outcome(outcome.model_dump(mode="json", by_alias=True))
        return outcomes

    async def run_step(self, page: Any, step: Step, *, index: int) -> StepOutcome:
        try:
            await self._dispatch(page, step, default_wait_ms=self.default_wait_ms)
            name = success_screenshot_name(index)
            await self._capture(page, name)
        except Exception as exc:  # noqa: BLE001
            if _page_closed(page):
                raise RunFailure(f"Browser page closed during step {index}: {_error_message(exc)}") from exc
            message = _error_message(exc)
            logger.warning(
                "Step failed",
                extra={"step_index": index, "action": step.action, "locator": step.locator, "error": message},
            )
            return StepOutcome(
                index=index,
                action=step.action,
                locator=step.locator,
                value=step.value,
                status="failed",
                error_message=message,
                artifact_ref=await self._capture_error(page, index),
            )
        return StepOutcome(
            index=index,
            action=step.action,
            locator=step.locator,
            value=step.value,
            status="succeeded",
            artifact_ref=self.artifacts.ref_for(name),
        )

    async def _capture(self, page: Any, name: str) -> None:
        await page.screenshot(path=str(self.artifacts.path_for(name)), full_page=True)

    async def _capture_error(self, page: Any, index: int) -> Optional[str]:
        name = error_screenshot_name(index)
        try:
            await self._capture(page, name)
        except Exception as exc:  # noqa: BLE001
            if _page_closed(page):
                raise RunFailure(f"Browser page closed during step {index}: {_error_message(exc)}") from exc
            logger.warning("Error screenshot unavailable", extra={"step_index": index}, exc_info=True)
            return None
        return self.artifacts.ref_for(name)


def _page_closed(page: Any) -> bool:
    is_closed = getattr(page, "is_closed", None)
    return bool(is_closed()) if callable(is_closed) else False
