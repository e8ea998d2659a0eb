"""Session orchestration: one browser, one artifact directory, one result."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import ValidationError

from stepshot.browser.executor import StepExecutor
from stepshot.browser.schema import AutomationSession, RunResult, Step
from stepshot.browser.session import BrowserSessionProvider
from stepshot.config_loader import RunnerConfig
from stepshot.core.errors import InvalidRequest
from stepshot.report import render_report
from stepshot.utils.artifacts import SessionArtifacts

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Automation completed!"
MISSING_PARAMETERS = "Missing parameters"

ProviderFactory = Callable[[RunnerConfig], BrowserSessionProvider]


def default_provider_factory(config: RunnerConfig) -> BrowserSessionProvider:
    return BrowserSessionProvider(config.browser, action_timeout_ms=config.action_timeout_ms)


def build_session(
    url: Optional[str],
    steps: Optional[Sequence[Step | Mapping[str, Any]]],
    headless: bool = True,
) -> AutomationSession:
    """Validate the inbound job and assign it a fresh session id."""

    if not url or not str(url).strip() or steps is None:
        raise InvalidRequest(MISSING_PARAMETERS)
    parsed = []
    for position, raw in enumerate(steps, start=1):
        if isinstance(raw, Step):
            parsed.append(raw)
            continue
        try:
            parsed.append(Step.model_validate(raw))
        except ValidationError as exc:
            raise InvalidRequest(f"Invalid step {position}: {exc.errors()[0]['msg']}") from exc
    return AutomationSession(url=str(url).strip(), steps=parsed, headless=bool(headless))


async def run_automation(
    url: Optional[str],
    steps: Optional[Sequence[Step | Mapping[str, Any]]],
    headless: bool = True,
    *,
    config: RunnerConfig | None = None,
    provider_factory: ProviderFactory | None = None,
) -> RunResult:
    """Run ``steps`` against ``url`` and return the aggregate result.

    ``InvalidRequest`` and ``StorageError`` are raised before a browser is
    launched. Any other failure is reported as an ``error`` result; step
    failures alone never make the run an error.
    """

    session = build_session(url, steps, headless)
    cfg = config or RunnerConfig()
    artifacts = SessionArtifacts(cfg.artifact_root, session.session_id, public_base_url=cfg.public_base_url)
    provider = (provider_factory or default_provider_factory)(cfg)
    executor = StepExecutor(artifacts, default_wait_ms=cfg.default_wait_ms)

    started = perf_counter()
    logger.info(
        "Automation run started",
        extra={"session_id": session.session_id, "url": session.url, "steps": len(session.steps)},
    )
    try:
        async with provider.scoped(session.headless) as browser:
            page = browser.page
            await page.goto(session.url, timeout=cfg.navigation_timeout_ms)
            if cfg.settle_delay_ms > 0:
                await page.wait_for_timeout(cfg.settle_delay_ms)
            outcomes = await executor.run(page, session.steps)
        report_ref = None
        if cfg.write_report:
            report_ref = artifacts.write_report(render_report(session.url, outcomes))
        result = RunResult(
            status="success",
            message=SUCCESS_MESSAGE,
            session_id=session.session_id,
            report_ref=report_ref,
            step_outcomes=outcomes,
        )
        artifacts.write_summary(result.model_dump(mode="json", by_alias=True))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Automation run failed", extra={"session_id": session.session_id})
        result = RunResult(
            status="error",
            message=str(exc) or exc.__class__.__name__,
            session_id=session.session_id,
        )
        try:
            artifacts.write_summary(result.model_dump(mode="json", by_alias=True))
        except OSError:
            logger.warning("Run summary not written", extra={"session_id": session.session_id}, exc_info=True)
        return result

    logger.info(
        "Automation run finished",
        extra={
            "session_id": session.session_id,
            "failed_steps": result.failed_steps,
            "run_duration": round(perf_counter() - started, 4),
        },
    )
    return result


def run_automation_sync(
    url: Optional[str],
    steps: Optional[Sequence[Step | Mapping[str, Any]]],
    headless: bool = True,
    *,
    config: RunnerConfig | None = None,
    provider_factory: ProviderFactory | None = None,
) -> RunResult:
    """Blocking wrapper around ``run_automation``."""

    return asyncio.run(
        run_automation(url, steps, headless, config=config, provider_factory=provider_factory)
    )
