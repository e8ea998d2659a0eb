from __future__ import annotations

import json
from pathlib import Path

import pytest

from stepshot.browser.schema import Step
from stepshot.browser.session import BrowserSessionProvider
from stepshot.config_loader import RunnerConfig
from stepshot.core.errors import InvalidRequest, StorageError
from stepshot.core.orchestrator import build_session, run_automation, run_automation_sync
from tests.browser_fakes import FakeElement, FakePage, FakePlaywright, FakeTimeoutError

URL = "https://example.com"
GO = "//button[@id='go']"


def _config(tmp_path: Path, **overrides) -> RunnerConfig:
    return RunnerConfig(artifact_root=tmp_path / "screenshots", **overrides)


def _factory(driver: FakePlaywright):
    def build(config: RunnerConfig) -> BrowserSessionProvider:
        return BrowserSessionProvider(config.browser, action_timeout_ms=config.action_timeout_ms, playwright_factory=driver)

    return build


def _driver(**elements: FakeElement) -> FakePlaywright:
    return FakePlaywright(FakePage(elements={f"xpath={key}": value for key, value in elements.items()}))


@pytest.mark.asyncio
async def test_click_on_existing_element_succeeds(tmp_path: Path) -> None:
    driver = _driver(**{GO: FakeElement()})

    result = await run_automation(
        URL,
        [{"action": "click", "locator": GO}],
        True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "success"
    assert result.message == "Automation completed!"
    assert len(result.step_outcomes) == 1
    assert result.step_outcomes[0].status == "succeeded"
    assert result.step_outcomes[0].artifact_ref == f"{result.session_id}/step-1.png"
    assert ("goto", URL, 30000) in driver.page.calls
    assert ("wait_for_timeout", 5000) in driver.page.calls
    assert driver.stops == 1


@pytest.mark.asyncio
async def test_missing_element_is_failed_step_in_successful_run(tmp_path: Path) -> None:
    driver = _driver()

    result = await run_automation(
        URL,
        [{"action": "click", "xpath": GO}],
        True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "success"
    outcome = result.step_outcomes[0]
    assert outcome.status == "failed"
    assert outcome.locator == GO
    assert "Timeout" in (outcome.error_message or "")
    assert outcome.artifact_ref and outcome.artifact_ref.endswith("step-1-error.png")


@pytest.mark.asyncio
async def test_empty_steps_yield_empty_outcomes(tmp_path: Path) -> None:
    driver = _driver()

    result = await run_automation(URL, [], True, config=_config(tmp_path), provider_factory=_factory(driver))

    assert result.status == "success"
    assert result.step_outcomes == []
    assert driver.stops == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(("url", "steps"), [(None, []), ("", []), ("   ", []), (URL, None)])
async def test_missing_parameters_rejected_before_browser(tmp_path: Path, url, steps) -> None:
    driver = _driver()
    config = _config(tmp_path)

    with pytest.raises(InvalidRequest, match="Missing parameters"):
        await run_automation(url, steps, True, config=config, provider_factory=_factory(driver))

    assert driver.starts == 0
    assert not config.artifact_root.exists()


def test_malformed_step_is_invalid_request() -> None:
    with pytest.raises(InvalidRequest, match="Invalid step 2"):
        build_session(URL, [{"action": "click", "locator": GO}, {"locator": GO}])


@pytest.mark.asyncio
async def test_select_without_matching_label_fails_step(tmp_path: Path) -> None:
    driver = _driver(**{"//select[@id='country']": FakeElement(options=["Indonesia", "Japan"])})

    result = await run_automation(
        URL,
        [{"action": "select", "locator": "//select[@id='country']", "value": "Canada"}],
        True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "success"
    assert result.step_outcomes[0].status == "failed"


@pytest.mark.asyncio
async def test_outcome_count_and_order_match_input(tmp_path: Path) -> None:
    driver = _driver(**{GO: FakeElement(), "//input[@id='q']": FakeElement()})
    driver.page.navigate_on_click[f"xpath={GO}"] = "https://example.com/results"
    steps = [
        Step(action="fill", locator="//input[@id='q']", value="shoes"),
        Step(action="hover", locator=GO),
        Step(action="click", locator=GO),
        Step(action="assert-url", value="**/results"),
        Step(action="wait", locator="//div[@id='never']", value="100"),
        Step(action="scroll", locator=GO),
    ]

    result = await run_automation(URL, steps, True, config=_config(tmp_path), provider_factory=_factory(driver))

    assert result.status == "success"
    assert len(result.step_outcomes) == len(steps)
    assert [outcome.action for outcome in result.step_outcomes] == [step.action for step in steps]
    assert [outcome.status for outcome in result.step_outcomes] == [
        "succeeded",
        "failed",
        "succeeded",
        "succeeded",
        "failed",
        "succeeded",
    ]
    assert result.step_outcomes[1].error_message == "Unknown action: hover"
    assert all(outcome.artifact_ref for outcome in result.step_outcomes)


@pytest.mark.asyncio
async def test_navigation_failure_is_run_error_and_releases_browser(tmp_path: Path) -> None:
    driver = _driver()
    driver.page.goto_error = FakeTimeoutError("Timeout 30000ms exceeded navigating to https://example.com")

    result = await run_automation(
        URL,
        [{"action": "click", "locator": GO}],
        True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "error"
    assert "Timeout 30000ms" in result.message
    assert result.step_outcomes == []
    assert driver.stops == 1
    assert driver.browsers[0].closed is True


@pytest.mark.asyncio
async def test_launch_failure_is_run_error(tmp_path: Path) -> None:
    driver = _driver()
    driver.launch_error = RuntimeError("browserType.launch: Executable doesn't exist")

    result = await run_automation(URL, [], True, config=_config(tmp_path), provider_factory=_factory(driver))

    assert result.status == "error"
    assert "Executable" in result.message


@pytest.mark.asyncio
async def test_browser_crash_mid_run_is_run_error(tmp_path: Path) -> None:
    driver = _driver(**{GO: FakeElement()})
    driver.page.crash_on_selector = f"xpath={GO}"

    result = await run_automation(
        URL,
        [{"action": "click", "locator": GO}],
        True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "error"
    assert "closed during step 1" in result.message
    assert driver.stops == 1


@pytest.mark.asyncio
async def test_storage_error_when_artifact_root_unusable(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    driver = _driver()

    with pytest.raises(StorageError):
        await run_automation(
            URL,
            [],
            True,
            config=RunnerConfig(artifact_root=blocker),
            provider_factory=_factory(driver),
        )

    assert driver.starts == 0


@pytest.mark.asyncio
async def test_repeated_runs_use_distinct_sessions(tmp_path: Path) -> None:
    config = _config(tmp_path)
    steps = [{"action": "click", "locator": GO}]

    first = await run_automation(URL, steps, True, config=config, provider_factory=_factory(_driver(**{GO: FakeElement()})))
    second = await run_automation(URL, steps, True, config=config, provider_factory=_factory(_driver(**{GO: FakeElement()})))

    assert first.session_id != second.session_id
    assert (config.artifact_root / first.session_id / "step-1.png").exists()
    assert (config.artifact_root / second.session_id / "step-1.png").exists()


@pytest.mark.asyncio
async def test_report_and_summary_written(tmp_path: Path) -> None:
    config = _config(tmp_path, public_base_url="http://localhost:3004/screenshots")
    driver = _driver(**{GO: FakeElement()})

    result = await run_automation(URL, [{"action": "click", "locator": GO}], True, config=config, provider_factory=_factory(driver))

    session_dir = config.artifact_root / result.session_id
    assert result.report_ref == f"http://localhost:3004/screenshots/{result.session_id}/result.html"
    assert "Automation Report" in (session_dir / "result.html").read_text(encoding="utf-8")
    summary = json.loads((session_dir / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "success"
    assert summary["stepOutcomes"][0]["index"] == 1


@pytest.mark.asyncio
async def test_report_can_be_disabled(tmp_path: Path) -> None:
    config = _config(tmp_path, write_report=False, settle_delay_ms=0)
    driver = _driver()

    result = await run_automation(URL, [], True, config=config, provider_factory=_factory(driver))

    assert result.report_ref is None
    assert not (config.artifact_root / result.session_id / "result.html").exists()
    assert not any(call[0] == "wait_for_timeout" for call in driver.page.calls)


def test_sync_wrapper_runs_event_loop(tmp_path: Path) -> None:
    driver = _driver(**{GO: FakeElement()})

    result = run_automation_sync(
        URL,
        [{"action": "validate", "locator": GO}],
        headless=True,
        config=_config(tmp_path),
        provider_factory=_factory(driver),
    )

    assert result.status == "success"
    assert result.step_outcomes[0].status == "succeeded"


@pytest.mark.asyncio
async def test_report_write_failure_becomes_run_error(tmp_path: Path, monkeypatch) -> None:
    import stepshot.utils.artifacts as artifacts_module

    def disk_full(path, content):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(artifacts_module, "write_text", disk_full)
    driver = _driver()
    config = _config(tmp_path)

    result = await run_automation(URL, [], True, config=config, provider_factory=_factory(driver))

    assert result.status == "error"
    assert "No space left on device" in result.message
    assert driver.stops == 1
    summary = json.loads((config.artifact_root / result.session_id / "run_summary.json").read_text(encoding="utf-8"))
    assert summary["status"] == "error"


@pytest.mark.asyncio
async def test_summary_write_failure_still_returns_result(tmp_path: Path, monkeypatch) -> None:
    import stepshot.utils.artifacts as artifacts_module

    def disk_full(path, payload):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(artifacts_module, "write_json", disk_full)

    result = await run_automation(URL, [], True, config=_config(tmp_path), provider_factory=_factory(_driver()))

    assert result.status == "error"
    assert "No space left on device" in result.message
    assert result.session_id
