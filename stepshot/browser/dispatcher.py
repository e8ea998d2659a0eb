"""Maps a declarative step onto exactly one Playwright page operation."""

from __future__ import annotations

import re
from typing import Any, Optional

from stepshot.browser.schema import ActionKind, Step
from stepshot.core.errors import StepFailure, UnknownActionError

DEFAULT_WAIT_MS = 5000

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_wait_timeout(value: Optional[str], default: int = DEFAULT_WAIT_MS) -> int:
    """Return the wait timeout in milliseconds for a ``wait`` step.

    Takes the leading integer of ``value`` (``"100ms"`` -> 100). Missing,
    non-numeric and non-positive values fall back to ``default``.
    """

    if value is None:
        return default
    match = _LEADING_INT.match(value)
    if not match:
        return default
    timeout = int(match.group(1))
    return timeout if timeout > 0 else default


def xpath_selector(locator: str) -> str:
    return f"xpath={locator}"


async def dispatch_step(page: Any, step: Step, *, default_wait_ms: int = DEFAULT_WAIT_MS) -> None:
    """Perform ``step`` against ``page`` and return once it has completed.

    Raises ``UnknownActionError`` for unsupported actions and ``StepFailure``
    for malformed steps; Playwright errors propagate unchanged.
    """

    kind = step.kind
    if kind is None:
        raise UnknownActionError(step.action)
    if kind.requires_locator and not step.locator:
        raise StepFailure(f"Missing locator for action: {step.action}")

    selector = xpath_selector(step.locator)
    if kind is ActionKind.CLICK:
        await page.locator(selector).click()
    elif kind is ActionKind.FILL:
        await page.locator(selector).fill(step.value or "")
    elif kind is ActionKind.WAIT:
        timeout = parse_wait_timeout(step.value, default_wait_ms)
        await page.wait_for_selector(selector, state="attached", timeout=timeout)
    elif kind is ActionKind.VALIDATE:
        # Presence check only; the text is not compared.
        await page.locator(selector).text_content()
    elif kind is ActionKind.ASSERT_URL:
        if not step.value:
            raise StepFailure("assert-url requires a value")
        await page.wait_for_url(step.value)
    elif kind is ActionKind.SELECT:
        await page.locator(selector).select_option(label=step.value or "")
    elif kind is ActionKind.SCROLL:
        await page.locator(selector).scroll_into_view_if_needed()
    else:  # pragma: no cover - every ActionKind member is handled above
        raise UnknownActionError(step.action)
