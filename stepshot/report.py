"""HTML report rendering for a finished run."""

from __future__ import annotations

from html import escape
from typing import List, Sequence

from stepshot.browser.schema import StepOutcome

STATUS_COLORS = {"succeeded": "green", "failed": "red"}


def _render_outcome(outcome: StepOutcome) -> str:
    color = STATUS_COLORS.get(outcome.status, "black")
    parts: List[str] = [
        "<div class=\"step\">",
        (
            f"<p><strong>Step {outcome.index}:</strong> {escape(outcome.action)} - {escape(outcome.locator)} - "
            f"<span style=\"color: {color};\">{escape(outcome.status)}</span></p>"
        ),
    ]
    if outcome.error_message:
        parts.append(f"<p style=\"color: red;\">Error: {escape(outcome.error_message)}</p>")
    if outcome.artifact_ref:
        # result.html sits beside the screenshots, so link by file name.
        file_name = outcome.artifact_ref.rsplit("/", 1)[-1]
        parts.append(f"<img src=\"{escape(file_name, quote=True)}\" width=\"300\" />")
    parts.append("</div>")
    return "\n".join(parts)


def render_report(url: str, outcomes: Sequence[StepOutcome]) -> str:
    """Return the full HTML document for ``result.html``."""

    body = "\n".join(_render_outcome(outcome) for outcome in outcomes)
    return (
        "<html>\n<head><meta charset=\"utf-8\"><title>Automation Report</title></head>\n<body>\n"
        "<h1>Automation Report</h1>\n"
        f"<p>URL: {escape(url)}</p>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )
