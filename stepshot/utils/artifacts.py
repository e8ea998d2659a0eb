"""Per-session artifact directory and trace files."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .file_ops import append_jsonl, create_directory, write_json, write_text

REPORT_NAME = "result.html"


def success_screenshot_name(index: int) -> str:
    return f"step-{index}.png"


def error_screenshot_name(index: int) -> str:
    return f"step-{index}-error.png"


class SessionArtifacts:
    """Owns ``<root>/<session_id>`` for one run and maps files to URIs.

    The directory is created on construction; a failure raises
    ``StorageError`` before any browser work starts.
    """

    def __init__(self, root: Path | str, session_id: str, *, public_base_url: Optional[str] = None) -> None:
        self.root = Path(root)
        self.session_id = session_id
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.base_dir = create_directory(self.root / session_id)
        self.steps_file = self.base_dir / "steps.jsonl"
        self.summary_file = self.base_dir / "run_summary.json"
        self.report_file = self.base_dir / REPORT_NAME

    def path_for(self, name: str) -> Path:
        return self.base_dir / name

    def ref_for(self, name: str) -> str:
        """Return the URI for an artifact, relative unless a public base is configured."""

        relative = f"{self.session_id}/{name}"
        if self.public_base_url:
            return f"{self.public_base_url}/{relative}"
        return relative

    def log_outcome(self, outcome: Dict[str, Any]) -> None:
        """Append a step outcome to steps.jsonl."""

        entry = {"timestamp": datetime.now(UTC).isoformat(), "sessionId": self.session_id, **outcome}
        append_jsonl(self.steps_file, entry)

    def write_report(self, html: str) -> str:
        write_text(self.report_file, html)
        return self.ref_for(REPORT_NAME)

    def write_summary(self, payload: Dict[str, Any]) -> Path:
        """Persist the run-level result next to the screenshots."""

        write_json(self.summary_file, payload)
        return self.summary_file
