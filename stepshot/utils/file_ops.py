"""Small helpers for interacting with the filesystem."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from stepshot.core.errors import StorageError


def create_directory(path: Path) -> Path:
    """Create ``path`` (and parents) or raise ``StorageError``."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Unable to create artifact directory {path}: {exc}") from exc
    return path


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text, creating the parent directory when needed."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    write_text(path, json.dumps(payload, ensure_ascii=False, indent=2))


def append_jsonl(path: Path, payload: Dict[str, Any]) -> None:
    """Append a JSONL entry to the target file."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
