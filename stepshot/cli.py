"""Command-line entrypoint for running one automation job."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, List

from stepshot.config_loader import DEFAULT_SETTINGS_PATH, RunnerConfig, load_config
from stepshot.core.errors import InvalidRequest, StorageError
from stepshot.core.orchestrator import run_automation_sync

EXIT_OK = 0
EXIT_RUN_ERROR = 1
EXIT_INVALID = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run declarative browser steps and capture screenshots")
    parser.add_argument("--url", required=True, help="Page to open before running the steps")
    parser.add_argument("--steps", required=True, help="Path to a JSON file holding the step list")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--artifact-root", default=None, help="Override the screenshot directory root")
    parser.add_argument("--settings", default=None, help="Path to a settings YAML file")
    parser.add_argument("--settle-ms", type=int, default=None, help="Grace period after page load")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _load_steps(path: Path) -> List[Any]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("steps")
    if not isinstance(payload, list):
        raise InvalidRequest(f"{path} does not contain a step list")
    return payload


def _resolve_config(args: argparse.Namespace) -> RunnerConfig:
    if args.settings:
        config = load_config(Path(args.settings))
    elif DEFAULT_SETTINGS_PATH.exists():
        config = load_config()
    else:
        config = RunnerConfig.from_settings({})
    if args.artifact_root:
        config = replace(config, artifact_root=Path(args.artifact_root))
    if args.settle_ms is not None:
        config = replace(config, settle_delay_ms=args.settle_ms)
    return config


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    config = _resolve_config(args)
    try:
        steps = _load_steps(Path(args.steps))
    except (OSError, ValueError) as exc:
        print(json.dumps({"status": "error", "message": f"Unable to read steps file {args.steps}: {exc}"}))
        return EXIT_INVALID
    except InvalidRequest as exc:
        print(json.dumps({"status": "error", "message": str(exc)}))
        return EXIT_INVALID
    try:
        result = run_automation_sync(args.url, steps, headless=not args.headed, config=config)
    except InvalidRequest as exc:
        print(json.dumps({"status": "error", "message": str(exc)}))
        return EXIT_INVALID
    except StorageError as exc:
        print(json.dumps({"status": "error", "message": str(exc)}))
        return EXIT_RUN_ERROR
    print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    return EXIT_OK if result.status == "success" else EXIT_RUN_ERROR


if __name__ == "__main__":  # pragma: no cover - exercised via CLI test
    sys.exit(main())
