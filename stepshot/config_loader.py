"""Utilities for loading runner configuration files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parents[1] / "config" / "settings.yaml"

DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
)
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/113.0.0.0 Safari/537.36"
)

_ENV_PREFIX = "STEPSHOT_"


def load_settings(path: Path | None = None) -> Dict[str, Any]:
    """Return parsed settings YAML as a dictionary."""

    file_path = path or DEFAULT_SETTINGS_PATH
    if not file_path.exists():
        raise FileNotFoundError(f"Missing settings file at {file_path}")
    with file_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return data


def _int_setting(section: Mapping[str, Any], key: str, default: int) -> int:
    raw = section.get(key, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Setting {key!r} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class BrowserProfile:
    """Launch flags and context fingerprint applied to every session."""

    launch_args: Tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1366
    viewport_height: int = 768
    locale: str = "en-US"
    timezone_id: str = "Asia/Jakarta"
    stealth: bool = True
    slow_mo: int = 0

    @classmethod
    def from_settings(cls, section: Mapping[str, Any]) -> "BrowserProfile":
        viewport = section.get("viewport") or {}
        args = section.get("launch_args")
        return cls(
            launch_args=tuple(args) if args is not None else DEFAULT_LAUNCH_ARGS,
            user_agent=str(section.get("user_agent") or DEFAULT_USER_AGENT),
            viewport_width=_int_setting(viewport, "width", 1366),
            viewport_height=_int_setting(viewport, "height", 768),
            locale=str(section.get("locale") or "en-US"),
            timezone_id=str(section.get("timezone_id") or "Asia/Jakarta"),
            stealth=bool(section.get("stealth", True)),
            slow_mo=_int_setting(section, "slow_mo", 0),
        )

    def context_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``browser.new_context``."""

        return {
            "user_agent": self.user_agent,
            "viewport": {"width": self.viewport_width, "height": self.viewport_height},
            "locale": self.locale,
            "timezone_id": self.timezone_id,
        }


@dataclass(frozen=True)
class RunnerConfig:
    """Configuration handed to every run; nothing here is process-global."""

    artifact_root: Path = Path("artifacts/screenshots")
    public_base_url: Optional[str] = None
    navigation_timeout_ms: int = 30000
    settle_delay_ms: int = 5000
    default_wait_ms: int = 5000
    action_timeout_ms: int = 5000
    write_report: bool = True
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3001"])
    browser: BrowserProfile = field(default_factory=BrowserProfile)

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any] | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> "RunnerConfig":
        """Build a config from a settings mapping with environment overrides applied."""

        data = settings or {}
        environ = os.environ if env is None else env
        runner = dict(data.get("runner") or {})
        server = dict(data.get("server") or {})

        artifact_root = environ.get(f"{_ENV_PREFIX}ARTIFACT_ROOT") or runner.get("artifact_root") or "artifacts/screenshots"
        base_url = environ.get(f"{_ENV_PREFIX}PUBLIC_BASE_URL") or runner.get("public_base_url") or None
        settle_override = environ.get(f"{_ENV_PREFIX}SETTLE_DELAY_MS")
        if settle_override is not None:
            runner["settle_delay_ms"] = settle_override
        origins_override = environ.get(f"{_ENV_PREFIX}ALLOWED_ORIGINS")
        if origins_override is not None:
            origins = [item.strip() for item in origins_override.split(",") if item.strip()]
        else:
            origins = list(server.get("allowed_origins") or ["http://localhost:3001"])

        return cls(
            artifact_root=Path(artifact_root),
            public_base_url=str(base_url) if base_url else None,
            navigation_timeout_ms=_int_setting(runner, "navigation_timeout_ms", 30000),
            settle_delay_ms=_int_setting(runner, "settle_delay_ms", 5000),
            default_wait_ms=_int_setting(runner, "default_wait_ms", 5000),
            action_timeout_ms=_int_setting(runner, "action_timeout_ms", 5000),
            write_report=bool(runner.get("write_report", True)),
            allowed_origins=origins,
            browser=BrowserProfile.from_settings(data.get("browser") or {}),
        )


def load_config(path: Path | None = None, *, env: Mapping[str, str] | None = None) -> RunnerConfig:
    """Load settings YAML and return the resulting ``RunnerConfig``."""

    return RunnerConfig.from_settings(load_settings(path), env=env)
