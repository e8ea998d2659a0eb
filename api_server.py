from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from stepshot.browser.schema import RunRequest, RunResult
from stepshot.config_loader import DEFAULT_SETTINGS_PATH, RunnerConfig, load_config
from stepshot.core.errors import InvalidRequest, StorageError
from stepshot.core.orchestrator import MISSING_PARAMETERS, run_automation

ARTIFACT_MOUNT = "/screenshots"

Runner = Callable[..., Awaitable[RunResult]]


def _default_config() -> RunnerConfig:
    if DEFAULT_SETTINGS_PATH.exists():
        return load_config()
    return RunnerConfig.from_settings({})


def create_app(config: RunnerConfig | None = None, *, runner: Runner = run_automation) -> FastAPI:
    """Build the HTTP app around one explicit runner configuration."""

    settings = config or _default_config()
    if not settings.public_base_url:
        settings = replace(settings, public_base_url=ARTIFACT_MOUNT)
    artifact_root = Path(settings.artifact_root).resolve()
    artifact_root.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="Stepshot API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.state.config = settings

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    @app.post("/api/run-automation")
    async def run_automation_endpoint(payload: RunRequest) -> JSONResponse:
        try:
            result = await runner(payload.url, payload.steps, payload.headless, config=settings)
        except InvalidRequest as exc:
            message = str(exc) or MISSING_PARAMETERS
            return JSONResponse(status_code=400, content={"status": "error", "message": message})
        except StorageError as exc:
            return JSONResponse(status_code=500, content={"status": "error", "message": str(exc)})
        status_code = 200 if result.status == "success" else 500
        return JSONResponse(status_code=status_code, content=result.model_dump(mode="json", by_alias=True))

    @app.get(ARTIFACT_MOUNT + "/{path:path}")
    def artifact_proxy(path: str) -> FileResponse:
        target = (artifact_root / path).resolve()
        try:
            target.relative_to(artifact_root)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid artifact path")
        if not target.is_file():
            raise HTTPException(status_code=404, detail="Artifact not found")
        return FileResponse(target)

    return app


app = create_app()

__all__ = ["app", "create_app"]
