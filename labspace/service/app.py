"""FastAPI application entrypoint for labspace service mode."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from ..config import LabspaceConfig, load_config
from ..errors import AnalysisError, InvalidInput
from ..models import profile_from_dict, profile_to_dict
from ..orchestrator import BUNDLE_PREFIX, BUNDLE_SUFFIX, BundleOutcome, Orchestrator


class AnalyzeRequest(BaseModel):
    github_url: str


class GenerateRequest(BaseModel):
    profile: Dict[str, Any]


class GenerateResponse(BaseModel):
    success: bool
    download_url: str
    files: List[str]


class HealthResponse(BaseModel):
    status: str
    timestamp: str


def _is_bundle_name(filename: str) -> bool:
    """Only bare names produced by ``Orchestrator.build_bundle`` are served."""
    return (
        Path(filename).name == filename
        and filename.startswith(BUNDLE_PREFIX)
        and filename.endswith(BUNDLE_SUFFIX)
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] | None = None,
    *,
    config: LabspaceConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing labspace operations."""

    settings = config or load_config()
    download_dir = Path(settings.service.download_dir)

    def _default_orchestrator() -> Orchestrator:
        return Orchestrator(config=settings)

    factory = orchestrator_factory or _default_orchestrator

    app = FastAPI(title="Labspace Generator", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )

    @app.post("/api/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        profile = await loop.run_in_executor(None, orchestrator.analyze, payload.github_url)
        return profile_to_dict(profile)

    @app.post("/api/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        profile = profile_from_dict(payload.profile)

        def _run_bundle() -> BundleOutcome:
            return orchestrator.build_bundle(profile, download_dir)

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_bundle)
        return GenerateResponse(
            success=True,
            download_url=f"/download/{outcome.path.name}",
            files=outcome.files,
        )

    @app.get("/download/{filename}")
    async def download(filename: str) -> FileResponse:
        if not _is_bundle_name(filename):
            raise HTTPException(status_code=404, detail="Bundle not found")
        target = download_dir / filename
        if not target.is_file():
            raise HTTPException(status_code=404, detail="Bundle not found")
        return FileResponse(target, media_type="application/zip", filename=filename)

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(_: Any, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(_: Any, exc: AnalysisError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0",
    port: int = 3001,
    *,
    config: LabspaceConfig | None = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)
