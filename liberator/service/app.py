"""FastAPI application entrypoint for liberator service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..orchestrator import LiberationOptions, LiberationResult, Orchestrator
from ..rebuilder import RebuildError
from ..reporting import liberation_report
from ..scanner import Scanner
from ..validators import validate_pack


class ScanRequest(BaseModel):
    files: Dict[str, str]
    exclude_paths: List[str] = Field(default_factory=list)


class ValidateRequest(BaseModel):
    files: Dict[str, str]
    root: str = ""


class LiberateRequest(BaseModel):
    files: Dict[str, str]
    project_name: str = "liberated-app"
    include_backend: bool = True
    include_database: bool = True
    include_auth: bool = True
    include_storage: bool = False
    ai_provider: str = "ollama"
    auth_provider: str = "jwt-standalone"
    domain: str = ""
    ssl_email: str = ""
    deployment_target: str = "vps"
    include_files: bool = True


class LiberateResponse(BaseModel):
    success: bool
    report: Dict[str, Any]
    files: Optional[Dict[str, str]] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing liberator operations over JSON file maps."""
    app = FastAPI(title="Liberator Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/scan")
    def scan(payload: ScanRequest) -> Dict[str, Any]:
        report = Scanner(exclude_paths=payload.exclude_paths).scan(payload.files)
        return report.to_dict()

    @app.post("/validate")
    def validate(payload: ValidateRequest) -> Dict[str, Any]:
        return validate_pack(payload.files, root=payload.root).to_dict()

    @app.post("/liberate", response_model=LiberateResponse)
    async def liberate(
        payload: LiberateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> LiberateResponse:
        options = LiberationOptions(
            project_name=payload.project_name,
            include_backend=payload.include_backend,
            include_database=payload.include_database,
            include_auth=payload.include_auth,
            include_storage=payload.include_storage,
            ai_provider=payload.ai_provider,
            auth_provider=payload.auth_provider,
            domain=payload.domain,
            ssl_email=payload.ssl_email,
            deployment_target=payload.deployment_target,
        )

        def _run() -> LiberationResult:
            return orchestrator.liberate(payload.files, options)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        files = dict(result.rebuilt_project.files) if payload.include_files and result.success else None
        return LiberateResponse(success=result.success, report=liberation_report(result), files=files)

    @app.exception_handler(RebuildError)
    async def rebuild_error_handler(_: Any, exc: RebuildError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
