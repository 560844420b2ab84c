"""FastAPI application entrypoint for pomgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..errors import InputNotFound
from ..models import GenerationRequest, GenerationResult
from ..orchestrator import Orchestrator


class GenerationOptionsModel(BaseModel):
    output: Optional[str] = None
    file_header: Optional[str] = None
    test_file_suffix: Optional[str] = None


class ApplicationRequest(GenerationOptionsModel):
    path: str
    project: Optional[str] = None
    library: bool = False


class WorkspaceRequest(GenerationOptionsModel):
    path: str
    project: Optional[str] = None


class ArtifactsRequest(GenerationOptionsModel):
    path: str
    project: Optional[str] = None
    base: bool = False
    page_objects: bool = False
    selectors: bool = False
    fixtures: bool = False
    configs: bool = False
    tests: bool = False
    all: bool = False


class RealtimeMockRequest(BaseModel):
    output: str
    file_header: Optional[str] = None


class ArtifactModel(BaseModel):
    path: str
    kind: str


class GenerationResponse(BaseModel):
    success: bool
    artifacts: List[ArtifactModel]
    warnings: List[str]
    errors: List[str]
    counts: Dict[str, int]


class HealthResponse(BaseModel):
    status: str
    version: str


def _default_orchestrator(overrides: Dict[str, Any]) -> Orchestrator:
    return Orchestrator(overrides=overrides)


def _to_response(result: GenerationResult) -> GenerationResponse:
    return GenerationResponse(
        success=result.success,
        artifacts=[ArtifactModel(path=item.path, kind=item.kind) for item in result.artifacts],
        warnings=list(result.warnings),
        errors=list(result.errors),
        counts=result.counts,
    )


def _require_path(path: str) -> None:
    if not Path(path).expanduser().exists():
        raise InputNotFound(f"Path not found: {path}", path=path)


async def _in_executor(func: Callable[[], GenerationResult]) -> GenerationResult:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[Dict[str, Any]], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing pomgen operations.

    ``orchestrator_factory`` receives the per-request generator overrides
    (``file_header``, ``test_file_suffix``) and returns a fresh orchestrator.
    """
    app = FastAPI(title="pomgen service", version=__version__)

    def factory_for(payload: BaseModel) -> Orchestrator:
        return orchestrator_factory(
            {
                "file_header": getattr(payload, "file_header", None),
                "test_file_suffix": getattr(payload, "test_file_suffix", None),
            }
        )

    async def get_factory() -> Callable[[BaseModel], Orchestrator]:
        return factory_for

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/generate/application", response_model=GenerationResponse)
    async def generate_application(
        payload: ApplicationRequest,
        factory: Callable[[BaseModel], Orchestrator] = Depends(get_factory),
    ) -> GenerationResponse:
        _require_path(payload.path)
        orchestrator = factory(payload)
        run = orchestrator.run_library if payload.library else orchestrator.run_application
        result = await _in_executor(lambda: run(payload.path, payload.output, project=payload.project))
        return _to_response(result)

    @app.post("/generate/workspace", response_model=GenerationResponse)
    async def generate_workspace(
        payload: WorkspaceRequest,
        factory: Callable[[BaseModel], Orchestrator] = Depends(get_factory),
    ) -> GenerationResponse:
        _require_path(payload.path)
        orchestrator = factory(payload)
        result = await _in_executor(
            lambda: orchestrator.run_workspace(payload.path, payload.output, project=payload.project)
        )
        return _to_response(result)

    @app.post("/generate/artifacts", response_model=GenerationResponse)
    async def generate_artifacts(
        payload: ArtifactsRequest,
        factory: Callable[[BaseModel], Orchestrator] = Depends(get_factory),
    ) -> GenerationResponse:
        _require_path(payload.path)
        orchestrator = factory(payload)
        request = GenerationRequest(
            path=payload.path,
            output=payload.output,
            project=payload.project,
            base=payload.base,
            page_objects=payload.page_objects,
            selectors=payload.selectors,
            fixtures=payload.fixtures,
            configs=payload.configs,
            tests=payload.tests,
            all=payload.all,
        )
        result = await _in_executor(lambda: orchestrator.run_artifacts(request))
        return _to_response(result)

    @app.post("/generate/realtime-mock", response_model=GenerationResponse)
    async def generate_realtime_mock(
        payload: RealtimeMockRequest,
        factory: Callable[[BaseModel], Orchestrator] = Depends(get_factory),
    ) -> GenerationResponse:
        orchestrator = factory(payload)
        result = await _in_executor(lambda: orchestrator.run_realtime_mock(payload.output))
        return _to_response(result)

    @app.exception_handler(InputNotFound)
    async def input_not_found_handler(_: Any, exc: InputNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
