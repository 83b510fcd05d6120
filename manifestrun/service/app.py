"""FastAPI application entrypoint for manifestrun service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..graph import DependencyCycleError
from ..messages import describe_failure
from ..models import ManifestInfo, RunOutcome
from ..orchestrator import Orchestrator
from ..providers import ProviderError


class ManifestRef(BaseModel):
    provider: str
    name: str


class ManifestStatus(BaseModel):
    id: str
    provider: str
    name: str
    weight: Optional[int] = None
    component: Optional[ManifestRef] = None
    is_stub: bool = False
    applicable: bool = False
    blocked_by: List[str] = []


class ManifestListResponse(BaseModel):
    manifests: List[ManifestStatus]


class FailureDetail(BaseModel):
    kind: str
    manifest: str
    blocked_by: List[str] = []
    message: str


class RunResponse(BaseModel):
    status: str
    completed: List[str]
    failure: Optional[FailureDetail] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _to_status(info: ManifestInfo) -> ManifestStatus:
    return ManifestStatus(
        id=info.key.id,
        provider=info.provider,
        name=info.name,
        weight=info.weight,
        component=(
            ManifestRef(provider=info.component.provider, name=info.component.name)
            if info.component is not None
            else None
        ),
        is_stub=info.is_stub,
        applicable=bool(info.applicable),
        blocked_by=[key.id for key in info.blocked_by],
    )


def _to_run_response(outcome: RunOutcome) -> RunResponse:
    completed = [key.id for key in outcome.completed]
    if outcome.success or outcome.failure is None:
        return RunResponse(status="ok", completed=completed)
    failure = outcome.failure
    return RunResponse(
        status="failed",
        completed=completed,
        failure=FailureDetail(
            kind=failure.kind.value,
            manifest=failure.key.id,
            blocked_by=[key.id for key in failure.blocked_by],
            message=describe_failure(failure),
        ),
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing manifestrun operations."""

    app = FastAPI(title="manifestrun Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request so every request resolves afresh.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/manifests", response_model=ManifestListResponse)
    async def list_manifests(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ManifestListResponse:
        loop = asyncio.get_running_loop()
        order = await loop.run_in_executor(None, orchestrator.status)
        return ManifestListResponse(manifests=[_to_status(info) for info in order])

    @app.post("/run", response_model=RunResponse)
    async def run_manifests(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> RunResponse:
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, orchestrator.run)
        return _to_run_response(outcome)

    @app.exception_handler(DependencyCycleError)
    async def cycle_handler(
        _: Any, exc: DependencyCycleError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "cycle": [key.id for key in exc.cycle]},
        )

    @app.exception_handler(ProviderError)
    async def provider_error_handler(
        _: Any, exc: ProviderError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
