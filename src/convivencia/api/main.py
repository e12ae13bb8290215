"""
Convivencia API

HTTP surface over the case service: open cases, move them through stages,
record milestones, and list urgent cases for dashboards.

Run:
    uvicorn convivencia.api.main:create_app --factory
"""
from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import EngineSettings, load_settings
from ..exceptions import (
    BackwardTransitionNotAllowed,
    CaseClosed,
    CaseNotFound,
    ConcurrentModification,
    ConvivenciaError,
    DeadlineCalculationError,
    GradualityGateBlocked,
    InvalidMilestoneDate,
    InvalidSeverity,
    InvalidStage,
    MilestoneNotFound,
)
from ..logging_config import configure_logging
from ..repository import JsonFileCaseRepository
from ..service import CaseService
from .routes import cases, urgency
from .schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

# First match along the exception's MRO wins; anything else is a 500
ERROR_STATUS: dict[type, int] = {
    CaseNotFound: 404,
    MilestoneNotFound: 404,
    CaseClosed: 409,
    ConcurrentModification: 409,
    InvalidSeverity: 422,
    InvalidStage: 422,
    InvalidMilestoneDate: 422,
    GradualityGateBlocked: 422,
    BackwardTransitionNotAllowed: 422,
    DeadlineCalculationError: 422,
}


def status_for(error: ConvivenciaError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 500


async def convivencia_error_handler(request: Request, exc: ConvivenciaError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed: %s",
        exc,
        extra={"case_id": exc.case_id, "error_code": exc.code},
    )
    content = exc.to_dict()
    content["request_id"] = getattr(request.state, "request_id", "unknown")
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    service: Optional[CaseService] = None,
    settings: Optional[EngineSettings] = None,
) -> FastAPI:
    """
    Build the API application.

    Args:
        service: Case service to expose; built from settings when omitted
        settings: Engine settings; loaded from YAML/env when omitted
    """
    settings = settings or load_settings()
    service = service or CaseService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_format)
        logger.info(
            "Convivencia API %s started (%d open cases)",
            __version__, len(service.repository.list_open()),
        )
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title="Convivencia API",
        description="""
**Disciplinary case deadline and stage engine for Chilean schools.**

Tracks each case (expediente) from opening to closure, enforcing the
statutory deadline per severity and the expulsion graduality gate.

## Quick Start

1. `POST /cases` - Open a case
2. `POST /cases/{id}/transitions` - Move it through the procedure
3. `GET /alerts` - Cases at or past their deadline
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.settings = settings

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "%s %s -> %d",
            request.method, request.url.path, response.status_code,
            extra={"duration_ms": round((time.time() - start_time) * 1000, 2)},
        )
        return response

    app.add_exception_handler(ConvivenciaError, convivencia_error_handler)

    app.include_router(cases.router)
    app.include_router(urgency.router)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        """Health check endpoint."""
        storage = "json" if isinstance(service.repository, JsonFileCaseRepository) else "memory"
        return HealthResponse(
            status="healthy",
            version=__version__,
            storage=storage,
            open_cases=len(service.repository.list_open()),
            allow_backward_transitions=service.machine.allow_backward_transitions,
        )

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
