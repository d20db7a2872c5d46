"""
Case Reasoning Engine FastAPI application.

Usage:
    uvicorn casereason.api.app:app

The lens registry is built once per application and shared read-only by
every request. Handlers are synchronous; the engine performs no I/O.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..cli.pipeline import error_envelope
from ..config import EngineSettings, get_settings
from ..errors import CaseInputError
from ..lenses.registry import build_default_registry
from ..log import configure_logging
from .routes import router


logger = logging.getLogger(__name__)


def create_app(settings: Optional[EngineSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description="Deterministic case readiness and strategy analysis",
        version=__version__,
    )
    app.state.settings = settings
    app.state.registry = build_default_registry()

    @app.exception_handler(CaseInputError)
    async def case_input_error_handler(request: Request, exc: CaseInputError):
        logger.info("rejected case input on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=422,
            content=error_envelope(exc.reason, exc.source),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {"loc": (), "msg": "invalid request"}
        location = ".".join(str(part) for part in first.get("loc", ()))
        return JSONResponse(
            status_code=422,
            content=error_envelope(first.get("msg", "invalid request"), location or None),
        )

    @app.get("/health")
    def health_check():
        return {"ok": True, "data": {"status": "ok", "lenses": len(app.state.registry)}}

    app.include_router(router)
    return app


app = create_app()
