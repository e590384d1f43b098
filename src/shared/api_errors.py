"""HTTP mapping for domain and collaborator exceptions.

    ValidationError     → 400
    ObjectNotFoundError → 404
    UpstreamError       → 503 (retryable)
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from shared.errors import UpstreamError

logger = structlog.get_logger(__name__)


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    message = exc.args[0] if exc.args else "Not found"
    return JSONResponse(status_code=404, content={"error": str(message)})


async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("upstream_error", path=request.url.path, source=exc.source, error=exc.message)
    return JSONResponse(status_code=503, content={"error": exc.message, "retryable": True})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(UpstreamError, _upstream_error)
