"""
Exception handlers translating pipeline errors into HTTP responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.metrics import AI_FAILURES_TOTAL
from task_organizer.errors import (
    AIErrorReason,
    AIServiceError,
    ConfigurationError,
    ParseError,
)

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ConfigurationError)
    async def _configuration_handler(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error on {request.url.path}: {exc}")
        if isinstance(exc, AIServiceError):
            AI_FAILURES_TOTAL.labels(reason=exc.reason.value).inc()
        return JSONResponse(
            status_code=503,
            content={"detail": str(exc), "reason": AIErrorReason.UNCONFIGURED.value
                     if isinstance(exc, AIServiceError) else "configuration"},
        )

    @app.exception_handler(AIServiceError)
    async def _ai_service_handler(request: Request, exc: AIServiceError):
        logger.error(f"AI service error ({exc.reason.value}) on {request.url.path}: {exc.message}")
        AI_FAILURES_TOTAL.labels(reason=exc.reason.value).inc()
        return JSONResponse(status_code=502, content={"detail": exc.message, "reason": exc.reason.value})

    @app.exception_handler(ParseError)
    async def _parse_handler(request: Request, exc: ParseError):
        logger.error(f"Malformed AI output on {request.url.path}: {exc}")
        AI_FAILURES_TOTAL.labels(reason="malformed_output").inc()
        return JSONResponse(status_code=502, content={"detail": str(exc), "reason": "malformed_output"})

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
