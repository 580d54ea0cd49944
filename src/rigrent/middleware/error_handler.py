"""Exception handlers: every error leaves the API as JSON.

Framework errors keep the ``{"detail": ...}`` shape. Sweep errors use the
``{"error": ...}`` shape schedulers already parse.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rigrent.rentals.errors import AuthorizationError, SweepError

logger = structlog.get_logger()

UNAUTHORIZED_MESSAGE = "Unauthorized - Cron only"


async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": "Validation error", "errors": exc.errors()})


async def _unauthorized(request: Request, exc: AuthorizationError) -> JSONResponse:
    # The reason is logged, never returned to the caller.
    logger.warning("sweep_unauthorized", path=request.url.path, reason=str(exc))
    return JSONResponse(status_code=401, content={"error": UNAUTHORIZED_MESSAGE})


async def _sweep_failed(request: Request, exc: SweepError) -> JSONResponse:
    logger.error("sweep_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def setup_error_handlers(app: FastAPI) -> None:
    """Register the handlers. Starlette picks the most specific class, so
    AuthorizationError wins over its SweepError base."""
    app.add_exception_handler(StarletteHTTPException, _http_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(AuthorizationError, _unauthorized)  # type: ignore[arg-type]
    app.add_exception_handler(SweepError, _sweep_failed)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled)
