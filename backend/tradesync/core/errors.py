"""
Error taxonomy and the JSON error envelope shared by all three services.

Every error leaves a service as::

    {"status": "error", "message": "...", "timestamp": "..."}

plus ``errors`` for validation failures, and ``detail`` / ``stack`` for
unhandled exceptions when ``DEBUG`` is on.

Source failures (a broker that is down) are recovered inside the aggregator
and never reach these handlers. Duplicate trades are skipped by the
repository and are not errors at all.
"""

import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradesync.core.config import settings

logger = logging.getLogger(__name__)


class TradeSyncError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceUnavailableError(TradeSyncError):
    """A broker source could not be read (network error, non-2xx, bad body)."""

    status_code = 502

    def __init__(self, broker: str, reason: str):
        super().__init__(f"Broker {broker} unavailable: {reason}")
        self.broker = broker
        self.reason = reason


class AuthError(TradeSyncError):
    status_code = 401


class BrokerScopeError(TradeSyncError):
    status_code = 403


class NotFoundError(TradeSyncError):
    status_code = 404


class ConflictError(TradeSyncError):
    status_code = 400


class InsightProviderError(TradeSyncError):
    """The text-generation call failed; fatal to the analytics request."""

    status_code = 502


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_body(message: str, **extra) -> dict:
    body = {"status": "error", "message": message, "timestamp": _now_iso()}
    body.update(extra)
    return body


def _validation_errors(exc: RequestValidationError) -> list[dict]:
    out = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        out.append({"path": ".".join(loc), "message": err.get("msg", "")})
    return out


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error envelope on an application."""

    @app.exception_handler(TradeSyncError)
    async def tradesync_error_handler(request: Request, exc: TradeSyncError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("Validation error", errors=_validation_errors(exc)),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
        extra = {}
        if settings.DEBUG:
            extra["detail"] = str(exc)
            extra["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal Server Error", **extra),
        )
