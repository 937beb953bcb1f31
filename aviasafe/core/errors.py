# aviasafe/core/errors.py
from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from aviasafe.services.stages import UnknownStageError
from aviasafe.services.storage import StorageError

log = logging.getLogger("aviasafe.errors")


def _expose_upstream() -> bool:
    return os.getenv("EXPOSE_UPSTREAM_ERRORS", "1") == "1"


# -----------------------------
# Trace / request id helpers
# -----------------------------
def _ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace_id for this request: request.state first,
    then the inbound X-Request-ID header, finally a new one.
    """
    val = getattr(request.state, "trace_id", None)
    if val:
        return str(val)

    v = request.headers.get("x-request-id")
    if not v:
        v = uuid.uuid4().hex
    request.state.trace_id = v
    return v


def error_body(message: str, **extra: Any) -> Dict[str, Any]:
    """Every error response is {"error": "<message>"} plus optional extra keys."""
    body: Dict[str, Any] = {"error": message}
    for k, v in extra.items():
        if v is not None:
            body[k] = v
    return body


def _respond(
    request: Request,
    status_code: int,
    message: str,
    headers: Optional[Dict[str, str]] = None,
    **extra: Any,
) -> JSONResponse:
    trace_id = _ensure_trace_id(request)
    out_headers = dict(headers or {})
    out_headers["X-Request-ID"] = trace_id
    return JSONResponse(
        status_code=status_code,
        headers=out_headers,
        content=jsonable_encoder(error_body(message, **extra)),
    )


# -----------------------------
# Install / register handlers
# -----------------------------
def register_exception_handlers(app: FastAPI) -> None:
    """
    Registers consistent JSON error handlers.
    Also ensures X-Request-ID header is present on error responses.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        status_code = int(exc.status_code)
        # detail may be a str or a dict carrying {"error": ..., extra keys}
        if isinstance(exc.detail, dict):
            extra = dict(exc.detail)
            message = str(extra.pop("error", "HTTP error"))
        else:
            extra = {}
            message = exc.detail if isinstance(exc.detail, str) else "HTTP error"

        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | trace_id=%s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            _ensure_trace_id(request),
            exc.detail,
        )
        headers = getattr(exc, "headers", None)
        return _respond(request, status_code, message, headers=headers, **extra)

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        log.warning(
            "ValidationError %s %s -> 422 | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
            errors,
        )
        return _respond(request, 422, "Validation failed.", details=errors)

    @app.exception_handler(UnknownStageError)
    async def unknown_stage_handler(request: Request, exc: UnknownStageError):
        log.warning("UnknownStage %s %s | value=%r", request.method, request.url.path, exc.value)
        return _respond(request, 400, str(exc))

    @app.exception_handler(SQLAlchemyError)
    async def store_exc_handler(request: Request, exc: SQLAlchemyError):
        log.exception(
            "Store error %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
        )
        message = str(getattr(exc, "orig", None) or exc) if _expose_upstream() else "Internal Server Error"
        return _respond(request, 500, message)

    @app.exception_handler(StorageError)
    async def storage_exc_handler(request: Request, exc: StorageError):
        log.error(
            "Storage error %s %s -> 500 | trace_id=%s | %s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
            exc,
        )
        message = str(exc) if _expose_upstream() else "Internal Server Error"
        return _respond(request, 500, message)

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        # Full traceback to server logs; generic message to client
        log.exception(
            "Unhandled exception %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            _ensure_trace_id(request),
        )
        return _respond(request, 500, "Internal Server Error")
