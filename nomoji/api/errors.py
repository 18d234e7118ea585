"""Exception handlers mapping errors onto the {"success": false, "error"} envelope."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nomoji.config import get_settings
from nomoji.services.analytics import Analytics
from nomoji.services.config_store import UnknownPresetError
from nomoji.services.kv_store import StorageUnavailableError
from nomoji.services.rate_limit import RateLimitExceededError

logger = logging.getLogger(__name__)


def success_envelope(data: Any = None, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def error_response(
    status_code: int, error: str, headers: dict[str, str] | None = None, **extra: Any
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, **extra},
        headers=headers,
    )


def describe_validation_error(exc: RequestValidationError) -> str:
    """One-line description of the first validation failure."""
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid JSON body."
    if not errors:
        return "Invalid configuration format."
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    if location:
        return f"Invalid configuration format: {location}: {message}"
    return f"Invalid configuration format: {message}"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(exc)
    logger.info("Request rejected: path=%s error=%s", request.url.path, message)
    return error_response(400, message)


async def unknown_preset_handler(request: Request, exc: UnknownPresetError) -> JSONResponse:
    return error_response(
        400, "Invalid preset name. Must be 'strict', 'moderate', or 'relaxed'."
    )


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    decision = exc.decision
    headers = decision.headers()
    headers["Retry-After"] = str(decision.retry_after)
    return error_response(429, str(exc), headers=headers, retryAfter=decision.retry_after)


async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    logger.error(
        "Storage failure: request_id=%s path=%s error=%s", request_id, request.url.path, exc
    )
    Analytics().track_error(endpoint=request.url.path, error=str(exc), status_code=500)
    message = str(exc) if get_settings().profile.expose_error_details else "Internal server error"
    return error_response(500, message, requestId=request_id)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(UnknownPresetError, unknown_preset_handler)
    app.add_exception_handler(RateLimitExceededError, rate_limit_exceeded_handler)
    app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)
