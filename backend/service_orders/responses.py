"""JSON envelope helpers: ``{success, data?, error?}`` for every API response."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .domain_errors import DomainError, format_validation_errors, store_error_message

logger = logging.getLogger(__name__)


def success_response(data: Any = None, *, status_code: int = 200, **extra: Any) -> JSONResponse:
    """Render a success envelope; ``extra`` keys with a None value are dropped."""
    payload: dict[str, Any] = {"success": True}
    if data is not None:
        payload["data"] = data
    payload.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def error_response(message: str, *, status_code: int, code: str | None = None, details: Any = None) -> JSONResponse:
    payload: dict[str, Any] = {"success": False, "error": message}
    if code is not None:
        payload["code"] = code
    if details is not None:
        payload["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def build_domain_error_response(exc: DomainError) -> JSONResponse:
    """Render DomainError as an error envelope with its stable code."""
    return error_response(exc.message, status_code=exc.http_status, code=exc.code, details=exc.details)


async def _handle_domain_error(_: Request, exc: DomainError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("domain_error code=%s message=%s", exc.code, exc.message)
    return build_domain_error_response(exc)


async def _handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        format_validation_errors(list(exc.errors())),
        status_code=400,
        code="VALIDATION_ERROR",
    )


async def _handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    message = store_error_message(exc)
    logger.error("Store error on %s %s: %s", request.method, request.url.path, message)
    return error_response(message, status_code=500, code="STORE_ERROR")


async def _handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(str(exc.detail), status_code=exc.status_code)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response("Internal server error", status_code=500, code="INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(SQLAlchemyError, _handle_store_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
