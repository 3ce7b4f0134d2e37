"""Translation of errors into RFC 9457 problem documents"""

import logging
from http import HTTPStatus
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.logging import get_security_logger
from ..domain.errors import DomainError, ErrorCode


logger = logging.getLogger(__name__)
security_logger = get_security_logger()

PROBLEM_CONTENT_TYPE = "application/problem+json"

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.AUTHENTICATION_ERROR: 401,
    ErrorCode.TOKEN_EXPIRED: 401,
    ErrorCode.TOKEN_INVALID: 401,
    ErrorCode.TOKEN_REUSED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INSUFFICIENT_CAPACITY: 409,
    ErrorCode.BOOKING_NOT_ALLOWED: 409,
    ErrorCode.INVALID_STATE_TRANSITION: 409,
    ErrorCode.ALREADY_CANCELLED: 200,
}


def problem_type(code: str) -> str:
    return f"urn:problem-type:{code.lower()}"


def problem_response(
    request: Request,
    status: int,
    code: str,
    detail: str,
    errors: Optional[list[dict[str, Any]]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build a ``{type, title, status, detail, instance, errors?}`` response"""
    body: dict[str, Any] = {
        "type": problem_type(code),
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.url.path,
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(body, status_code=status, headers=headers, media_type=PROBLEM_CONTENT_TYPE)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status = STATUS_BY_CODE.get(exc.code, 400)
    headers = None
    if status == 401:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.code == ErrorCode.FORBIDDEN:
        security_logger.warning(
            "Forbidden",
            extra={
                "path": request.url.path,
                "method": request.method,
                "user_id": getattr(request.state, "subject_id", None),
                "reason": exc.message,
            },
        )
    return problem_response(request, status, exc.code.value, exc.message, exc.errors, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTPStatus(exc.status_code).name
    return problem_response(request, exc.status_code, code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return problem_response(request, 422, ErrorCode.VALIDATION_ERROR.value, "Request validation failed", errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    return problem_response(request, 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
