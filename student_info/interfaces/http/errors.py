"""Любая ошибка превращается в общий конверт ответа.

Доменные ошибки несут своё сообщение. Всё неожиданное отдаётся как 500,
подробности в поле error только в development.
"""
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...config import settings
from ...domain.errors import (
    Conflict,
    Forbidden,
    InvalidOperation,
    InvalidState,
    NotFound,
    ServerError,
    StudentInfoError,
    Unauthenticated,
    ValidationError,
)

logger = structlog.get_logger()

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (Unauthenticated, 401),
    (Forbidden, 403),
    (NotFound, 404),
    (Conflict, 409),
    (InvalidState, 400),
    (InvalidOperation, 400),
    (ServerError, 500),
)


def status_for(exc: StudentInfoError) -> int:
    for cls, code in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return code
    return 500


def error_response(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Geçersiz veri"
    first = errors[0]
    # loc начинается с "body"/"query"/"path"
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    msg = first.get("msg", "Geçersiz veri")
    return f"{field}: {msg}" if field else msg


async def domain_error_handler(request: Request, exc: StudentInfoError):
    status_code = status_for(exc)
    logger.info("request_failed", path=request.url.path, error=type(exc).__name__, status_code=status_code)
    return error_response(status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, _validation_message(exc))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"{request.url.path} endpoint'i bulunamadı"
    elif exc.status_code == 405:
        message = "Bu HTTP yöntemi desteklenmiyor"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limited", path=request.url.path, limit=str(exc.detail))
    return error_response(429, "Çok fazla istek gönderildi, lütfen daha sonra tekrar deneyin")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return error_response(500, "Sunucu hatası", str(exc) if settings.is_development else None)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StudentInfoError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
