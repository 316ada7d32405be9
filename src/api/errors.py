"""Exception handlers: the single boundary where errors become responses.

Operational domain errors answer with their own status and message.
Anything else is logged and, outside development, downgraded to a generic
message without leaking internals.
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import DomainError, InternalError, NotFoundError, ValidationError
from utils.config import get_settings

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went very wrong!"


def _is_development(request: Request) -> bool:
    # same settings provider the routes resolve, overrides included
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    try:
        return provider().is_development
    except ValueError:
        return False


def _error_response(
    request: Request,
    error: DomainError,
    original: Exception | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    original = original or error
    body = {"status": error.status, "message": error.message}

    if _is_development(request):
        body["error"] = {"type": type(original).__name__, "detail": str(original)}
        body["stack"] = "".join(
            traceback.format_exception(type(original), original, original.__traceback__)
        )
    elif not error.is_operational:
        body["message"] = GENERIC_MESSAGE

    headers = dict(headers or {})
    if error.status_code == 401:
        headers.setdefault("WWW-Authenticate", "Bearer")
    return JSONResponse(status_code=error.status_code, content=body, headers=headers or None)


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error": exc.message, "type": type(exc).__name__},
        )
    return _error_response(request, exc)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return _error_response(request, ValidationError(f"Invalid input data. {'. '.join(messages)}"), exc)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        error = NotFoundError(f"Can't find {request.url.path} on this server!")
    else:
        error = DomainError(str(exc.detail))
        error.status_code = exc.status_code
    return _error_response(request, error, exc, headers=getattr(exc, "headers", None))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return _error_response(request, InternalError(str(exc) or GENERIC_MESSAGE), exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
