"""
JSON error rendering.

Every error body is a flat object with an ``error`` key. HTTP exceptions
raised with a dict ``detail`` (see ``thumbnailer.exceptions``) are sent as-is;
framework-raised ones are wrapped. Anything unhandled is logged and turned
into a 500 by ``error_envelope_middleware`` so the process never dies on a
request.
"""
import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from thumbnailer.exceptions import InvalidRequest, NoFileProvided

logger = logging.getLogger(__name__)

_DEFAULT_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": _DEFAULT_MESSAGES.get(exc.status_code, str(exc.detail))}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    # A `file` field that is not an upload counts as no file at all.
    if any(err.get("loc", ())[-1:] == ("file",) for err in exc.errors()):
        return await http_exception_handler(request, NoFileProvided())
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
    return await http_exception_handler(request, InvalidRequest(details))


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": "Rate limit exceeded", "details": str(exc.detail)},
    )


async def error_envelope_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
