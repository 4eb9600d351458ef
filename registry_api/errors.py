"""
HTTP error types and their JSend mappings.

The data layer raises these; the handlers registered by ``register_handlers``
turn them into ``fail`` (client mistakes) or ``error`` (everything else)
envelopes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .responses import jsend_error, jsend_fail

logger = logging.getLogger(__name__)


class HttpError(Exception):
    """Error carrying the HTTP status it should be reported with."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class NotFoundError(HttpError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(404, message)


class BadRequestError(HttpError):
    def __init__(self, message: str = "Bad request"):
        super().__init__(400, message)


# ----------------------------------------------------------------
# Exception handlers
# ----------------------------------------------------------------

async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    if isinstance(exc, (NotFoundError, BadRequestError)):
        body = jsend_fail({"error": exc.message})
    else:
        body = jsend_error(exc.message)
    return JSONResponse(status_code=exc.status, content=body)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for e in exc.errors():
        loc = ".".join(str(part) for part in e.get("loc", ()) if part != "query")
        messages.append(f"{loc}: {e.get('msg')}" if loc else e.get("msg"))
    return JSONResponse(
        status_code=400,
        content=jsend_fail({"error": "; ".join(messages) or "Invalid request"}),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=jsend_error("Internal Server Error"))


def register_handlers(app: FastAPI) -> None:
    """Attach the JSend error handlers to ``app``."""
    app.add_exception_handler(HttpError, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
