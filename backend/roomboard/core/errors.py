"""
Domain errors raised by the store and request dependencies, and the
FastAPI handlers that turn them into ErrorResponse bodies.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from roomboard.schemas.responses import ErrorResponse

logger = logging.getLogger(__name__)


class RoomboardError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RoomboardError):
    """Mutation payload violates a domain rule."""

    status_code = 400


class AuthenticationError(RoomboardError):
    """Caller did not identify itself."""

    status_code = 401


class ForbiddenError(RoomboardError):
    """Caller may not touch this record."""

    status_code = 403


class NotFoundError(RoomboardError):
    status_code = 404


class ConflictError(RoomboardError):
    """Store write rejected by a constraint."""

    status_code = 409


async def roomboard_error_handler(request: Request, exc: RoomboardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Unhandled domain error on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    body = ErrorResponse(error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    body = ErrorResponse(error="; ".join(messages) or "Invalid request")
    return JSONResponse(status_code=422, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain and request validation error handlers to the app."""
    app.add_exception_handler(RoomboardError, roomboard_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
