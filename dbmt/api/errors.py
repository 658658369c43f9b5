"""Error responses.

Every failure on the HTTP surface is reported as ``400 {"error": message}``.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import DBMTError, Unauthorized
from .auth import get_bearer_token

logger = logging.getLogger(__name__)


def error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise unexpected exceptions from a handler as DBMTError."""
    try:
        yield
    except DBMTError:
        raise
    except Exception as e:
        logger.exception(f"{action} failed")
        raise DBMTError(str(e)) from e


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            # loc holds a character offset, not a field
            parts.append(error.get("msg", "JSON decode error"))
            continue
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Install the 400 handlers on an app."""

    @app.exception_handler(DBMTError)
    async def handle_service_error(request: Request, exc: DBMTError):
        logger.info(f"{request.method} {request.url.path} -> 400: {exc}")
        return error_response(str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        # The body is parsed before dependencies run, so auth is checked here too
        if request.app.state.authenticator.resolve(get_bearer_token(request)) is None:
            message = str(Unauthorized())
        else:
            message = _describe_validation_error(exc)
        logger.info(f"{request.method} {request.url.path} -> 400: {message}")
        return error_response(message)
