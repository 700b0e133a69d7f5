"""
Error response shape shared by every endpoint.

Automation tools expect `{"error": "..."}` bodies rather than FastAPI's default
`{"detail": ...}`, so exception handlers here re-shape both `HTTPException`
and request validation errors.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        # Drop the leading "body" so messages name the payload field.
        loc = [str(x) for x in err.get("loc", ()) if x != "body"]
        where = ".".join(loc)
        msg = str(err.get("msg") or "invalid value")
        parts.append(f"{where}: {msg}" if where else msg)
    return "; ".join(parts) or "Invalid request body."


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc)
    logger.info("request_validation_failed error=%s", message)
    return error_response(status.HTTP_400_BAD_REQUEST, message)


@contextmanager
def handler_boundary(event: str, **fields: object) -> Iterator[None]:
    """
    Turn unexpected failures inside a handler into a logged 400 `{"error": ...}`.

    `HTTPException`s pass through untouched.
    """
    try:
        yield
    except StarletteHTTPException:
        raise
    except Exception as exc:
        context = " ".join(f"{k}={v}" for k, v in fields.items())
        logger.exception("%s %s", event, context)
        raise StarletteHTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc) or exc.__class__.__name__,
        ) from exc


def install(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
