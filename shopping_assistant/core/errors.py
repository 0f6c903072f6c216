"""Error taxonomy and exception handling utilities."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("shopping.errors")


class AssistantError(Exception):
    """Base class for every error the assistant raises on purpose."""


class ValidationError(AssistantError):
    """Malformed or oversized input, rejected before any work is done."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(AssistantError):
    """A referenced conversation or item identifier does not exist."""


class ProviderError(AssistantError):
    """The completion provider was unreachable, refused, or answered garbage."""


class RetrievalError(AssistantError):
    """The knowledge index could not be queried."""


class IngestionError(AssistantError):
    """The bulk ingestion pass failed; the index contents are undefined."""


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render request validation failures as structured 400 responses."""

    if isinstance(exc, RequestValidationError):
        details = [
            {"field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"), "message": error.get("msg")}
            for error in exc.errors()
        ]
        message = "; ".join(f"{item['field']}: {item['message']}" for item in details) or "Invalid request"
    else:
        message = getattr(exc, "message", str(exc))
        details = getattr(exc, "details", None)

    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, message)
    content: dict[str, Any] = {"error": "validation_error", "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=400, content=content)


async def not_found_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("Not found on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "message": str(exc) or "Resource not found"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Something unexpected happened. Please try again later.",
        },
    )
