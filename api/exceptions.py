"""Exception handlers for the Kitchen CPQ API.

Routes let QuoteSession errors propagate; main.py registers these handlers
to turn them into JSON bodies of the form {"error", "detail", ...} where
the extra keys carry the structured fields of each workflow error.
"""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from models.errors import InvalidReferenceError, InvalidStateError, ValidationFailedError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, detail: str, **fields: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail, **fields})


async def invalid_reference_handler(request: Request, exc: InvalidReferenceError):
    """404: the customer, room, product, processing or fee doesn't exist."""
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        "Not Found",
        exc.message,
        entity=exc.entity,
        entity_id=exc.entity_id,
    )


async def invalid_state_handler(request: Request, exc: InvalidStateError):
    """409: the command exists but isn't allowed in the current phase."""
    return _error_response(
        status.HTTP_409_CONFLICT,
        "Invalid State",
        exc.message,
        command=exc.command,
        reason=exc.reason,
        phase=exc.phase,
    )


async def validation_failed_handler(request: Request, exc: ValidationFailedError):
    """422: a workflow rule rejected the command.

    The body names the rule and the reason shown to the operator, e.g.
    rule "can_advance_from_product" with "Add at least one product...".
    """
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation Failed",
        exc.message,
        rule=exc.rule,
        reason=exc.reason,
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """422 for pydantic errors raised while building models inside a route."""
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation Error",
        "The request data failed validation",
        validation_errors=exc.errors(include_url=False, include_context=False),
    )


async def value_error_handler(request: Request, exc: ValueError):
    """400 for values the quote engine refuses (negative fee, zero quantity...)."""
    return _error_response(status.HTTP_400_BAD_REQUEST, "Invalid Value", str(exc), type="ValueError")


async def runtime_error_handler(request: Request, exc: RuntimeError):
    # Undo/redo entries that can't be applied end up here
    logger.error(f"Runtime error on {request.method} {request.url.path}: {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Runtime Error", str(exc), type="RuntimeError"
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """500 for anything unexpected; the traceback is logged, never returned."""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred",
        type=type(exc).__name__,
    )
