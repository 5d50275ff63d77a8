"""Error handling middleware and exception handlers.

Every error response has the shape::

    {"error": "<message>", "code": "<CODE>", "request_id": "<id>"}

``error`` is always a plain string so browser clients can show it directly.
"""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from src.application.dtos.ingestion import ProcessingStep
from src.application.services.ingestion import IngestionError
from src.commons.telemetry.logger import get_logger
from src.domain.exceptions import (
    DomainException,
    InvalidEntityIdException,
    InvalidUploadException,
    UploadTooLargeException,
)

logger = get_logger(__name__)

_STEP_ERROR_CODES: dict[ProcessingStep, str] = {
    ProcessingStep.UPLOADING_SOURCE: "STORE_UPLOAD_ERROR",
    ProcessingStep.TRANSCODING: "TRANSCODE_ERROR",
    ProcessingStep.DELETING: "DELETE_ERROR",
}


def build_error_response(
    request_id: str,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response."""
    content: dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": request_id,
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _handle_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Map an exception to its JSON error response."""
    request_id = _request_id(request)

    if isinstance(exc, (InvalidEntityIdException, InvalidUploadException)):
        logger.warning(f"Validation error: {exc}")
        return build_error_response(
            request_id,
            "VALIDATION_ERROR",
            str(exc),
            status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, UploadTooLargeException):
        logger.warning(f"Upload rejected: {exc}")
        return build_error_response(
            request_id,
            "UPLOAD_TOO_LARGE",
            str(exc),
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            {"max_size_bytes": exc.max_size_bytes},
        )

    if isinstance(exc, IngestionError):
        logger.error(f"Ingestion error at step {exc.step.value}: {exc}")
        return build_error_response(
            request_id,
            _STEP_ERROR_CODES.get(exc.step, "INGESTION_ERROR"),
            str(exc),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"step": exc.step.value},
        )

    if isinstance(exc, DomainException):
        logger.warning(f"Domain error: {exc}")
        return build_error_response(
            request_id,
            "DOMAIN_ERROR",
            str(exc),
            status.HTTP_400_BAD_REQUEST,
        )

    logger.exception(f"Unexpected error: {exc}")
    return build_error_response(
        request_id,
        "INTERNAL_ERROR",
        "An unexpected error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        response = _handle_exception(request, exc)
        response.headers["X-Request-ID"] = _request_id(request)
        return response


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Report malformed requests as 400 in the common error shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    logger.warning(f"Request validation failed: {message}")
    return build_error_response(
        _request_id(request),
        "VALIDATION_ERROR",
        message,
        status.HTTP_400_BAD_REQUEST,
    )
