"""API middleware components."""

from src.api.middleware.error_handler import (
    error_handler_middleware,
    validation_exception_handler,
)
from src.api.middleware.logging import LoggingMiddleware
from src.api.middleware.upload_limit import UploadSizeLimitMiddleware

__all__ = [
    "LoggingMiddleware",
    "UploadSizeLimitMiddleware",
    "error_handler_middleware",
    "validation_exception_handler",
]
