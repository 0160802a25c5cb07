"""
Domain Exception Handler.

Translates :class:`EmotionsAppError` subclasses raised by services into JSON
responses carrying the status code declared on the exception class.
"""

from fastapi import Request
from fastapi.responses import JSONResponse

from emotions_app.core.exceptions import EmotionsAppError, RateLimitExceededError
from emotions_app.core.logging_config import get_logger

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: EmotionsAppError) -> JSONResponse:
    """
    Render a domain error as ``{"detail": ..., "error_type": ...}``.

    Args:
        request: The HTTP request that caused the exception
        exc: The domain exception that was raised

    Returns:
        JSONResponse with the exception's status code
    """
    logger.info(
        f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.detail}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": exc.status_code,
            "error_type": exc.error_type,
        },
    )

    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_type": exc.error_type},
        headers=headers,
    )
