"""
Error handling and sanitization middleware

Sanitize error messages to prevent internal information leakage
- Credential-looking errors → generic message
- Stack traces → logged only, not returned to client
- Carrier errors → kept as-is (upstream status and body are safe to expose)
"""
import logging
import traceback
from typing import Union

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shipping_quotes.core.config import settings

logger = logging.getLogger(__name__)

SERVER_FAILURE = "Server failure"

# Patterns that indicate internal/sensitive error information
SENSITIVE_PATTERNS = [
    "password",
    "secret",
    "credential",
    "authorization",
    "bearer ",
    "traceback",
    "file \"",
    "/site-packages/",
]


def is_sensitive_error(message: str) -> bool:
    """Check if error message contains sensitive information."""
    message_lower = message.lower()
    return any(pattern in message_lower for pattern in SENSITIVE_PATTERNS)


def sanitize_error_message(error: Union[str, Exception]) -> str:
    """
    Sanitize an error message for safe client exposure.

    Args:
        error: The error string or exception

    Returns:
        Sanitized error message safe for client
    """
    if isinstance(error, str):
        message = error
    else:
        message = str(error) or type(error).__name__

    # In debug mode, return full message
    if settings.DEBUG:
        return message

    # Check for sensitive patterns
    if is_sensitive_error(message):
        return "An internal error occurred. Please try again later."

    # Truncate very long messages
    if len(message) > 200:
        return message[:200] + "..."

    return message


def server_failure_response(error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": SERVER_FAILURE, "detail": sanitize_error_message(error)},
    )


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch unhandled exceptions and sanitize error responses.

    - In production: Returns sanitized error, logs full details
    - In development: Returns full error for debugging
    """

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Let FastAPI handle HTTPExceptions normally
            raise
        except Exception as e:
            # Log full error with traceback
            logger.error(
                f"Unhandled exception: {type(e).__name__}: {str(e)}\n"
                f"Path: {request.url.path}\n"
                f"Method: {request.method}\n"
                f"Traceback:\n{traceback.format_exc()}"
            )
            return server_failure_response(e)
