"""API response envelope helpers and exception handlers.

All API responses use a consistent envelope:
- Success: { "success": true, "message": "...", "data": ... }
- Error: { "success": false, "message": "...", "error": { "code": "E_...", "request_id": "..." } }

The request_id is included in error responses for debugging and support.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from skillswap.errors import ApiError, ApiErrorCode
from skillswap.logging import get_logger, get_request_id

logger = get_logger(__name__)


def success_response(data: Any, message: str | None = None) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap.
        message: Optional human-readable status message.

    Returns:
        Dict with "success" flag, optional "message" and "data" key.
    """
    envelope: dict[str, Any] = {"success": True}
    if message:
        envelope["message"] = message
    envelope["data"] = data
    return envelope


def error_response(
    code: ApiErrorCode, message: str, request_id: str | None = None
) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        code: The error code enum value.
        message: Human-readable error message.
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with "success": false, "message" and an "error" object.
    """
    if request_id is None:
        request_id = get_request_id()

    error = {"code": code.value}
    if request_id:
        error["request_id"] = request_id

    return {"success": False, "message": message, "error": error}


def error_json_response(code: ApiErrorCode, message: str, status_code: int) -> JSONResponse:
    """Create a JSON error response."""
    return JSONResponse(status_code=status_code, content=error_response(code, message))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return proper JSON response."""
    if exc.status_code >= 500:
        logger.error(
            "api_error",
            code=exc.code.value,
            error_message=exc.message,
            detail=exc.detail,
        )
    return error_json_response(exc.code, exc.message, exc.status_code)


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle FastAPI HTTPException and return proper JSON response."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        401: ApiErrorCode.E_UNAUTHENTICATED,
        404: ApiErrorCode.E_NOT_FOUND,
        405: ApiErrorCode.E_INVALID_REQUEST,
        409: ApiErrorCode.E_CONFLICT,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    message = str(exc.detail) if exc.detail else "An error occurred"
    return error_json_response(code, message, exc.status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error=str(exc))

    return error_json_response(ApiErrorCode.E_INTERNAL, "Internal server error", 500)
