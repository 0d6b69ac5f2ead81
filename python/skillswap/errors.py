"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Authentication errors (401)
    E_UNAUTHENTICATED = "E_UNAUTHENTICATED"

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"

    # Conflict errors (409)
    E_CONFLICT = "E_CONFLICT"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"

    # Server errors
    E_AUTH_UNAVAILABLE = "E_AUTH_UNAVAILABLE"  # 503
    E_UPSTREAM_ERROR = "E_UPSTREAM_ERROR"  # 500
    E_STORAGE_ERROR = "E_STORAGE_ERROR"  # 500
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_UNAUTHENTICATED: 401,
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_CONFLICT: 409,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_AUTH_UNAVAILABLE: 503,
    ApiErrorCode.E_UPSTREAM_ERROR: 500,
    ApiErrorCode.E_STORAGE_ERROR: 500,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
        detail: Optional internal detail (logged, never returned for 5xx)
    """

    def __init__(self, code: ApiErrorCode, message: str, detail: str | None = None):
        self.code = code
        self.message = message
        self.detail = detail
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class UnauthenticatedError(ApiError):
    """Missing, malformed, expired or otherwise invalid credentials."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(ApiErrorCode.E_UNAUTHENTICATED, message)


class AuthUnavailableError(ApiError):
    """Identity provider not configured or unreachable."""

    def __init__(self, message: str = "Authentication service unavailable"):
        super().__init__(ApiErrorCode.E_AUTH_UNAVAILABLE, message)


class NotFoundError(ApiError):
    """Resource not found error."""

    def __init__(self, code: ApiErrorCode = ApiErrorCode.E_NOT_FOUND, message: str = "Not found"):
        super().__init__(code, message)


class ConflictError(ApiError):
    """Concurrent write lost a uniqueness race; safe to retry."""

    def __init__(self, message: str = "Conflict", detail: str | None = None):
        super().__init__(ApiErrorCode.E_CONFLICT, message, detail)


class UpstreamError(ApiError):
    """Identity provider reachable but returned an error."""

    def __init__(self, message: str = "Identity provider error", detail: str | None = None):
        super().__init__(ApiErrorCode.E_UPSTREAM_ERROR, message, detail)


class StorageError(ApiError):
    """Database read or write failed."""

    def __init__(self, message: str = "Storage error", detail: str | None = None):
        super().__init__(ApiErrorCode.E_STORAGE_ERROR, message, detail)
