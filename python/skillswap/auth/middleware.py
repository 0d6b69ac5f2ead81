"""Authentication middleware for FastAPI.

Provides:
- AuthMiddleware: Global middleware for bearer session token verification
- get_identity: Dependency for accessing the authenticated identity
"""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from skillswap.errors import ApiError, ApiErrorCode, UnauthenticatedError
from skillswap.identity.provider import IdentityProvider, Unconfigured
from skillswap.logging import get_logger, user_id_var
from skillswap.responses import error_json_response

logger = get_logger(__name__)

AUTHORIZATION_HEADER = "authorization"

# Paths that don't require authentication
PUBLIC_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


@dataclass(frozen=True)
class AuthIdentity:
    """Authenticated caller identity.

    Attributes:
        external_user_id: The Clerk user ID (session token sub claim).
        session_id: The Clerk session ID (session token sid claim).
    """

    external_user_id: str
    session_id: str


class AuthMiddleware(BaseHTTPMiddleware):
    """Authentication middleware for FastAPI.

    Order of checks:
    1. Skip if public path or CORS preflight
    2. Fail with 503 if the identity provider is not configured
    3. Extract and parse bearer token
    4. Verify token via the provider's SessionVerifier
    5. Attach AuthIdentity to request state

    Persisted state is never touched here.
    """

    def __init__(self, app: ASGIApp, provider: IdentityProvider):
        """Initialize the auth middleware.

        Args:
            app: The ASGI application.
            provider: Identity provider state resolved at startup.
        """
        super().__init__(app)
        self.provider = provider

    async def dispatch(self, request: Request, call_next) -> JSONResponse:
        """Process the request through auth checks."""
        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        if isinstance(self.provider, Unconfigured):
            logger.warning(
                "auth_failure",
                reason="provider_unconfigured",
                request_path=request.url.path,
            )
            return error_json_response(
                ApiErrorCode.E_AUTH_UNAVAILABLE, self.provider.reason, 503
            )

        token, error_response_obj = self._extract_bearer_token(request)
        if error_response_obj:
            return error_response_obj

        try:
            session = self.provider.verifier.verify(token)
        except ApiError as e:
            return error_json_response(e.code, e.message, e.status_code)

        request.state.identity = AuthIdentity(
            external_user_id=session.user_id,
            session_id=session.session_id,
        )
        user_id_var.set(session.user_id)

        return await call_next(request)

    def _extract_bearer_token(self, request: Request) -> tuple[str, JSONResponse | None]:
        """Extract bearer token from Authorization header.

        Returns:
            Tuple of (token, error_response). Token is empty string if error.
        """
        auth_header = request.headers.get(AUTHORIZATION_HEADER)

        if not auth_header:
            logger.warning(
                "auth_failure",
                reason="missing_header",
                request_path=request.url.path,
            )
            return "", error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Unauthorized - Missing authentication token",
                401,
            )

        # Bearer prefix is case-insensitive
        if not auth_header.lower().startswith("bearer "):
            logger.warning(
                "auth_failure",
                reason="invalid_header_format",
                request_path=request.url.path,
            )
            return "", error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Invalid authorization header format",
                401,
            )

        token = auth_header[7:].strip()

        if not token:
            logger.warning(
                "auth_failure",
                reason="empty_token",
                request_path=request.url.path,
            )
            return "", error_json_response(
                ApiErrorCode.E_UNAUTHENTICATED,
                "Invalid authorization header format",
                401,
            )

        return token, None


def get_identity(request: Request) -> AuthIdentity:
    """FastAPI dependency to get the authenticated identity.

    Raises:
        UnauthenticatedError: If identity is not set (middleware didn't run or path is public).
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthenticatedError("Authentication required")
    return identity


# Type alias for dependency injection
IdentityDep = Depends(get_identity)
