"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, auth middleware, CORS, request-id
middleware, and routes.

Identity Provider:
- Resolved once from settings into Configured or Unconfigured
- Stored on app.state and injected into AuthMiddleware and route dependencies
- Its shared httpx.Client is closed at shutdown

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)

Order of registration:
1. AuthMiddleware (runs third)
2. CORSMiddleware (runs second, so preflights and 401s carry CORS headers)
3. RequestIDMiddleware (runs first - outermost)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from skillswap.api.routes import create_api_router
from skillswap.auth.middleware import AuthMiddleware
from skillswap.config import get_settings
from skillswap.errors import ApiError, ApiErrorCode
from skillswap.identity.provider import IdentityProvider, create_identity_provider
from skillswap.logging import configure_logging, get_logger
from skillswap.middleware.request_id import RequestIDMiddleware
from skillswap.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)

# Configure structured logging at import time
configure_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the identity provider's HTTP resources on shutdown."""
    yield

    app.state.identity_provider.close()
    logger.info("identity_provider_closed")


def create_app(
    identity_provider: IdentityProvider | None = None,
    skip_auth_middleware: bool = False,
    starting_coin_balance: int | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        identity_provider: Optional pre-built provider state (for testing).
            Resolved from settings when None.
        skip_auth_middleware: If True, skip adding auth middleware (for testing).
        starting_coin_balance: Optional override of STARTING_COIN_BALANCE.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="SkillSwap API",
        description="Backend API for SkillSwap - Clerk-authenticated user sync",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if identity_provider is None:
        identity_provider = create_identity_provider(settings)
    app.state.identity_provider = identity_provider
    app.state.starting_coin_balance = (
        settings.starting_coin_balance if starting_coin_balance is None else starting_coin_balance
    )

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request"),
        )

    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(AuthMiddleware, provider=identity_provider)
        logger.info(
            "auth_middleware_enabled",
            env=settings.skillswap_env.value,
            provider=type(identity_provider).__name__,
        )

    cors_origins = settings.cors_origin_list
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
            expose_headers=["X-Request-ID"],
        )
        logger.info("cors_middleware_enabled", origins=cors_origins)

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.
    This ensures every response includes X-Request-ID, including auth failures.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
