"""FastAPI dependencies for route handlers.

Common dependencies like database sessions and the identity provider client.
"""

from fastapi import Request

from skillswap.db.session import get_db
from skillswap.errors import AuthUnavailableError
from skillswap.identity.client import IdentityClientBase
from skillswap.identity.provider import Configured

__all__ = ["get_db", "get_identity_client", "get_starting_coin_balance"]


def get_starting_coin_balance(request: Request) -> int:
    """Coins granted to a user on first sync (from settings at startup)."""
    return request.app.state.starting_coin_balance


def get_identity_client(request: Request) -> IdentityClientBase:
    """Get the Clerk users client from app state.

    The identity provider is resolved once in create_app and stored on
    app.state; it is read-only afterwards.

    Raises:
        AuthUnavailableError: Clerk is not configured.
    """
    provider = request.app.state.identity_provider
    if not isinstance(provider, Configured):
        raise AuthUnavailableError(provider.reason)
    return provider.users
