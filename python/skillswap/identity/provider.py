"""Identity provider configuration.

The Clerk integration is resolved once at startup into one of two states:

- Configured: holds the session verifier, the users client and the
  shared httpx.Client they use.
- Unconfigured: no secret key was provided; carries the reason.

The resolved state is stored on app.state and injected into the auth
middleware and route dependencies. It is read-only after startup.
"""

from dataclasses import dataclass

import httpx

from skillswap.auth.verifier import ClerkJwksVerifier, SessionVerifier, UnconfiguredVerifier
from skillswap.config import Settings
from skillswap.identity.client import ClerkUsersClient, IdentityClientBase
from skillswap.logging import get_logger

logger = get_logger(__name__)

UNCONFIGURED_MESSAGE = (
    "Clerk authentication is not configured. Please check your environment variables."
)


@dataclass(frozen=True)
class Configured:
    """Clerk is usable."""

    verifier: SessionVerifier
    users: IdentityClientBase
    http_client: httpx.Client | None = None

    def close(self) -> None:
        if self.http_client is not None:
            self.http_client.close()


@dataclass(frozen=True)
class Unconfigured:
    """Clerk is not usable; every protected request answers 503."""

    reason: str = UNCONFIGURED_MESSAGE

    @property
    def verifier(self) -> SessionVerifier:
        return UnconfiguredVerifier(self.reason)

    def close(self) -> None:
        pass


IdentityProvider = Configured | Unconfigured


def create_identity_provider(settings: Settings) -> IdentityProvider:
    """Resolve the identity provider from settings.

    Args:
        settings: Application settings.

    Returns:
        Configured when CLERK_SECRET_KEY is set, Unconfigured otherwise.
    """
    if not settings.clerk_configured:
        logger.warning("clerk_unconfigured", reason="CLERK_SECRET_KEY not set")
        return Unconfigured()

    secret_key = settings.clerk_secret_key.strip()  # type: ignore[union-attr]
    http_client = httpx.Client(
        timeout=httpx.Timeout(settings.clerk_api_timeout_s, connect=5.0),
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
    )

    verifier = ClerkJwksVerifier(
        jwks_url=settings.effective_clerk_jwks_url,
        secret_key=secret_key,
        issuer=settings.normalized_clerk_issuer,
        authorized_parties=settings.authorized_party_list,
        cache_ttl=settings.jwks_cache_ttl_s,
        timeout_s=settings.clerk_api_timeout_s,
    )
    users = ClerkUsersClient(
        http_client,
        secret_key=secret_key,
        api_url=settings.normalized_clerk_api_url,
        timeout_s=settings.clerk_api_timeout_s,
    )

    logger.info(
        "clerk_configured",
        jwks_url=settings.effective_clerk_jwks_url,
        issuer_check=settings.normalized_clerk_issuer is not None,
        authorized_parties=settings.authorized_party_list,
    )
    return Configured(verifier=verifier, users=users, http_client=http_client)
