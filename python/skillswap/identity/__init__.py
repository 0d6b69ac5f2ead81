"""Identity provider (Clerk) integration.

Provides:
- ClerkUsersClient for fetching provider profiles
- Configured / Unconfigured provider states resolved at startup
"""

from skillswap.identity.client import (
    ClerkProfile,
    ClerkUsersClient,
    IdentityClientBase,
    IdentityProviderError,
)
from skillswap.identity.provider import (
    Configured,
    IdentityProvider,
    Unconfigured,
    create_identity_provider,
)

__all__ = [
    "ClerkProfile",
    "ClerkUsersClient",
    "Configured",
    "IdentityClientBase",
    "IdentityProvider",
    "IdentityProviderError",
    "Unconfigured",
    "create_identity_provider",
]
