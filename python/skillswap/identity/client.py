"""Clerk Backend API client.

Fetches the canonical profile for a Clerk user. Only the fields the user
sync needs are read: primary email, first/last name, username and avatar.

The client shares one httpx.Client created at startup, so calls reuse
pooled connections. Timeouts come from CLERK_API_TIMEOUT_S.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from skillswap.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClerkProfile:
    """Profile data owned by Clerk for one user."""

    user_id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    image_url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ClerkProfile":
        """Build a profile from a Clerk `GET /users/{id}` response body.

        The email is the address whose id matches primary_email_address_id;
        a user with no primary address has no email.
        """
        primary_id = data.get("primary_email_address_id")
        email = None
        for address in data.get("email_addresses") or []:
            if primary_id and address.get("id") == primary_id:
                email = address.get("email_address")
                break

        return cls(
            user_id=data.get("id", ""),
            email=email or None,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            username=data.get("username"),
            image_url=data.get("image_url") or None,
        )


class IdentityProviderError(Exception):
    """Identity provider request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class IdentityClientBase(ABC):
    """Abstract base class for identity provider profile clients."""

    @abstractmethod
    def get_user(self, user_id: str) -> ClerkProfile:
        """Fetch the provider profile for a user.

        Args:
            user_id: The Clerk user ID (session token `sub`).

        Returns:
            The user's ClerkProfile.

        Raises:
            IdentityProviderError: If the provider is unreachable or errors.
        """
        ...


class ClerkUsersClient(IdentityClientBase):
    """Production Clerk Backend API client.

    Uses httpx for HTTP operations against https://api.clerk.com/v1.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        secret_key: str,
        api_url: str = "https://api.clerk.com/v1",
        timeout_s: float = 10.0,
    ):
        """Initialize the Clerk users client.

        Args:
            http_client: Shared HTTP client (owned by the caller).
            secret_key: Clerk secret key (sk_...).
            api_url: Clerk Backend API base URL.
            timeout_s: Per-request timeout in seconds.
        """
        self._http = http_client
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s
        self._headers = {
            "Authorization": f"Bearer {secret_key}",
            "Accept": "application/json",
        }

    def get_user(self, user_id: str) -> ClerkProfile:
        """Fetch a user via `GET /users/{user_id}`."""
        url = f"{self._api_url}/users/{quote(user_id, safe='')}"

        try:
            response = self._http.get(url, headers=self._headers, timeout=self._timeout_s)
        except httpx.HTTPError as e:
            logger.warning("clerk_request_failed", operation="get_user", error=str(e))
            raise IdentityProviderError(f"Clerk request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(
                "clerk_request_failed",
                operation="get_user",
                status_code=response.status_code,
            )
            raise IdentityProviderError(
                f"Clerk get_user returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise IdentityProviderError("Clerk returned a non-JSON body") from e

        return ClerkProfile.from_api(data)
