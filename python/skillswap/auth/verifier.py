"""Session token verification.

Provides:
- VerifiedSession: Identity extracted from a verified session token
- SessionVerifier: Protocol for session verification
- ClerkJwksVerifier: Verifier using Clerk's JWKS (used in all environments)
- decode_session_token: Claim validation shared by every verifier

Note: The test-only verifier is in tests/support/mock_verifier.py
"""

import threading
from dataclasses import dataclass
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    ImmatureSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
    MissingRequiredClaimError,
    PyJWKClientError,
)

from skillswap.errors import AuthUnavailableError, UnauthenticatedError
from skillswap.logging import get_logger

logger = get_logger(__name__)

# Clock skew allowance in seconds
CLOCK_SKEW_SECONDS = 60

REQUIRED_CLAIMS = ["exp", "iat", "sub", "sid"]


@dataclass(frozen=True)
class VerifiedSession:
    """A session the identity provider vouches for.

    Attributes:
        user_id: Clerk user ID (`sub` claim), never empty.
        session_id: Clerk session ID (`sid` claim), never empty.
    """

    user_id: str
    session_id: str


class SessionVerifier(Protocol):
    """Protocol for session token verification."""

    def verify(self, token: str) -> VerifiedSession:
        """Verify a session token.

        Raises:
            UnauthenticatedError: Token is invalid, expired, or malformed.
            AuthUnavailableError: Provider unconfigured or unreachable.
        """
        ...


def decode_session_token(
    token: str,
    key: Any,
    *,
    issuer: str | None = None,
    authorized_parties: list[str] | None = None,
) -> VerifiedSession:
    """Decode a Clerk session JWT and validate its claims.

    Validates:
    - RS256 signature against `key`
    - exp / nbf with +/-60s clock skew
    - exp, iat, sub, sid present
    - iss matches `issuer` when one is configured
    - azp is in `authorized_parties` when both are present

    Raises:
        UnauthenticatedError: On any token problem.
    """
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            issuer=issuer,
            leeway=CLOCK_SKEW_SECONDS,
            options={
                "require": REQUIRED_CLAIMS,
                "verify_aud": False,
            },
        )
    except ExpiredSignatureError as e:
        logger.warning("auth_failure", reason="expired_token")
        raise UnauthenticatedError("Token expired") from e
    except ImmatureSignatureError as e:
        logger.warning("auth_failure", reason="token_not_yet_valid")
        raise UnauthenticatedError("Token not yet valid") from e
    except InvalidSignatureError as e:
        logger.warning("auth_failure", reason="invalid_signature")
        raise UnauthenticatedError("Invalid token signature") from e
    except InvalidIssuerError as e:
        logger.warning("auth_failure", reason="invalid_issuer")
        raise UnauthenticatedError("Invalid token issuer") from e
    except MissingRequiredClaimError as e:
        logger.warning("auth_failure", reason="missing_claim", claim=e.claim)
        raise UnauthenticatedError(f"Invalid token: missing {e.claim}") from e
    except DecodeError as e:
        logger.warning("auth_failure", reason="decode_error", error=str(e))
        raise UnauthenticatedError("Invalid token format") from e
    except InvalidTokenError as e:
        logger.warning("auth_failure", reason="invalid_token", error=str(e))
        raise UnauthenticatedError("Invalid token") from e

    azp = payload.get("azp")
    if authorized_parties and azp and azp.rstrip("/") not in authorized_parties:
        logger.warning("auth_failure", reason="unauthorized_party", azp=azp)
        raise UnauthenticatedError("Invalid token: unauthorized party")

    sub = payload.get("sub")
    sid = payload.get("sid")
    if not isinstance(sub, str) or not sub or not isinstance(sid, str) or not sid:
        logger.warning("auth_failure", reason="invalid_subject")
        raise UnauthenticatedError("Invalid token: missing session identity")

    return VerifiedSession(user_id=sub, session_id=sid)


class ClerkJwksVerifier:
    """Production session verifier using Clerk's JWKS.

    Signing keys are fetched from the JWKS endpoint and cached; a token
    whose `kid` is not in the cache triggers one forced refresh.
    """

    def __init__(
        self,
        jwks_url: str,
        secret_key: str | None = None,
        issuer: str | None = None,
        authorized_parties: list[str] | None = None,
        cache_ttl: int = 3600,
        timeout_s: float = 10.0,
    ):
        """Initialize the Clerk JWKS verifier.

        Args:
            jwks_url: Full URL to the JWKS endpoint.
            secret_key: Clerk secret key, sent as a bearer token to the
                Backend API JWKS endpoint.
            issuer: Expected issuer (trailing slash will be stripped), optional.
            authorized_parties: Allowed `azp` origins, optional.
            cache_ttl: How long to cache JWKS keys in seconds.
            timeout_s: Timeout for JWKS fetches.
        """
        self.jwks_url = jwks_url
        self.issuer = issuer.rstrip("/") if issuer else None
        self.authorized_parties = [p.rstrip("/") for p in authorized_parties or []]
        self.cache_ttl = cache_ttl
        self.timeout_s = timeout_s
        self._headers = {"Authorization": f"Bearer {secret_key}"} if secret_key else None

        self._jwks_client: PyJWKClient | None = None
        self._jwks_lock = threading.Lock()

    def _new_jwks_client(self) -> PyJWKClient:
        return PyJWKClient(
            self.jwks_url,
            cache_keys=True,
            lifespan=self.cache_ttl,
            headers=self._headers,
            timeout=self.timeout_s,
        )

    def _get_jwks_client(self) -> PyJWKClient:
        """Get or create the JWKS client with lazy initialization."""
        with self._jwks_lock:
            if self._jwks_client is None:
                self._jwks_client = self._new_jwks_client()
            return self._jwks_client

    def _refresh_jwks(self) -> None:
        """Force refresh of JWKS keys (called on kid miss)."""
        with self._jwks_lock:
            self._jwks_client = self._new_jwks_client()

    def verify(self, token: str) -> VerifiedSession:
        """Verify a Clerk session token.

        Raises:
            UnauthenticatedError: Token is invalid.
            AuthUnavailableError: JWKS fetch failed.
        """
        try:
            signing_key = self._get_signing_key(token)
        except PyJWKClientError as e:
            logger.warning("auth_failure", reason="jwks_unavailable", error=str(e))
            raise AuthUnavailableError() from e
        except InvalidTokenError as e:
            # Header could not be parsed or carries a malformed kid
            logger.warning("auth_failure", reason="decode_error", error=str(e))
            raise UnauthenticatedError("Invalid token format") from e

        return decode_session_token(
            token,
            signing_key.key,
            issuer=self.issuer,
            authorized_parties=self.authorized_parties,
        )

    def _get_signing_key(self, token: str) -> Any:
        """Get the signing key for the token, with retry on kid miss.

        Raises:
            PyJWKClientError: If JWKS fetch fails.
            UnauthenticatedError: If kid not found after refresh.
        """
        client = self._get_jwks_client()

        try:
            return client.get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            if not _is_kid_miss(e):
                raise

        logger.info("jwks_refresh", reason="kid_miss")
        self._refresh_jwks()
        client = self._get_jwks_client()

        try:
            return client.get_signing_key_from_jwt(token)
        except PyJWKClientError as e:
            # Fetch failures propagate so verify() reports the outage
            if not _is_kid_miss(e):
                raise
            logger.warning("auth_failure", reason="kid_not_found")
            raise UnauthenticatedError("Invalid token: signing key not found") from e


def _is_kid_miss(error: PyJWKClientError) -> bool:
    """True when the JWKS was fetched but holds no key for the token's kid."""
    return "Unable to find" in str(error)


class UnconfiguredVerifier:
    """Verifier used when no Clerk secret key is configured.

    Every call fails with AuthUnavailableError so callers can tell
    "not configured" apart from "bad credentials".
    """

    def __init__(self, reason: str = "Clerk authentication is not configured"):
        self.reason = reason

    def verify(self, token: str) -> VerifiedSession:
        raise AuthUnavailableError(self.reason)
