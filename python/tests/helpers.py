"""Test helpers for authentication and common test operations.

Provides:
- Session token minting for test authentication
- Header generation for test requests
- Clerk user ID and API payload builders
"""

import base64
import json
import time
from uuid import uuid4

import jwt

from tests.support.mock_verifier import DEFAULT_ISSUER, MockClerkVerifier

DEFAULT_EXPIRES_IN = 60
DEFAULT_AZP = "http://localhost:3000"


def create_test_clerk_user_id() -> str:
    """Generate a unique Clerk-style user ID."""
    return f"user_{uuid4().hex[:24]}"


def create_test_session_id() -> str:
    """Generate a unique Clerk-style session ID."""
    return f"sess_{uuid4().hex[:24]}"


def mint_session_token(
    user_id: str,
    session_id: str | None = None,
    expires_in: int = DEFAULT_EXPIRES_IN,
    issuer: str = DEFAULT_ISSUER,
    private_key: bytes | None = None,
    headers: dict | None = None,
    **extra_claims,
) -> str:
    """Mint a Clerk-shaped session token.

    Args:
        user_id: The Clerk user ID to set as the `sub` claim.
        session_id: The `sid` claim (random if None).
        expires_in: Token validity in seconds from now.
        issuer: The `iss` claim value.
        private_key: Signing key (defaults to the MockClerkVerifier key).
        headers: Extra JWT headers (e.g. kid).
        **extra_claims: Additional claims; a None value removes the claim.

    Returns:
        A signed RS256 JWT string.
    """
    now = int(time.time())
    payload = {
        "sub": user_id,
        "sid": session_id or create_test_session_id(),
        "iss": issuer,
        "azp": DEFAULT_AZP,
        "iat": now,
        "nbf": now - 5,
        "exp": now + expires_in,
    }
    for key, value in extra_claims.items():
        if value is None:
            payload.pop(key, None)
        else:
            payload[key] = value

    key = private_key or MockClerkVerifier.get_private_key()
    return jwt.encode(payload, key, algorithm="RS256", headers=headers)


def mint_expired_token(user_id: str) -> str:
    """Mint a token that expired 1 hour ago."""
    return mint_session_token(user_id, expires_in=-3600)


def mint_token_with_bad_signature(user_id: str) -> str:
    """Mint a token signed with a different key (bad signature)."""
    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    other_key_bytes = other_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return mint_session_token(user_id, private_key=other_key_bytes)


def token_with_header(header: dict) -> str:
    """Assemble an unsigned token with an arbitrary header.

    jwt.encode validates headers, so malformed ones are built by hand.
    """

    def segment(value: dict) -> str:
        raw = json.dumps(value, separators=(",", ":")).encode()
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    payload = {"sub": "user_1", "sid": "sess_1", "iat": int(time.time())}
    return f"{segment(header)}.{segment(payload)}.c2lnbmF0dXJl"


def auth_headers(user_id: str, session_id: str | None = None) -> dict[str, str]:
    """Build Authorization headers carrying a valid session token."""
    token = mint_session_token(user_id, session_id=session_id)
    return {"Authorization": f"Bearer {token}"}


def clerk_user_payload(
    user_id: str,
    email: str | None = "ada@example.com",
    first_name: str | None = "Ada",
    last_name: str | None = "Lovelace",
    username: str | None = None,
    image_url: str | None = "https://img.clerk.com/ada.png",
) -> dict:
    """Build a Clerk Backend API `GET /users/{id}` response body."""
    email_addresses = []
    primary_id = None
    if email:
        primary_id = "idn_primary"
        email_addresses = [
            {"id": "idn_secondary", "email_address": "other@example.com"},
            {"id": primary_id, "email_address": email},
        ]

    return {
        "id": user_id,
        "object": "user",
        "username": username,
        "first_name": first_name,
        "last_name": last_name,
        "image_url": image_url,
        "primary_email_address_id": primary_id,
        "email_addresses": email_addresses,
    }
