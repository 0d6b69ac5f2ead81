"""Authentication module.

This module provides:
- Session token verification (Clerk JWKS verifier), exported here
- Auth middleware for FastAPI and the get_identity dependency,
  imported from skillswap.auth.middleware (it depends on skillswap.identity,
  which itself builds verifiers from this package)

Note: The test-only verifier is in tests/support/mock_verifier.py
"""

from skillswap.auth.verifier import (
    ClerkJwksVerifier,
    SessionVerifier,
    UnconfiguredVerifier,
    VerifiedSession,
    decode_session_token,
)

__all__ = [
    "ClerkJwksVerifier",
    "SessionVerifier",
    "UnconfiguredVerifier",
    "VerifiedSession",
    "decode_session_token",
]
