"""Test-only session verifier using a locally generated RSA keypair.

This module provides MockClerkVerifier for use in tests only.
It is NOT part of the runtime code and should not be imported in production.

The verifier runs the same claim validation as ClerkJwksVerifier
(decode_session_token), only the signing key source differs.
"""

import threading

from skillswap.auth.verifier import VerifiedSession, decode_session_token

DEFAULT_ISSUER = "https://clerk.skillswap.test"


class MockClerkVerifier:
    """Test session verifier using a locally generated RSA keypair.

    Usage:
        from tests.support.mock_verifier import MockClerkVerifier

        verifier = MockClerkVerifier()
        session = verifier.verify(token)

        # To mint tokens, use the private key:
        private_key = MockClerkVerifier.get_private_key()
    """

    # Class-level RSA keypair (generated once)
    _private_key: bytes | None = None
    _public_key: bytes | None = None
    _lock = threading.Lock()

    def __init__(
        self,
        issuer: str | None = DEFAULT_ISSUER,
        authorized_parties: list[str] | None = None,
    ):
        self.issuer = issuer
        self.authorized_parties = authorized_parties or []
        self._ensure_keypair()

    @classmethod
    def _ensure_keypair(cls) -> None:
        """Generate RSA keypair if not already generated."""
        with cls._lock:
            if cls._private_key is None:
                from cryptography.hazmat.primitives import serialization
                from cryptography.hazmat.primitives.asymmetric import rsa

                private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

                cls._private_key = private_key.private_bytes(
                    encoding=serialization.Encoding.PEM,
                    format=serialization.PrivateFormat.PKCS8,
                    encryption_algorithm=serialization.NoEncryption(),
                )
                cls._public_key = private_key.public_key().public_bytes(
                    encoding=serialization.Encoding.PEM,
                    format=serialization.PublicFormat.SubjectPublicKeyInfo,
                )

    @classmethod
    def get_private_key(cls) -> bytes:
        """Get the private key for signing tokens."""
        cls._ensure_keypair()
        assert cls._private_key is not None
        return cls._private_key

    @classmethod
    def get_public_key(cls) -> bytes:
        """Get the public key for verifying tokens."""
        cls._ensure_keypair()
        assert cls._public_key is not None
        return cls._public_key

    def verify(self, token: str) -> VerifiedSession:
        return decode_session_token(
            token,
            self.get_public_key(),
            issuer=self.issuer,
            authorized_parties=self.authorized_parties,
        )
