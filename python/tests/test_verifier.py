"""Unit tests for session verifiers.

Tests the ClerkJwksVerifier (with a mocked JWKS client), the shared claim
validation and the UnconfiguredVerifier.
"""

from unittest.mock import MagicMock, patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jwt.exceptions import PyJWKClientError

from skillswap.auth.verifier import (
    ClerkJwksVerifier,
    UnconfiguredVerifier,
    VerifiedSession,
    decode_session_token,
)
from skillswap.errors import ApiError, ApiErrorCode
from tests.helpers import create_test_clerk_user_id, mint_session_token, token_with_header
from tests.support.mock_verifier import DEFAULT_ISSUER

ISSUER = "https://clerk.skillswap.test"


@pytest.fixture(scope="module")
def rsa_keypair():
    """Generate an RSA keypair for testing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return private_bytes, private_key.public_key()


@pytest.fixture
def verifier():
    """Create a verifier with test configuration."""
    return ClerkJwksVerifier(
        jwks_url="https://api.clerk.test/v1/jwks",
        secret_key="sk_test_123",
        issuer=ISSUER + "/",
        authorized_parties=["http://localhost:3000/"],
    )


def _mock_jwks(verifier, public_key=None, side_effect=None):
    """Patch the verifier's JWKS client; returns the mocked PyJWKClient."""
    mock_jwk_client = MagicMock()
    if side_effect is not None:
        mock_jwk_client.get_signing_key_from_jwt.side_effect = side_effect
    else:
        mock_signing_key = MagicMock()
        mock_signing_key.key = public_key
        mock_jwk_client.get_signing_key_from_jwt.return_value = mock_signing_key
    return patch.object(verifier, "_get_jwks_client", return_value=mock_jwk_client)


class TestClerkJwksVerifier:
    """Unit tests for ClerkJwksVerifier. All JWKS fetches are mocked."""

    def test_valid_token(self, verifier, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        user_id = create_test_clerk_user_id()
        token = mint_session_token(
            user_id, session_id="sess_abc", issuer=ISSUER, private_key=private_bytes
        )

        with _mock_jwks(verifier, public_key):
            session = verifier.verify(token)

        assert session == VerifiedSession(user_id=user_id, session_id="sess_abc")

    def test_issuer_trailing_slash_normalized(self, verifier):
        assert verifier.issuer == ISSUER
        assert verifier.authorized_parties == ["http://localhost:3000"]

    def test_secret_key_sent_to_jwks_endpoint(self, verifier):
        assert verifier._headers == {"Authorization": "Bearer sk_test_123"}

    def test_wrong_issuer(self, verifier, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token(
            "user_1", issuer="https://evil.test", private_key=private_bytes
        )

        with _mock_jwks(verifier, public_key), pytest.raises(ApiError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.message == "Invalid token issuer"

    def test_expired_token(self, verifier, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token(
            "user_1", issuer=ISSUER, private_key=private_bytes, expires_in=-3600
        )

        with _mock_jwks(verifier, public_key), pytest.raises(ApiError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.status_code == 401

    def test_invalid_signature(self, verifier, rsa_keypair):
        _, public_key = rsa_keypair
        # Signed by the MockClerkVerifier key, checked against another key
        token = mint_session_token("user_1", issuer=ISSUER)

        with _mock_jwks(verifier, public_key), pytest.raises(ApiError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_jwks_unavailable_returns_503(self, verifier):
        token = mint_session_token("user_1", issuer=ISSUER)
        error = PyJWKClientError("Fail to fetch data from the url, err: timed out")

        with _mock_jwks(verifier, side_effect=error), pytest.raises(ApiError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_AUTH_UNAVAILABLE
        assert exc_info.value.status_code == 503

    def test_kid_miss_refreshes_once(self, verifier, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("user_1", issuer=ISSUER, private_key=private_bytes)
        signing_key = MagicMock()
        signing_key.key = public_key
        side_effect = [
            PyJWKClientError('Unable to find a signing key that matches: "new"'),
            signing_key,
        ]

        with (
            _mock_jwks(verifier, side_effect=side_effect),
            patch.object(verifier, "_refresh_jwks") as refresh,
        ):
            session = verifier.verify(token)

        refresh.assert_called_once()
        assert session.user_id == "user_1"

    def test_kid_not_found_after_refresh(self, verifier):
        token = mint_session_token("user_1", issuer=ISSUER)
        miss = PyJWKClientError('Unable to find a signing key that matches: "new"')

        with (
            _mock_jwks(verifier, side_effect=[miss, miss]),
            patch.object(verifier, "_refresh_jwks"),
            pytest.raises(ApiError) as exc_info,
        ):
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED

    def test_jwks_unavailable_on_refresh_returns_503(self, verifier):
        """An outage during the kid-miss refresh is not a bad token."""
        token = mint_session_token("user_1", issuer=ISSUER)
        side_effect = [
            PyJWKClientError('Unable to find a signing key that matches: "new"'),
            PyJWKClientError("Fail to fetch data from the url, err: timed out"),
        ]

        with (
            _mock_jwks(verifier, side_effect=side_effect),
            patch.object(verifier, "_refresh_jwks"),
            pytest.raises(ApiError) as exc_info,
        ):
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_AUTH_UNAVAILABLE
        assert exc_info.value.status_code == 503

    def test_non_string_kid_is_unauthenticated(self, verifier):
        """A malformed header is rejected before any JWKS fetch."""
        token = token_with_header({"alg": "RS256", "typ": "JWT", "kid": 123})

        with pytest.raises(ApiError) as exc_info:
            verifier.verify(token)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert exc_info.value.status_code == 401

    def test_garbage_token_is_unauthenticated(self, verifier):
        with pytest.raises(ApiError) as exc_info:
            verifier.verify("not-a-jwt")

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED


class TestDecodeSessionToken:
    """Claim validation shared by production and test verifiers."""

    def test_missing_sub(self, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("user_1", private_key=private_bytes, sub=None)

        with pytest.raises(ApiError) as exc_info:
            decode_session_token(token, public_key)

        assert exc_info.value.code == ApiErrorCode.E_UNAUTHENTICATED
        assert "sub" in exc_info.value.message

    def test_empty_sub(self, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("", private_key=private_bytes)

        with pytest.raises(ApiError):
            decode_session_token(token, public_key)

    def test_issuer_optional(self, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("user_1", issuer="https://anything", private_key=private_bytes)

        session = decode_session_token(token, public_key, issuer=None)

        assert session.user_id == "user_1"

    def test_token_without_azp_passes_party_check(self, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("user_1", private_key=private_bytes, azp=None)

        session = decode_session_token(
            token, public_key, authorized_parties=["https://skillswap.example"]
        )

        assert session.user_id == "user_1"

    def test_not_yet_valid(self, rsa_keypair):
        private_bytes, public_key = rsa_keypair
        token = mint_session_token("user_1", private_key=private_bytes, nbf=9_999_999_999)

        with pytest.raises(ApiError) as exc_info:
            decode_session_token(token, public_key, issuer=DEFAULT_ISSUER)

        assert exc_info.value.message == "Token not yet valid"


class TestUnconfiguredVerifier:
    def test_every_call_is_unavailable(self):
        verifier = UnconfiguredVerifier()

        with pytest.raises(ApiError) as exc_info:
            verifier.verify("anything")

        assert exc_info.value.code == ApiErrorCode.E_AUTH_UNAVAILABLE
        assert exc_info.value.status_code == 503
