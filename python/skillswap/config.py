"""Application settings loaded from environment variables.

Environment Configuration:
    SKILLSWAP_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: PostgreSQL connection string (required)
    CORS_ORIGINS: Comma-separated list of browser origins allowed to call the API

Clerk Configuration:
    CLERK_SECRET_KEY: Clerk Backend API secret key (sk_...). Optional in
        local/test; when absent every protected route answers 503.
    CLERK_API_URL: Clerk Backend API base URL
    CLERK_JWKS_URL: JWKS endpoint (defaults to {CLERK_API_URL}/jwks)
    CLERK_ISSUER: Expected session token issuer (Frontend API URL), optional
    CLERK_AUTHORIZED_PARTIES: Comma-separated list of allowed `azp` origins, optional
    CLERK_API_TIMEOUT_S: Timeout for calls to the Clerk Backend API

User Configuration:
    STARTING_COIN_BALANCE: Coins granted to a user on first sync
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_CLERK_API_URL = "https://api.clerk.com/v1"


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Validation rules:
    - DATABASE_URL is always required
    - CLERK_SECRET_KEY is required in staging and prod only
    - STARTING_COIN_BALANCE must not be negative
    """

    skillswap_env: Environment = Field(default=Environment.LOCAL, alias="SKILLSWAP_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]
    cors_origins: str | None = Field(default=None, alias="CORS_ORIGINS")

    # Clerk settings
    clerk_secret_key: str | None = Field(default=None, alias="CLERK_SECRET_KEY")
    clerk_api_url: str = Field(default=DEFAULT_CLERK_API_URL, alias="CLERK_API_URL")
    clerk_jwks_url: str | None = Field(default=None, alias="CLERK_JWKS_URL")
    clerk_issuer: str | None = Field(default=None, alias="CLERK_ISSUER")
    clerk_authorized_parties: str | None = Field(default=None, alias="CLERK_AUTHORIZED_PARTIES")
    clerk_api_timeout_s: float = Field(default=10.0, alias="CLERK_API_TIMEOUT_S")
    jwks_cache_ttl_s: int = Field(default=3600, alias="JWKS_CACHE_TTL_S")

    starting_coin_balance: int = Field(default=10, alias="STARTING_COIN_BALANCE")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure required settings are set for the current environment."""
        if self.skillswap_env in (Environment.STAGING, Environment.PROD):
            if not self.clerk_secret_key:
                raise ValueError(
                    f"CLERK_SECRET_KEY is required for SKILLSWAP_ENV={self.skillswap_env.value}"
                )

        if self.starting_coin_balance < 0:
            raise ValueError("STARTING_COIN_BALANCE must be >= 0")

        if self.clerk_api_timeout_s <= 0:
            raise ValueError("CLERK_API_TIMEOUT_S must be > 0")

        return self

    @property
    def clerk_configured(self) -> bool:
        """Whether a Clerk secret key is available."""
        return bool(self.clerk_secret_key and self.clerk_secret_key.strip())

    @property
    def normalized_clerk_api_url(self) -> str:
        """Return the Clerk API URL with trailing slash stripped."""
        return self.clerk_api_url.rstrip("/")

    @property
    def effective_clerk_jwks_url(self) -> str:
        """Return the JWKS URL, falling back to the Backend API JWKS endpoint."""
        return self.clerk_jwks_url or f"{self.normalized_clerk_api_url}/jwks"

    @property
    def normalized_clerk_issuer(self) -> str | None:
        """Return issuer with trailing slash stripped."""
        if self.clerk_issuer:
            return self.clerk_issuer.rstrip("/")
        return None

    @property
    def authorized_party_list(self) -> list[str]:
        """Parse comma-separated authorized parties into a list."""
        return _split_csv(self.clerk_authorized_parties)

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return _split_csv(self.cors_origins)


def _split_csv(value: str | None) -> list[str]:
    if value:
        return [item.strip().rstrip("/") for item in value.split(",") if item.strip()]
    return []


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
