"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Widths of the database columns backing the configurable length limits.
# A limit may be lowered through the environment but never raised past these.
TITLE_COLUMN_LENGTH = 500
TAG_COLUMN_LENGTH = 100
COLLECTION_NAME_COLUMN_LENGTH = 200


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, validation_alias="DB_MAX_OVERFLOW")

    # Auth0 - shared with frontend (VITE_ prefix for Vite exposure)
    auth0_domain: str = Field(default="", validation_alias="VITE_AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="VITE_AUTH0_AUDIENCE")
    auth0_client_id: str = Field(default="", validation_alias="VITE_AUTH0_CLIENT_ID")

    # Development mode - bypasses auth for local development (shared with frontend)
    dev_mode: bool = Field(default=False, validation_alias="VITE_DEV_MODE")

    # Frontend URL - login redirects for SiteBar toolbar clients
    frontend_url: str = Field(
        default="http://localhost:3000",
        validation_alias="VITE_FRONTEND_URL",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Field length limits - shared with frontend (VITE_ prefix for Vite exposure)
    max_title_length: int = Field(
        default=TITLE_COLUMN_LENGTH, validation_alias="VITE_MAX_TITLE_LENGTH",
    )
    max_description_length: int = Field(
        default=2000, validation_alias="VITE_MAX_DESCRIPTION_LENGTH",
    )
    max_tag_length: int = Field(
        default=TAG_COLUMN_LENGTH, validation_alias="VITE_MAX_TAG_LENGTH",
    )
    max_collection_name_length: int = Field(
        default=COLLECTION_NAME_COLUMN_LENGTH,
        validation_alias="VITE_MAX_COLLECTION_NAME_LENGTH",
    )

    @model_validator(mode="after")
    def validate_length_limits(self) -> "Settings":
        """Reject length limits wider than the columns that store the values."""
        caps = {
            "VITE_MAX_TITLE_LENGTH": (self.max_title_length, TITLE_COLUMN_LENGTH),
            "VITE_MAX_TAG_LENGTH": (self.max_tag_length, TAG_COLUMN_LENGTH),
            "VITE_MAX_COLLECTION_NAME_LENGTH": (
                self.max_collection_name_length, COLLECTION_NAME_COLUMN_LENGTH,
            ),
        }
        for name, (limit, column_length) in caps.items():
            if limit > column_length:
                raise ValueError(
                    f"{name}={limit} exceeds the database column width of {column_length}.",
                )
        return self

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so it may only be combined
        with a database running on the local machine.
        """
        if not self.dev_mode:
            return self

        try:
            hostname = urlparse(self.database_url).hostname or ""
        except ValueError:
            hostname = ""

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
