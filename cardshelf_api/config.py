"""Application configuration using pydantic-settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service settings
    service_host: str = Field(default="0.0.0.0", description="Host to bind the service")
    service_port: int = Field(default=5000, description="Port to bind the service")
    service_workers: int = Field(default=1, description="Number of worker processes")
    log_level: str = Field(default="info", description="Logging level")

    # Database - PostgreSQL connection
    database_url: str | None = Field(
        default=None,
        description="Full database connection URL (overrides individual fields)",
    )
    database_user: str = Field(default="cardshelf_dev", description="Database username")
    database_password: str = Field(default="dev_password", description="Database password")
    database_host: str = Field(default="localhost", description="Database host")
    database_port: int = Field(default=5432, description="Database port")
    database_name: str = Field(default="cardshelf_dev", description="Database name")
    database_pool_min_size: int = Field(
        default=2,
        description="Minimum database connection pool size",
    )
    database_pool_max_size: int = Field(
        default=10,
        description="Maximum database connection pool size",
    )
    database_ssl_mode: str = Field(
        default="prefer",
        description="SSL mode: disable, prefer, require",
    )

    # Token verification
    jwt_algorithm: str = Field(
        default="RS256",
        description="RS256 verifies against a JWKS endpoint, HS256 against secret_key",
    )
    secret_key: str = Field(
        default="development-secret-key-change-in-production",
        description="Shared secret for HS256 tokens (development and tests only)",
    )
    firebase_project_id: str | None = Field(
        default=None,
        description="Firebase project id; derives issuer, audience and JWKS URL when set",
    )
    jwks_url: str | None = Field(default=None, description="JWKS endpoint for RS256 tokens")
    jwt_issuer: str | None = Field(default=None, description="Expected JWT issuer (iss claim)")
    jwt_audience: str | None = Field(
        default=None, description="Expected JWT audience (aud claim)"
    )
    jwks_cache_seconds: int = Field(default=3600, description="How long fetched keys are reused")
    jwks_min_refresh_seconds: int = Field(
        default=60,
        description="Minimum gap between refreshes forced by an unknown key id",
    )
    token_verify_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound on a single token verification, including key fetches",
    )

    # Ownership
    template_owner_email: str = Field(
        default="template@cardshelf.local",
        description="Email of the reserved account shown to anonymous visitors",
    )

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)",
    )

    # Title suggestions
    rawg_api_key: str | None = Field(default=None, description="RAWG API key")
    rawg_base_url: str = Field(default="https://api.rawg.io/api", description="RAWG API base URL")
    suggestion_page_size: int = Field(default=10, description="Suggestions returned per query")
    suggestion_timeout_seconds: float = Field(default=5.0, description="RAWG request timeout")

    def get_allowed_origins(self) -> list[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def get_jwks_url(self) -> str | None:
        """JWKS endpoint, falling back to Google's securetoken keys for Firebase projects."""
        if self.jwks_url:
            return self.jwks_url
        if self.firebase_project_id:
            return FIREBASE_JWKS_URL
        return None

    def get_jwt_issuer(self) -> str | None:
        if self.jwt_issuer:
            return self.jwt_issuer
        if self.firebase_project_id:
            return f"https://securetoken.google.com/{self.firebase_project_id}"
        return None

    def get_jwt_audience(self) -> str | None:
        return self.jwt_audience or self.firebase_project_id

    def get_database_url(self) -> str:
        """
        Get PostgreSQL connection URL.

        If database_url is set, use it directly.
        Otherwise, construct from individual components.
        """
        from urllib.parse import quote_plus

        if self.database_url:
            return self.database_url

        # URL-encode username and password to handle special characters
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)

        ssl_param = ""
        if self.database_ssl_mode in ("require", "prefer"):
            ssl_param = f"?sslmode={self.database_ssl_mode}"

        return (
            f"postgresql://{user}:{password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}{ssl_param}"
        )


# Global settings instance
settings = Settings()
