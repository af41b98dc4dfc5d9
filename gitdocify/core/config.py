"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


_DEFAULT_SESSION_SECRET = "dev-insecure-session-secret"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # Public URLs
    # APP_BASE_URL: where the browser lands after sign-in.
    # API_BASE_URL: where this service is reachable (OAuth redirect URIs are built from it).
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Frontend base URL (post-login redirect target)"
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Public base URL of this API"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./gitdocify.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled (prevents stale connections)"
    )

    # Sessions
    # SESSION_SECRET signs session cookies and OAuth state. Default is insecure.
    session_secret: str = Field(
        default=_DEFAULT_SESSION_SECRET,
        description="HMAC secret for session tokens (override in production)"
    )
    session_max_age_days: int = Field(
        default=30,
        description="Session lifetime in days"
    )
    session_cookie_name: str = Field(default="gitdocify_session")

    # OAuth identity providers
    github_client_id: str = Field(default="", description="GitHub OAuth app client id")
    github_client_secret: str = Field(default="", description="GitHub OAuth app client secret")
    google_client_id: str = Field(default="", description="Google OAuth client id")
    google_client_secret: str = Field(default="", description="Google OAuth client secret")

    # GitHub REST API
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL"
    )
    # Minimum spacing between outbound GitHub calls, shared by the whole process.
    github_request_interval: float = Field(
        default=1.0,
        description="Seconds between consecutive GitHub API requests"
    )

    # Generation (LiteLLM)
    gemini_api_key: str = Field(
        default="",
        description="API key for the generative-AI provider (empty = generation disabled)"
    )
    generation_model: str = Field(
        default="gemini/gemini-1.5-flash",
        description="LiteLLM model string used for documentation and titles"
    )
    generation_api_base: str = Field(
        default="",
        description="Base URL for the model provider (optional, for custom endpoints)"
    )
    generation_timeout_seconds: int = Field(
        default=120,
        description="Wall-clock limit for a single model call"
    )

    # Rate Limiting
    # RATE_LIMIT_PER_MINUTE: max requests per client per minute (0 disables).
    rate_limit_per_minute: int = Field(
        default=60,
        description="Maximum requests per client per minute"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    def configured_providers(self) -> List[str]:
        """OAuth providers with both a client id and a secret."""
        providers = []
        if self.github_client_id and self.github_client_secret:
            providers.append("github")
        if self.google_client_id and self.google_client_secret:
            providers.append("google")
        return providers

    def missing_required_settings(self) -> List[str]:
        """Names of required settings that are empty or still default."""
        missing = []
        if self.uses_default_session_secret:
            missing.append("SESSION_SECRET")
        if not self.github_client_id:
            missing.append("GITHUB_CLIENT_ID")
        if not self.github_client_secret:
            missing.append("GITHUB_CLIENT_SECRET")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        return missing

    @property
    def uses_default_session_secret(self) -> bool:
        return not self.session_secret or self.session_secret == _DEFAULT_SESSION_SECRET

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure
        defaults or generation cannot work. In development, returns silently
        and main.py logs warnings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.uses_default_session_secret:
            errors.append(
                "SESSION_SECRET is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if not self.gemini_api_key:
            errors.append("GEMINI_API_KEY is empty. Documentation generation is disabled.")

        if not self.configured_providers():
            errors.append(
                "No OAuth provider configured. "
                "Set GITHUB_CLIENT_ID/GITHUB_CLIENT_SECRET or GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        # Allow reading from environment variables with different case
        case_sensitive = False


# Global settings instance
settings = Settings()
