"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the behavior of the original service

Collaborators:
  - api/main.py: reads settings for CORS, pool and startup validation
  - container.py: decides in-memory vs Postgres adapters, billing and mail
  - identity/auth_users.py: JWT secret and TTL

Constraints:
  - Lives in the infrastructure edge, NOT in domain/application
  - No business logic: pure configuration

Notes:
  - Singleton via lru_cache
  - JWT_SECRET has an insecure default for local runs; production rejects it
  - Unsigned Stripe webhooks are only accepted with an explicit flag
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_JWT_SECRETS = {"change_this_secret", "changeme", "change-me", "secret"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        database_url: PostgreSQL connection string
        app_env: Application environment (development/test/local/production)
        allowed_origins: Comma-separated CORS origins
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        jwt_secret: Secret for signing access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes (default: 7 days)
        stripe_secret_key: Stripe API key (sk_...)
        stripe_price_id: Price used for the subscription checkout
        stripe_webhook_secret: Signing secret for webhook verification
        stripe_webhook_allow_unsigned: Insecure test mode for unsigned events
        fake_billing: Use the in-process billing double (tests/local)
        public_base_url: Fallback origin for checkout redirect URLs
        smtp_*: Lead notification mail settings (optional)
        notify_email: Recipient of lead notifications
        provider_ownership_enforced: Only owner/admin may mutate a provider record
    """

    # Required (no defaults)
    database_url: str

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Security - JWT Auth
    jwt_secret: str = "change_this_secret"
    jwt_access_ttl_minutes: int = 7 * 24 * 60

    # Billing - Stripe
    stripe_secret_key: str = ""
    stripe_price_id: str = ""
    stripe_webhook_secret: str = ""
    stripe_webhook_allow_unsigned: bool = False
    fake_billing: bool = False
    public_base_url: str = "http://localhost:3000"

    # Mail - lead notifications (optional)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_secure: bool = False
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "no-reply@renomapro.local"
    notify_email: str = ""

    # Directory
    provider_ownership_enforced: bool = True

    # Database - Connection Pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Dev Tools (Backend Safe)
    dev_seed_admin: bool = False
    dev_seed_admin_name: str = "Admin"
    dev_seed_admin_email: str = "admin@renomapro.local"
    dev_seed_admin_password: str = "admin123"

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("smtp_port")
    @classmethod
    def smtp_port_valid(cls, v: int) -> int:
        if v <= 0 or v > 65535:
            raise ValueError("smtp_port must be between 1 and 65535")
        return v

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def is_billing_configured(self) -> bool:
        return bool(self.stripe_secret_key.strip() and self.stripe_price_id.strip())

    def is_mail_configured(self) -> bool:
        return bool(self.smtp_host.strip())

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in INSECURE_JWT_SECRETS:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        if self.stripe_webhook_allow_unsigned:
            raise ValueError(
                "STRIPE_WEBHOOK_ALLOW_UNSIGNED must be false in production"
            )
        if self.fake_billing:
            raise ValueError("FAKE_BILLING must be false in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def is_test(self) -> bool:
        return self.app_env.strip().lower() in {"test", "testing", "ci"}

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
