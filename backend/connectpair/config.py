"""
ConnectPair Backend: Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Values come from environment variables (or a .env file), are coerced
       and validated once, and are exposed through the `settings` singleton.
Who:   The app factory, the mail transport, and the middleware chain.

Environment variables:
    DATABASE_URL, FRONTEND_URL, ADMIN_URL, ADMIN_EMAIL,
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TIMEOUT,
    HOST, PORT, ENVIRONMENT (or NODE_ENV), LOG_LEVEL,
    RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW
"""

from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field has a development default. Production deployments must
    provide the SMTP credentials and the admin address, otherwise
    notifications are logged as failures and dropped.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Single embedded file store; aiosqlite keeps the engine async
    database_url: str = Field(
        default="sqlite+aiosqlite:///./connectpair.db",
        description="Async SQLAlchemy connection URL",
    )

    # ── Site URLs ─────────────────────────────────────────────────────────
    # Used for CORS and for links rendered into outgoing emails
    frontend_url: str = Field(default="http://localhost:3000")
    admin_url: str = Field(default="http://localhost:3000/admin")

    # ── Mail ──────────────────────────────────────────────────────────────
    admin_email: str = Field(default="admin@connectpair.co.uk")
    smtp_host: str = Field(default="")
    smtp_port: int = Field(default=587, ge=1, le=65535)
    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    smtp_from: str = Field(default="hello@connectpair.co.uk")
    # Seconds before aiosmtplib gives up on a connection or command
    smtp_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001, ge=1, le=65535)
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
    )

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # 100 requests per IP every 15 minutes
    rate_limit_requests: int = Field(default=100, ge=1, le=10000)
    rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds

    @property
    def cors_origins_list(self) -> List[str]:
        """The frontend is the only browser origin allowed to call the API."""
        return [origin.strip() for origin in self.frontend_url.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Checks the settings notifications depend on.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.smtp_host:
            errors.append("SMTP_HOST is not set; outgoing emails will fail and be logged")
        if not self.admin_email:
            errors.append("ADMIN_EMAIL is not set; admin alerts have no recipient")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance used when the app factory is called without overrides
settings = Settings()
