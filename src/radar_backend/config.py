from __future__ import annotations

from typing import ClassVar, final

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PLACEHOLDER_USER_TOKEN_SECRET = "user_token_secret_change_me"


@final
class Settings(BaseSettings):
    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )
    app_name: str = "Radar Notification API"
    api_prefix: str = "/api"

    # Environment (ENVIRONMENT): development | production
    environment: str = "development"

    database_url: str = "sqlite:///./dev.db"
    log_level: str = "INFO"

    # Function-level access key (x-functions-key header or ?code=). Empty disables the check.
    function_key: str = ""

    # Signs per-user bearer tokens: hex(HMAC-SHA256(secret, user_uuid)).
    user_token_secret: str = _PLACEHOLDER_USER_TOKEN_SECRET

    # If true, use X-Forwarded-For to determine client IP. Only enable behind a trusted proxy.
    trust_x_forwarded_for: bool = False

    # Upper bound for a single user-store / message-store call. <=0 disables the bound.
    upstream_timeout_seconds: float = 10.0

    # Pull
    pull_message_limit: int = 500
    pull_max_client_clock_skew_seconds: int = 300

    # Deny list (recording only). TTL <= 0 disables recording.
    deny_list_ttl_seconds: int = 60 * 60 * 24
    deny_list_cleanup_interval_seconds: int = 60 * 10

    # Validate production settings early to fail fast on unsafe defaults.
    @model_validator(mode="after")
    def _validate_production_settings(self) -> "Settings":  # pyright: ignore[reportUnusedFunction]
        if self.environment.strip().lower() != "production":
            return self

        errors: list[str] = []

        if not self.function_key.strip():
            errors.append("FUNCTION_KEY must be set in production")

        secret = self.user_token_secret.strip()
        if not secret or secret == _PLACEHOLDER_USER_TOKEN_SECRET:
            errors.append("USER_TOKEN_SECRET must be set in production")

        if self.database_url.strip().lower().startswith("sqlite"):
            errors.append("DATABASE_URL must not point at SQLite in production")

        if self.pull_message_limit <= 0:
            errors.append("PULL_MESSAGE_LIMIT must be positive in production")

        if errors:
            raise ValueError("Invalid production settings: " + "; ".join(errors))
        return self

    def security_warnings(self) -> list[str]:
        warnings: list[str] = []
        if not self.function_key.strip():
            warnings.append("FUNCTION_KEY is empty; function-level auth is disabled")
        secret = self.user_token_secret.strip()
        if not secret or secret == _PLACEHOLDER_USER_TOKEN_SECRET:
            warnings.append("USER_TOKEN_SECRET is missing or using placeholder value")
        if self.trust_x_forwarded_for:
            warnings.append("TRUST_X_FORWARDED_FOR=true; only safe behind a trusted proxy")
        return warnings


# The validator is invoked by Pydantic at runtime.
_ = Settings._validate_production_settings


settings = Settings()
