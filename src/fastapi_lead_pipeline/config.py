"""Application settings loaded from the environment (and ``.env``)."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fastapi_lead_pipeline.ratelimit import StoreFailurePolicy

DEV_DOWNLOAD_SECRET = "dev-download-secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    environment: Literal["development", "test", "production"] = Field(
        default="development", validation_alias="ENVIRONMENT"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["plain", "json"] = Field(
        default="plain", validation_alias="LOG_FORMAT"
    )

    # Request gates
    max_body_bytes: int = Field(default=20_000, validation_alias="API_MAX_BODY")
    allowed_origins_raw: str = Field(default="", validation_alias="API_ALLOWED_ORIGINS")
    csrf_cookie_name: str = Field(default="svs_csrf", validation_alias="CSRF_COOKIE_NAME")
    csrf_cookie_max_age: int = Field(default=2 * 60 * 60, validation_alias="CSRF_COOKIE_MAX_AGE")
    request_id_prefix: str = Field(default="svs", validation_alias="REQUEST_ID_PREFIX")

    # Rate limiting
    rate_limit_window_ms: int = Field(default=60_000, validation_alias="API_RATE_WINDOW_MS")
    rate_limit_max: int = Field(default=10, validation_alias="API_RATE_LIMIT_MAX")
    rate_limit_prefix: str = Field(default="svs:rl", validation_alias="RATE_LIMIT_PREFIX")
    rate_limit_store_failure: StoreFailurePolicy = Field(
        default=StoreFailurePolicy.LOCAL, validation_alias="RATE_LIMIT_STORE_FAILURE"
    )
    redis_url: str | None = Field(default=None, validation_alias="REDIS_URL")

    # Mail delivery
    resend_api_key: SecretStr | None = Field(default=None, validation_alias="RESEND_API_KEY")
    resend_base_url: str = Field(default="https://api.resend.com", validation_alias="RESEND_BASE_URL")
    smtp_host: str | None = Field(default=None, validation_alias="SMTP_HOST")
    smtp_port: int = Field(default=0, validation_alias="SMTP_PORT")
    smtp_secure: bool = Field(default=False, validation_alias="SMTP_SECURE")
    smtp_user: str | None = Field(
        default=None, validation_alias=AliasChoices("SMTP_USER", "EMAIL_USER")
    )
    smtp_password: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("SMTP_PASS", "EMAIL_PASS")
    )
    smtp_max_connections: int = Field(default=2, validation_alias="SMTP_MAX_CONNECTIONS")
    smtp_max_messages: int = Field(default=50, validation_alias="SMTP_MAX_MESSAGES")
    email_user: str | None = Field(default=None, validation_alias="EMAIL_USER")
    from_address: str | None = Field(default=None, validation_alias="FROM_ADDRESS")
    mail_timeout_seconds: float = Field(default=15.0, validation_alias="MAIL_TIMEOUT_SECONDS")

    # Download grants
    download_secret: SecretStr = Field(
        default=SecretStr(DEV_DOWNLOAD_SECRET),
        validation_alias=AliasChoices("DOWNLOAD_SECRET", "NEXTAUTH_SECRET", "JWT_SECRET"),
    )
    download_ttl_seconds: int = Field(default=180, validation_alias="DOWNLOAD_TTL_SECONDS")
    grant_cookie_prefix: str = Field(default="svs_dl_", validation_alias="GRANT_COOKIE_PREFIX")
    static_dir: str | None = Field(default=None, validation_alias="STATIC_DIR")

    @model_validator(mode="after")
    def _check_production_secrets(self) -> Settings:
        if self.is_production and self.download_secret.get_secret_value() == DEV_DOWNLOAD_SECRET:
            raise ValueError("DOWNLOAD_SECRET must be set in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def allowed_origins(self) -> list[str]:
        """Comma-separated ``API_ALLOWED_ORIGINS``; empty means same-host only."""
        return [item.strip() for item in self.allowed_origins_raw.split(",") if item.strip()]

    @property
    def rate_limit_window_seconds(self) -> float:
        return max(self.rate_limit_window_ms / 1000, 1.0)

    @property
    def mail_recipient(self) -> str | None:
        return self.email_user or self.smtp_user

    @property
    def mail_sender(self) -> str:
        return self.from_address or f"SVS Website <{self.mail_recipient or ''}>"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
