"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone name (or UTC offset) used for persisted timestamps",
    )
    default_language: str = Field(
        default="en",
        description="Language used when a template is missing in the recipient language",
        min_length=2,
    )
    supported_languages: list[str] = Field(
        default_factory=lambda: ["en", "ar"],
        description="Languages accepted in notification preferences",
    )
    server_host: str = Field(
        default="127.0.0.1",
        description="Interface the API server binds to when started with python main.py",
    )
    server_port: int = Field(
        default=8000,
        description="Port the API server listens on when started with python main.py",
        gt=0,
        lt=65536,
    )
    base_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the client application, exposed to templates as baseUrl",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    email_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a single call to the mail provider",
        gt=0,
    )
    email_max_attempts: int = Field(
        default=3,
        description="Number of delivery attempts after which an email is no longer retried",
        gt=0,
    )
    stock_low_default: int = Field(
        default=5,
        description="System default upper bound of the low stock band",
        gt=0,
    )
    stock_medium_default: int = Field(
        default=10,
        description="System default upper bound of the medium stock band",
        gt=0,
    )
    high_value_order_default: float = Field(
        default=1000.0,
        description="Order total from which admins get a high-value order alert",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @model_validator(mode="after")
    def _validate_stock_defaults(self) -> "Settings":
        if self.stock_low_default >= self.stock_medium_default:
            raise ValueError(
                "STOCK_LOW_DEFAULT must be lower than STOCK_MEDIUM_DEFAULT"
            )
        return self

    @model_validator(mode="after")
    def _validate_default_language(self) -> "Settings":
        if self.default_language not in self.supported_languages:
            raise ValueError("DEFAULT_LANGUAGE must be one of SUPPORTED_LANGUAGES")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
