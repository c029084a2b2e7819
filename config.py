"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Captcha lifetimes are expressed in seconds. The proof TTL must outlive the
challenge TTL so a freshly solved challenge is always redeemable.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    provider_key_length: int = 10
    challenge_id_length: int = 12

    challenge_ttl_seconds: float = 120.0
    proof_ttl_seconds: float = 300.0
    sweep_interval_seconds: float = 600.0

    # Text challenges
    text_length: int = 6
    ignore_chars: str = "0oO1ilI"

    # Arithmetic challenges
    math_min: int = 1
    math_max: int = 20
    math_operators: str = "+-"

    # Visual theme
    background: str = "#181818"
    image_width: int = 200
    image_height: int = 70

    @model_validator(mode="after")
    def _check_bounds(self) -> "CaptchaSettings":
        if self.proof_ttl_seconds <= self.challenge_ttl_seconds:
            raise ValueError("proof_ttl_seconds must be greater than challenge_ttl_seconds")
        if self.math_min > self.math_max:
            raise ValueError("math_min must not exceed math_max")
        if not self.math_operators or set(self.math_operators) - {"+", "-"}:
            raise ValueError("math_operators may only contain '+' and '-'")
        return self


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without Redis the in-memory provider directory is used
    redis_uri: Optional[str] = None
    redis_timeout_seconds: float = 2.0
    redis_key_prefix: str = "provider"


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # JSON file seeding the in-memory directory: {key: {method, override, good, bad}}
    providers_file: Optional[str] = None


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "captcha-service"
    api_prefix: str = "/api/v1"

    # CORS: providers embed the widget on arbitrary origins
    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    captcha: Optional[CaptchaSettings] = None
    redis: Optional[RedisSettings] = None
    providers: Optional[ProviderSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.captcha is None:
            self.captcha = CaptchaSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.providers is None:
            self.providers = ProviderSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
