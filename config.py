"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

Token lifetimes are duration strings ("15m", "7d"), validated at load time
and exposed in seconds via properties.
"""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.datetime_utils import parse_duration


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "secure-login"

    # Multi-document transactions need a replica set; standalone dev servers
    # can turn this off and accept sequential invalidate+insert.
    mongodb_transactions: bool = True


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_access_secret: str = ""
    jwt_refresh_secret: str = ""
    jwt_access_expiration: str = "15m"
    jwt_refresh_expiration: str = "7d"
    jwt_algorithm: str = "HS256"

    @field_validator("jwt_access_expiration", "jwt_refresh_expiration")
    @classmethod
    def _check_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    @property
    def access_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_access_expiration)

    @property
    def refresh_ttl_seconds(self) -> int:
        return parse_duration(self.jwt_refresh_expiration)


class SmtpSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_from: str = "noreply@secure-login.local"
    smtp_from_name: str = "Secure Login"
    smtp_timeout_seconds: float = 10.0

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_pass)


class MfaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mfa_code_expiration_minutes: int = 10
    mfa_max_attempts: int = 5

    # When true, a failed MFA email fails the login (503) instead of
    # returning success with emailSent=false.
    mfa_require_email_delivery: bool = False

    # 0 disables the background sweep of expired codes
    code_cleanup_interval_seconds: int = 3600


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
    app_name: str = "Secure Login"
    app_url: str = "http://localhost:3000"
    port: int = 8000

    # Local Next.js frontend by default
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    smtp: Optional[SmtpSettings] = None
    mfa: Optional[MfaSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.smtp is None:
            self.smtp = SmtpSettings()
        if self.mfa is None:
            self.mfa = MfaSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
