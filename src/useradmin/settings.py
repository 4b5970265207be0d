"""useradmin settings (conventional Pydantic v2)."""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# ---- Defaults ---------------------------------------------------------------

DEFAULT_DATABASE_URL = f"sqlite:///{PROJECT_ROOT / 'data' / 'useradmin.sqlite'}"
DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 100
MIN_GENERATED_PASSWORD_LENGTH = 12


def normalize_log_format(value: str, *, env_var: str = "USERADMIN_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


# ---- Settings ---------------------------------------------------------------


class Settings(BaseSettings):
    """Application settings loaded from USERADMIN_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        env_prefix="USERADMIN_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    # Core
    app_name: str = "User Administration API"
    app_version: str = "0.1.0"
    log_format: str = "console"
    log_level: str = "INFO"
    request_log_level: str | None = None
    database_log_level: str | None = None

    # Server
    api_host: str = "127.0.0.1"
    api_port: int = Field(8000, ge=1, le=65535)

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False

    # Auth
    auth_user_header: str = "X-User-Id"

    # Users
    users_page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    users_max_page_size: int = Field(MAX_PAGE_SIZE, ge=1)
    users_mutation_requires_ownership: bool = False
    generated_password_length: int = Field(16, ge=MIN_GENERATED_PASSWORD_LENGTH, le=128)

    # Mail
    mail_backend: Literal["log", "smtp"] = "log"
    mail_from: str = "no-reply@localhost"
    mail_subject: str = "Your new account"
    login_url: str | None = None
    smtp_host: str = "localhost"
    smtp_port: int = Field(587, ge=1, le=65535)
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = Field(10.0, gt=0)

    # ---- Validators ----

    @field_validator("mail_backend", mode="before")
    @classmethod
    def _normalize_mail_backend(cls, value: object) -> object:
        if value is None:
            return "log"
        return str(value).strip().lower()

    @field_validator("auth_user_header")
    @classmethod
    def _require_auth_header(cls, value: str) -> str:
        if not value:
            raise ValueError("USERADMIN_AUTH_USER_HEADER must not be empty.")
        return value

    @model_validator(mode="after")
    def _finalize(self) -> Settings:
        self.log_format = normalize_log_format(self.log_format)

        normalized_log_level = normalize_log_level(self.log_level, env_var="USERADMIN_LOG_LEVEL")
        if normalized_log_level is None:
            raise ValueError("USERADMIN_LOG_LEVEL must not be empty.")
        self.log_level = normalized_log_level

        self.request_log_level = normalize_log_level(
            self.request_log_level,
            env_var="USERADMIN_REQUEST_LOG_LEVEL",
        )
        self.database_log_level = normalize_log_level(
            self.database_log_level,
            env_var="USERADMIN_DATABASE_LOG_LEVEL",
        )

        if self.users_page_size > self.users_max_page_size:
            raise ValueError(
                "USERADMIN_USERS_PAGE_SIZE must not exceed USERADMIN_USERS_MAX_PAGE_SIZE."
            )
        if self.mail_backend == "smtp" and not self.smtp_host:
            raise ValueError("USERADMIN_SMTP_HOST is required when USERADMIN_MAIL_BACKEND=smtp.")
        return self

    # ---- Convenience ----

    @property
    def effective_request_log_level(self) -> str:
        return self.request_log_level or self.log_level

    @property
    def smtp_password_value(self) -> str | None:
        if self.smtp_password is None:
            return None
        return self.smtp_password.get_secret_value()


def create_settings_accessors[T](
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


get_settings, reload_settings = create_settings_accessors(Settings)


__all__ = [
    "ALLOWED_LOG_FORMATS",
    "ALLOWED_LOG_LEVELS",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MIN_GENERATED_PASSWORD_LENGTH",
    "Settings",
    "get_settings",
    "normalize_log_format",
    "normalize_log_level",
    "reload_settings",
]
