"""
Process configuration for the newsletter backend.

Settings are read from the environment (and an optional .env file) exactly
once, validated, and then passed explicitly to every component that needs
them. Nothing else in the code base reads os.environ directly.
"""

import os
import re

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shared.errors import ConfigurationError

DEFAULT_EVENT_SOURCE_URLS = [
    "https://api.github.com/events",
    "https://api.github.com/users/torvalds/events/public",
    "https://api.github.com/orgs/microsoft/events",
]

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "https://github-updates-frontend.vercel.app",
]

REQUIRED_VARIABLES = {
    "supabase_url": "SUPABASE_URL",
    "supabase_service_key": "SUPABASE_SERVICE_KEY",
    "resend_api_key": "RESEND_API_KEY",
    "notification_from_email": "NOTIFICATION_FROM_EMAIL",
}

_SEND_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Settings(BaseModel):
    """Validated runtime configuration."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    # Subscriber store
    supabase_url: str = Field(..., min_length=1)
    supabase_service_key: str = Field(..., min_length=1)

    # Email transport
    resend_api_key: str = Field(..., min_length=1)
    notification_from_email: str = Field(..., pattern=r"^[^@]+@[^@]+$")
    notification_from_name: str = "GitHub Updates"

    # Event source
    github_token: str | None = None
    event_source_urls: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EVENT_SOURCE_URLS)
    )
    events_page_size: int = Field(10, gt=0, le=100)
    http_timeout_seconds: float = Field(30.0, gt=0)

    # Broadcast
    send_delay_seconds: float = Field(0.1, ge=0)
    daily_send_time: str = "09:00"
    scheduler_enabled: bool = True
    send_welcome_email: bool = True

    # Unsubscribe links
    unsubscribe_secret_key: str | None = None
    api_base_url: str = "http://localhost:3001"

    # HTTP server
    port: int = Field(3001, gt=0, lt=65536)
    environment: str = "development"
    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    log_level: str = "INFO"

    @field_validator("daily_send_time")
    @classmethod
    def _check_send_time(cls, value: str) -> str:
        if not _SEND_TIME_PATTERN.match(value):
            raise ValueError("daily_send_time must be HH:MM (24h)")
        return value

    @field_validator("event_source_urls")
    @classmethod
    def _check_event_sources(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one event source URL is required")
        return value

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def _split_list(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item]


def _parse_bool(raw: str | None) -> bool | None:
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env: dict[str, str] | None = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from. Defaults to os.environ after loading .env.

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If required variables are missing or values are invalid
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    missing = [name for name in REQUIRED_VARIABLES.values() if not env.get(name)]
    if missing:
        raise ConfigurationError(f"{', '.join(missing)} must be set")

    raw: dict[str, object] = {
        field: env[name] for field, name in REQUIRED_VARIABLES.items()
    }

    optional = {
        "notification_from_name": env.get("NOTIFICATION_FROM_NAME"),
        "github_token": env.get("GITHUB_TOKEN") or None,
        "event_source_urls": _split_list(env.get("EVENT_SOURCE_URLS")),
        "events_page_size": env.get("EVENTS_PAGE_SIZE"),
        "http_timeout_seconds": env.get("HTTP_TIMEOUT_SECONDS"),
        "send_delay_seconds": env.get("SEND_DELAY_SECONDS"),
        "daily_send_time": env.get("DAILY_SEND_TIME"),
        "scheduler_enabled": _parse_bool(env.get("SCHEDULER_ENABLED")),
        "send_welcome_email": _parse_bool(env.get("SEND_WELCOME_EMAIL")),
        "unsubscribe_secret_key": env.get("UNSUBSCRIBE_SECRET_KEY") or None,
        "api_base_url": env.get("API_BASE_URL"),
        "port": env.get("PORT"),
        "environment": env.get("ENVIRONMENT"),
        "allowed_origins": _split_list(env.get("ALLOWED_ORIGINS")),
        "log_level": env.get("LOG_LEVEL"),
    }
    raw.update({key: value for key, value in optional.items() if value is not None})

    try:
        return Settings.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
