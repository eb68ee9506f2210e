"""Application configuration."""

import os
from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict

from univ_erp.services.grades import DEFAULT_COMPONENT_NAMES

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    session_timeout_minutes: int = 30
    max_login_attempts: int = 5
    maintenance_mode: bool = False
    log_level: str = "INFO"
    default_grade_components: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def session_timeout(self) -> timedelta:
        return timedelta(minutes=self.session_timeout_minutes)


def parse_component_names(raw: str | None) -> tuple[str, ...]:
    """Parse the default grading template from env."""
    if raw is None:
        return DEFAULT_COMPONENT_NAMES
    names: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if value and value not in names:
            names.append(value)
    return tuple(names) or DEFAULT_COMPONENT_NAMES
