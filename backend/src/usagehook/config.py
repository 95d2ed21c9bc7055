"""Application configuration using pydantic-settings."""
import math
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Usage Hook Endpoint
    usage_hook_url: str = Field(
        default="https://api.claudecount.com/api/usage/hook",
        description="Endpoint receiving usage events",
    )
    cli_version: str = Field(default="0.2.9", description="Value sent in the X-CLI-Version header")
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Deadline for a single usage hook request",
    )

    # Generated Events
    event_model: str = Field(
        default="claude-opus-4-1-20250805",
        description="Model name stamped on generated events",
    )
    default_handle: str = Field(default="@t_heavy", description="Handle used when none is supplied")
    default_user_id: str = Field(default="5432109876", description="User id attached to generated events")

    # Batch Template
    template_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model name on the batch base template",
    )
    template_handle: str = Field(default="@AwesomeCC_", description="Handle on the batch base template")
    template_user_id: str = Field(default="5432109882", description="User id on the batch base template")

    # Run Control
    runs: int = Field(
        default=10,
        ge=1,
        validation_alias=AliasChoices("RUNS", "USAGEHOOK_RUNS"),
        description="Number of requests issued by a batch run",
    )
    delay_seconds: float = Field(
        default=1.0,
        ge=0,
        validation_alias=AliasChoices("DELAY", "USAGEHOOK_DELAY"),
        description="Pause between batch requests in seconds",
    )
    suite_delay_seconds: float = Field(default=1.0, ge=0, description="Pause after each debug suite case")

    # Application Configuration
    app_env: str = Field(default="development", description="Application environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("runs", "delay_seconds", mode="before")
    @classmethod
    def fall_back_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        """Unparseable or non-positive RUNS/DELAY values use the field default."""
        default = cls.model_fields[info.field_name].default
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        if not math.isfinite(number):
            return default
        if info.field_name == "runs":
            number = int(number)
        if number <= 0:
            return default
        return number


# Global settings instance
settings = Settings()
