"""Configuration via pydantic-settings — loaded from env vars / .env file."""
from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .timezones import TimestampMode


class Settings(BaseSettings):
    """scrobblerlog configuration (``SCROBBLERLOG_*`` environment variables)."""

    model_config = SettingsConfigDict(env_prefix="SCROBBLERLOG_", env_file=".env", extra="ignore")

    default_timezone: str = Field(default="", description="Timezone used when the log declares #TZ/UNKNOWN")
    strict_duration: bool = Field(default=False, description="Reject non-numeric durations instead of using 0")
    timestamp_mode: TimestampMode = Field(default=TimestampMode.WALLCLOCK, description="wallclock|epoch")
    encoding: str = Field(default="utf-8-sig", description="Encoding of .scrobbler.log files")


settings = Settings()


@dataclass(frozen=True)
class ParserOptions:
    """Per-parse policy knobs."""

    strict_duration: bool = False
    timestamp_mode: TimestampMode = TimestampMode.WALLCLOCK

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "ParserOptions":
        s = s or settings
        return cls(strict_duration=s.strict_duration, timestamp_mode=s.timestamp_mode)
