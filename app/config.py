"""Runtime settings, read once from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_WINDOW_START = "09:00"
DEFAULT_WINDOW_END = "21:00"
DEFAULT_MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class Settings:
    app_name: str = "Venue Booking Service"
    log_level: str = "INFO"
    timezone: str = "UTC"
    window_start: time = time(9, 0)
    window_end: time = time(21, 0)
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _parse_hhmm(raw: str, name: str) -> time:
    try:
        hours, minutes = raw.strip().split(":")
        return time(int(hours), int(minutes))
    except ValueError as exc:
        raise ValueError(f"{name} must be HH:MM, got {raw!r}") from exc


def validate_settings(settings: Settings) -> None:
    if settings.window_start >= settings.window_end:
        raise ValueError("window_start must be before window_end")
    if settings.max_suggestions <= 0:
        raise ValueError("max_suggestions must be > 0")
    try:
        settings.tzinfo
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {settings.timezone!r}") from exc


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build validated settings from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    settings = Settings(
        app_name=env.get("APP_NAME", "Venue Booking Service"),
        log_level=env.get("LOG_LEVEL", "INFO"),
        timezone=env.get("VENUE_TIMEZONE", "UTC"),
        window_start=_parse_hhmm(
            env.get("VENUE_WINDOW_START", DEFAULT_WINDOW_START), "VENUE_WINDOW_START"
        ),
        window_end=_parse_hhmm(
            env.get("VENUE_WINDOW_END", DEFAULT_WINDOW_END), "VENUE_WINDOW_END"
        ),
        max_suggestions=int(
            env.get("VENUE_MAX_SUGGESTIONS", str(DEFAULT_MAX_SUGGESTIONS))
        ),
    )
    validate_settings(settings)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
