"""Runtime settings, read from HOURS_TOOL_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

_PREFIX = "HOURS_TOOL_"

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@dataclass(frozen=True)
class Settings:
    timezone: str = "Europe/Amsterdam"
    week_start: int = 0  # Monday=0, Sunday=6
    store_timeout: float = 10.0
    currency: str = "EUR"
    date_format: str = "%d-%m-%Y"
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.week_start <= 6:
            raise ValueError(f"week_start must be 0..6, got {self.week_start}")
        if self.store_timeout <= 0:
            raise ValueError(f"store_timeout must be positive, got {self.store_timeout}")

    def today(self) -> date:
        """Current civil date in the configured timezone."""
        return datetime.now(ZoneInfo(self.timezone)).date()

    def format_date(self, value: date) -> str:
        return value.strftime(self.date_format)


def _parse_week_start(raw: str) -> int:
    raw = raw.strip().lower()
    if raw.isdigit():
        return int(raw)
    if raw in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(raw)
    raise ValueError(f"Unknown week start: '{raw}'")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from the environment, falling back to defaults."""
    env = os.environ if environ is None else environ
    defaults = Settings()

    def get(name: str) -> str | None:
        value = env.get(_PREFIX + name, "")
        return value if value.strip() else None

    timezone = get("TIMEZONE") or defaults.timezone
    week_start = get("WEEK_START")
    store_timeout = get("STORE_TIMEOUT")
    log_json = get("LOG_JSON")

    return Settings(
        timezone=timezone.strip(),
        week_start=_parse_week_start(week_start) if week_start else defaults.week_start,
        store_timeout=float(store_timeout) if store_timeout else defaults.store_timeout,
        currency=(get("CURRENCY") or defaults.currency).strip().upper(),
        date_format=get("DATE_FORMAT") or defaults.date_format,
        log_level=(get("LOG_LEVEL") or defaults.log_level).strip().upper(),
        log_json=_parse_bool(log_json) if log_json else defaults.log_json,
    )
