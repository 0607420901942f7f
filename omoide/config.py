import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from omoide.errors import ValidationError
from omoide.util import RATE_LIMIT_DELAY, TOKYO

DEFAULT_HOLIDAY_CALENDAR_ID = "ja.japanese#holiday@group.v.calendar.google.com"
DEFAULT_CALENDAR_NAME = "思い出カレンダー"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the CLI and the Google-backed adapters.

    Attributes:
        holiday_calendar_id: Shared calendar holidays are read from
        timezone: IANA zone name sent to Google with timed events
        rate_limit_delay: Seconds to pause between successive API calls
        access_token: Bearer token handed over by the identity provider
        calendar_name: Name used when creating a dedicated calendar
        log_level: Root log level name
        log_file: Optional path of a rotating log file
    """

    holiday_calendar_id: str = DEFAULT_HOLIDAY_CALENDAR_ID
    timezone: str = TOKYO
    rate_limit_delay: float = RATE_LIMIT_DELAY
    access_token: str | None = None
    calendar_name: str = DEFAULT_CALENDAR_NAME
    log_level: str = "INFO"
    log_file: str | None = None


def _parse_delay(raw: str | None) -> float:
    if raw is None or raw.strip() == "":
        return RATE_LIMIT_DELAY
    try:
        delay = float(raw)
    except ValueError:
        raise ValidationError(
            f"OMOIDE_RATE_LIMIT_DELAY must be a number, got {raw!r}",
            field="rate_limit_delay",
        ) from None
    if delay < 0:
        raise ValidationError(
            f"OMOIDE_RATE_LIMIT_DELAY must not be negative, got {delay}",
            field="rate_limit_delay",
        )
    return delay


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from an environment mapping.

    Args:
        env: Variables to read; ``os.environ`` (after loading ``.env``) if None

    Raises:
        ValidationError: If ``OMOIDE_RATE_LIMIT_DELAY`` is not a non-negative number
    """
    if env is None:
        load_dotenv()
        env = os.environ

    return Settings(
        holiday_calendar_id=env.get("OMOIDE_HOLIDAY_CALENDAR_ID")
        or DEFAULT_HOLIDAY_CALENDAR_ID,
        timezone=env.get("OMOIDE_TIMEZONE") or TOKYO,
        rate_limit_delay=_parse_delay(env.get("OMOIDE_RATE_LIMIT_DELAY")),
        access_token=env.get("OMOIDE_ACCESS_TOKEN") or None,
        calendar_name=env.get("OMOIDE_CALENDAR_NAME") or DEFAULT_CALENDAR_NAME,
        log_level=(env.get("OMOIDE_LOG_LEVEL") or "INFO").upper(),
        log_file=env.get("OMOIDE_LOG_FILE") or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


__all__ = ["Settings", "load_settings", "get_settings"]
