import datetime as dt
from zoneinfo import ZoneInfo

from loguru import logger


def date_to_long(date: dt.date) -> str:
    """Convert ``date(2025, 6, 1)`` → ``Sunday, June 1, 2025`` for email copy."""
    return f"{date.strftime('%A')}, {date.strftime('%B')} {date.day}, {date.year}"


def resolve_timezone(name: str) -> dt.tzinfo:
    """Resolve a timezone name, falling back to UTC if invalid."""
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning("Invalid clinic timezone '{}'; defaulting to UTC", name)
        return dt.timezone.utc


def slot_datetime(date: dt.date, time: str, tz: dt.tzinfo) -> dt.datetime:
    """Combine a calendar date and an ``HH:MM`` slot into an aware local datetime."""
    return dt.datetime.combine(date, dt.time.fromisoformat(time), tzinfo=tz)
