import re

from maternal.domain.exceptions import InvalidRangeError, InvalidTimeFormatError

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_valid_time(value: object) -> bool:
    """True for zero-padded 24-hour ``HH:MM`` strings such as ``09:30``."""
    return isinstance(value, str) and _TIME_RE.match(value) is not None


def time_to_minutes(value: str) -> int:
    """Convert ``"09:30"`` → ``570`` (minutes since midnight)."""
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidTimeFormatError(value)
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time(minutes: int) -> str:
    """Convert ``570`` → ``"09:30"``."""
    if not 0 <= minutes < 24 * 60:
        raise InvalidRangeError(f"Minutes out of range for a time of day: {minutes}")
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def generate_time_slots(start: str, end: str, stride_minutes: int) -> list[str]:
    """Walk ``[start, end)`` in ``stride_minutes`` steps.

    ``generate_time_slots("09:00", "10:00", 30)`` → ``["09:00", "09:30"]``.
    """
    start_min = time_to_minutes(start)
    end_min = time_to_minutes(end)
    if stride_minutes <= 0:
        raise InvalidRangeError(f"Slot stride must be positive, got {stride_minutes}")
    if end_min <= start_min:
        raise InvalidRangeError(f"End time {end} must be after start time {start}")
    return [minutes_to_time(m) for m in range(start_min, end_min, stride_minutes)]
