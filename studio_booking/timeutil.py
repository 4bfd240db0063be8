"""Clock-time helpers. Times are "HH:MM" strings, dates are ISO "YYYY-MM-DD"."""

import re
from datetime import date

from studio_booking.errors import ValidationError

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_minutes(value: str) -> int:
    """Minutes since midnight for "HH:MM" (seconds are ignored). 24:00 is allowed."""
    match = _HHMM.match(value or "")
    if not match:
        raise ValidationError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes):
        raise ValidationError(f"Invalid time: {value!r}")
    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(start: str, minutes: int) -> str:
    """End time for a session; sessions may end at 24:00 but never cross midnight."""
    total = to_minutes(start) + minutes
    if total > MINUTES_PER_DAY:
        raise ValidationError("Bookings cannot cross midnight")
    return format_minutes(total)


def parse_date(value: str) -> date:
    """Strict YYYY-MM-DD; compact or week-date ISO forms are rejected."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")


def day_of_week(day: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: [a, b) and [c, d) overlap iff a < d and c < b."""
    return start_a < end_b and start_b < end_a
