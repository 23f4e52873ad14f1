"""Slot generation.

Slots are never stored. They are derived from a venue's opening hours and a
fixed granularity, using minute-of-day integers throughout.
"""
import re
from functools import lru_cache
from typing import Tuple

from app.core.errors import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_MIDNIGHT_RE = re.compile(r"^24:00(?::00)?$")

MINUTES_PER_DAY = 24 * 60


def parse_time_of_day(value: str) -> int:
    """Parse 'HH:MM' (seconds tolerated and ignored) into minutes since midnight."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid time of day: {value!r}")

    match = _TIME_RE.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid time of day: {value!r}, expected HH:MM")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"Invalid time of day: {value!r}")
    return hour * 60 + minute


def parse_closing_time(value: str) -> int:
    """Like parse_time_of_day, but also accepts '24:00' for a venue open until midnight."""
    if isinstance(value, str) and _MIDNIGHT_RE.match(value.strip()):
        return MINUTES_PER_DAY
    return parse_time_of_day(value)


def format_time_of_day(minutes: int) -> str:
    """Format minutes since midnight as 'HH:MM'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time_of_day(value: str) -> str:
    """Canonical 'HH:MM' form of a time string ('9:00:00' -> '09:00')."""
    return format_time_of_day(parse_time_of_day(value))


def _check_granularity(granularity_minutes: int):
    if not isinstance(granularity_minutes, int) or isinstance(granularity_minutes, bool):
        raise ValidationError(f"Granularity must be an integer, got {granularity_minutes!r}")
    if granularity_minutes <= 0:
        raise ValidationError(f"Granularity must be positive, got {granularity_minutes}")


@lru_cache(maxsize=256)
def _generate(opening: int, closing: int, granularity_minutes: int) -> Tuple[str, ...]:
    slots = []
    current = opening
    while current < closing:
        slots.append(format_time_of_day(current))
        current += granularity_minutes
    return tuple(slots)


def generate_slots(opening_time: str, closing_time: str, granularity_minutes: int) -> Tuple[str, ...]:
    """
    Generate the ordered slot start times for a venue's opening hours.

    Args:
        opening_time: Opening time, 'HH:MM'
        closing_time: Closing time, 'HH:MM' or '24:00'
        granularity_minutes: Minutes between consecutive slot starts

    Returns:
        Strictly increasing 'HH:MM' strings in [opening, closing). Empty when
        opening is not before closing.

    Raises:
        ValidationError: Malformed time or non-positive granularity
    """
    _check_granularity(granularity_minutes)
    opening = parse_time_of_day(opening_time)
    closing = parse_closing_time(closing_time)

    if opening >= closing:
        return ()

    return _generate(opening, closing, granularity_minutes)


def slot_containing(minute_of_day: int, opening_time: str, granularity_minutes: int) -> str:
    """
    Return the slot start whose [start, start + granularity) holds minute_of_day.

    A minute before opening maps to itself; callers match the result against
    the generated slot list, so such times never land in the grid.
    """
    _check_granularity(granularity_minutes)
    opening = parse_time_of_day(opening_time)

    if minute_of_day < opening:
        return format_time_of_day(minute_of_day)

    offset = (minute_of_day - opening) // granularity_minutes * granularity_minutes
    return format_time_of_day(opening + offset)
