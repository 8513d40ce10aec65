"""
Duration codec

Event durations are typed as DD:HH:MM or HH:MM and stored as whole minutes.
"""

from __future__ import annotations
import re

from timerbot.core.errors import InvalidDurationFormat, NonPositiveDuration

MINUTES_PER_DAY = 1440
MINUTES_PER_HOUR = 60

# Longest window an event may span; keeps occurrence arithmetic inside the calendar
MAX_DURATION_MINUTES = 365 * MINUTES_PER_DAY

_SEGMENT = re.compile(r"-?\d+")


def parse_duration(text: str) -> int:
    """
    Parse "DD:HH:MM" or "HH:MM" into total minutes.

    Args:
        text: Duration text, two or three colon-separated integers

    Returns:
        Total minutes (may be zero or negative, see parse_event_duration)

    Raises:
        InvalidDurationFormat: wrong segment count or a non-numeric segment
    """
    parts = [p.strip() for p in str(text).strip().split(":")]
    if len(parts) not in (2, 3) or not all(_SEGMENT.fullmatch(p) for p in parts):
        raise InvalidDurationFormat()

    values = [int(p) for p in parts]
    if len(values) == 2:
        days, (hours, minutes) = 0, values
    else:
        days, hours, minutes = values

    return days * MINUTES_PER_DAY + hours * MINUTES_PER_HOUR + minutes


def check_event_minutes(total: int) -> int:
    if total <= 0:
        raise NonPositiveDuration()
    if total > MAX_DURATION_MINUTES:
        raise InvalidDurationFormat("Duration can be at most 365 days.")
    return total


def parse_event_duration(text: str) -> int:
    """Parse a duration for an event; zero, negative or over-long totals are rejected."""
    return check_event_minutes(parse_duration(text))


def format_duration(total_minutes: int) -> str:
    days = total_minutes // MINUTES_PER_DAY
    hours = (total_minutes % MINUTES_PER_DAY) // MINUTES_PER_HOUR
    minutes = total_minutes % MINUTES_PER_HOUR

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    return " ".join(parts) or "0m"
