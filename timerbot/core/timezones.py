"""
Host time zone helpers and user offset conversion.

Event start times are stored in host wall-clock time. Users may register a
UTC offset so the times they type are shifted into host time on creation.
"""

from __future__ import annotations
import re
from datetime import datetime
from zoneinfo import ZoneInfo

from timerbot.core.errors import InvalidOffset, InvalidTimeFormat

DEFAULT_TIMEZONE = "UTC"

MIN_OFFSET = -12.0
MAX_OFFSET = 14.0

_HHMM = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

OFFSET_NAMES: dict[float, str] = {
    -12.0: "BIT", -11.0: "SST", -10.0: "HST", -9.0: "AKST", -8.0: "PST",
    -7.0: "MST", -6.0: "CST", -5.0: "EST", -4.0: "AST", -3.0: "ART",
    -2.0: "GST", -1.0: "CVT", 0.0: "GMT/UTC", 1.0: "CET", 2.0: "EET",
    3.0: "MSK", 4.0: "GST", 5.0: "PKT", 5.5: "IST", 6.0: "BST",
    7.0: "ICT", 8.0: "CST", 9.0: "JST", 10.0: "AEST", 11.0: "SBT",
    12.0: "NZST", 13.0: "TOT", 14.0: "LINT",
}


def tz(cfg) -> ZoneInfo:
    name = cfg.get("timers", "timezone", default=DEFAULT_TIMEZONE) if cfg else DEFAULT_TIMEZONE
    return ZoneInfo(name)


def now_local(cfg=None) -> datetime:
    """Current time in the host zone (config timezone, UTC if none)."""
    return datetime.now(tz=tz(cfg))


def host_offset_hours(now: datetime) -> float:
    """UTC offset of an aware datetime, in hours."""
    offset = now.utcoffset()
    if offset is None:
        return 0.0
    return offset.total_seconds() / 3600


def parse_hhmm(text: str) -> tuple[int, int]:
    """Parse a 24h "HH:MM" string; raises InvalidTimeFormat."""
    m = _HHMM.fullmatch(str(text).strip())
    if not m:
        raise InvalidTimeFormat()
    return int(m.group(1)), int(m.group(2))


def validate_offset(offset_hours: float) -> float:
    value = float(offset_hours)
    if not MIN_OFFSET <= value <= MAX_OFFSET or (value * 2) != int(value * 2):
        raise InvalidOffset()
    return value


def to_host_time(local_time: str, subject_offset_hours: float, host_offset_hours: float) -> str:
    """
    Convert a user's wall-clock time into host wall-clock time.

    Only the hour is shifted; a half-hour offset difference is truncated to
    the whole hour rather than carried into the minutes.

    Args:
        local_time: "HH:MM" in the user's zone
        subject_offset_hours: user's UTC offset
        host_offset_hours: host's UTC offset

    Returns:
        Zero-padded "HH:MM" in host time
    """
    hours, minutes = parse_hhmm(local_time)
    adjusted = hours - subject_offset_hours + host_offset_hours

    while adjusted < 0:
        adjusted += 24
    while adjusted >= 24:
        adjusted -= 24

    return f"{int(adjusted):02d}:{minutes:02d}"


def _offset_text(offset_hours: float) -> str:
    if float(offset_hours).is_integer():
        return str(int(offset_hours))
    return f"{offset_hours:g}"


def describe_offset(offset_hours: float) -> str:
    """Render e.g. "UTC+9 (JST)", "UTC-5 (EST)", "UTC+5.5 (IST)"."""
    sign = "+" if offset_hours >= 0 else ""
    name = OFFSET_NAMES.get(float(offset_hours), "Unknown")
    return f"UTC{sign}{_offset_text(offset_hours)} ({name})"
