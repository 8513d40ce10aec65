"""
Recurrence resolution

Turns a weekly schedule ("14:30 for 90 minutes on Mon,Wed") into the concrete
occurrence that is either running right now or is the next one to begin.
Weekdays are numbered 0=Sunday .. 6=Saturday.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from timerbot.core.durations import check_event_minutes, parse_event_duration
from timerbot.core.errors import InvalidWeekdaySet, NoValidDay
from timerbot.core.timezones import parse_hhmm

ALL_DAYS = frozenset(range(7))
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
DAY_MAP = {name.lower(): i for i, name in enumerate(DAY_NAMES)}

# Bounds the forward scan for a matching weekday
MAX_DAY_SCAN = 7


@dataclass(frozen=True)
class EventSchedule:
    name: str
    start_time: str
    duration_minutes: int
    days: frozenset[int]

    @property
    def start_hm(self) -> tuple[int, int]:
        return parse_hhmm(self.start_time)


@dataclass(frozen=True)
class Occurrence:
    start: datetime
    end: datetime


def day_index(dt: datetime) -> int:
    """Weekday of a datetime with Sunday as 0."""
    return (dt.weekday() + 1) % 7


def parse_days(text: str) -> frozenset[int]:
    """
    Parse "Daily" or a comma-separated list like "Mon,Wed,Fri".

    Unknown names are ignored; an empty result raises InvalidWeekdaySet.
    """
    s = str(text).strip().lower()
    if s == "daily":
        return ALL_DAYS

    days = {DAY_MAP[d.strip()] for d in s.split(",") if d.strip() in DAY_MAP}
    if not days:
        raise InvalidWeekdaySet()
    return frozenset(days)


def format_days(days) -> str:
    if len(set(days)) == 7:
        return "Daily"
    return ", ".join(DAY_NAMES[d] for d in sorted(days))


def make_schedule(name: str, start_time: str, duration, days) -> EventSchedule:
    """
    Build a validated EventSchedule.

    duration may be text ("02:30") or whole minutes; days may be text
    ("Mon,Fri") or an iterable of weekday numbers.
    """
    hours, minutes = parse_hhmm(start_time)

    if isinstance(duration, str):
        duration_minutes = parse_event_duration(duration)
    else:
        duration_minutes = check_event_minutes(int(duration))

    if isinstance(days, str):
        day_set = parse_days(days)
    else:
        try:
            day_set = frozenset(int(d) for d in days)
        except (TypeError, ValueError):
            raise InvalidWeekdaySet()
        if not day_set or not day_set <= ALL_DAYS:
            raise InvalidWeekdaySet()

    return EventSchedule(
        name=str(name).strip(),
        start_time=f"{hours:02d}:{minutes:02d}",
        duration_minutes=duration_minutes,
        days=day_set,
    )


def as_utc(dt: datetime) -> datetime:
    """Aware datetimes sharing a tzinfo compare by wall clock; compare in UTC instead."""
    return dt.astimezone(timezone.utc) if dt.tzinfo is not None else dt


def occurrence_end(start: datetime, duration_minutes: int) -> datetime:
    """End instant measured in elapsed time, so DST shifts don't stretch the window."""
    if start.tzinfo is None:
        return start + timedelta(minutes=duration_minutes)
    end_utc = start.astimezone(timezone.utc) + timedelta(minutes=duration_minutes)
    return end_utc.astimezone(start.tzinfo)


def resolve_occurrence_start(schedule: EventSchedule, now: datetime) -> datetime:
    """
    Start of the occurrence that is active at `now`, or else the next one.

    start_time is read as wall-clock time on now's calendar date in now's zone.

    Raises:
        NoValidDay: no weekday of the schedule found within seven days
    """
    hours, minutes = schedule.start_hm
    candidate = now.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    now_utc = as_utc(now)

    # Still-running occurrence wins over looking forward. Today's slot first,
    # then earlier days whose occurrence is long enough to still be running.
    lookback = schedule.duration_minutes // 1440 + 1
    for back in range(lookback + 1):
        start = candidate - timedelta(days=back)
        end = occurrence_end(start, schedule.duration_minutes)
        if as_utc(start) <= now_utc < as_utc(end) and day_index(start) in schedule.days:
            return start

    if as_utc(candidate) <= now_utc:
        candidate += timedelta(days=1)

    attempts = 0
    while day_index(candidate) not in schedule.days:
        if attempts >= MAX_DAY_SCAN:
            raise NoValidDay(f"No active weekday for event '{schedule.name}'")
        candidate += timedelta(days=1)
        attempts += 1

    return candidate


def resolve_occurrence(schedule: EventSchedule, now: datetime) -> Occurrence:
    start = resolve_occurrence_start(schedule, now)
    return Occurrence(start=start, end=occurrence_end(start, schedule.duration_minutes))
