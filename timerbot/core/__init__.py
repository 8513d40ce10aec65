# Core package - centralized exports
# - durations.py: DD:HH:MM / HH:MM duration codec
# - timezones.py: host zone, user offset conversion, offset labels
# - recurrence.py: EventSchedule, Occurrence, next/active occurrence resolution
# - activity.py: activity classification and countdown formatting
# - tracker.py: per-tick evaluation with one re-resolution
# - registry.py: guild -> channel / events / message bookkeeping
# - configurations.py: Config
# - db.py: Database class and schema

from .errors import (
    TimerError, InvalidDurationFormat, NonPositiveDuration, InvalidTimeFormat,
    InvalidWeekdaySet, InvalidOffset, NoValidDay, StaleOccurrence, OccurrenceOutOfRange,
)
from .durations import parse_duration, parse_event_duration, check_event_minutes, format_duration, MAX_DURATION_MINUTES
from .timezones import (
    tz, now_local, host_offset_hours, parse_hhmm, validate_offset,
    to_host_time, describe_offset, OFFSET_NAMES,
)
from .recurrence import (
    EventSchedule, Occurrence, day_index, parse_days, format_days, make_schedule,
    resolve_occurrence_start, resolve_occurrence,
)
from .activity import ActivityState, Tier, ActivityReport, classify, tier_for, split_countdown, format_countdown
from .tracker import EventStatus, evaluate_event, evaluate_events
from .registry import TimerRegistry
from .configurations import Config
from .db import Database

__all__ = [
    # Errors
    'TimerError', 'InvalidDurationFormat', 'NonPositiveDuration', 'InvalidTimeFormat',
    'InvalidWeekdaySet', 'InvalidOffset', 'NoValidDay', 'StaleOccurrence', 'OccurrenceOutOfRange',
    # Durations
    'parse_duration', 'parse_event_duration', 'check_event_minutes', 'format_duration', 'MAX_DURATION_MINUTES',
    # Time zones
    'tz', 'now_local', 'host_offset_hours', 'parse_hhmm', 'validate_offset',
    'to_host_time', 'describe_offset', 'OFFSET_NAMES',
    # Recurrence
    'EventSchedule', 'Occurrence', 'day_index', 'parse_days', 'format_days', 'make_schedule',
    'resolve_occurrence_start', 'resolve_occurrence',
    # Activity
    'ActivityState', 'Tier', 'ActivityReport', 'classify', 'tier_for', 'split_countdown', 'format_countdown',
    # Tracker
    'EventStatus', 'evaluate_event', 'evaluate_events',
    # Registry / config / database
    'TimerRegistry', 'Config', 'Database',
]
