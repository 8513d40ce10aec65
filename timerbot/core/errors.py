from __future__ import annotations


class TimerError(ValueError):
    """Base for every rejected input or unresolvable schedule."""

    user_message = "Something is wrong with that event."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class InvalidDurationFormat(TimerError):
    user_message = "Invalid duration format. Use DD:HH:MM (e.g., 01:02:15) or HH:MM (e.g., 02:30)"


class NonPositiveDuration(TimerError):
    user_message = "Duration must be longer than zero minutes."


class InvalidTimeFormat(TimerError):
    user_message = "Invalid time format. Use HH:MM (e.g., 14:30)"


class InvalidWeekdaySet(TimerError):
    user_message = 'Invalid days. Use day names like: Mon,Wed,Fri or "Daily"'


class InvalidOffset(TimerError):
    user_message = "Offset must be between -12 and +14 in half-hour steps."


class NoValidDay(TimerError):
    user_message = "No active weekday found for this event."


class StaleOccurrence(TimerError):
    user_message = "Event keeps resolving to an occurrence that already ended."


class OccurrenceOutOfRange(TimerError):
    user_message = "Event window falls outside the supported calendar range."
