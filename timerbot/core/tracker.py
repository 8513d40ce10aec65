"""
Per-tick evaluation of tracked events.

resolve -> classify, and if the occurrence already ended, resolve -> classify
exactly once more. Batch evaluation keeps one bad event from sinking the rest.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from timerbot.core.activity import ActivityReport, classify
from timerbot.core.errors import OccurrenceOutOfRange, StaleOccurrence, TimerError
from timerbot.core.recurrence import EventSchedule, Occurrence, resolve_occurrence


@dataclass(frozen=True)
class EventStatus:
    schedule: EventSchedule
    occurrence: Occurrence | None = None
    report: ActivityReport | None = None
    error: TimerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def evaluate_event(
    schedule: EventSchedule,
    now: datetime,
    occurrence: Occurrence | None = None,
) -> tuple[Occurrence, ActivityReport]:
    """
    Resolve and classify one event for this tick.

    An occurrence computed earlier (e.g. at the previous tick) may be passed
    in; it is classified first and replaced if it has ended.

    Raises:
        NoValidDay: schedule has no usable weekday
        StaleOccurrence: still expired after the one allowed re-resolution
        OccurrenceOutOfRange: the window runs past the datetime range
    """
    try:
        if occurrence is None:
            occurrence = resolve_occurrence(schedule, now)

        report = classify(occurrence, now)
        if report.is_expired:
            occurrence = resolve_occurrence(schedule, now)
            report = classify(occurrence, now)
            if report.is_expired:
                raise StaleOccurrence(f"Event '{schedule.name}' resolved to an ended occurrence twice")
    except OverflowError as e:
        raise OccurrenceOutOfRange(f"Event '{schedule.name}' window is out of range: {e}") from e

    return occurrence, report


def evaluate_events(schedules: Iterable[EventSchedule], now: datetime) -> list[EventStatus]:
    """Evaluate every schedule against the same instant; failures are captured per event."""
    results = []
    for schedule in schedules:
        try:
            occurrence, report = evaluate_event(schedule, now)
        except TimerError as e:
            results.append(EventStatus(schedule, error=e))
            continue
        results.append(EventStatus(schedule, occurrence, report))
    return results
