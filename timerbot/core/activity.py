"""
Activity classification

Given one occurrence and the current instant, decide whether the event is
upcoming, running or over, and how urgent a running event is.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from timerbot.core.recurrence import Occurrence, as_utc


class ActivityState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"
    EXPIRED = "expired"


class Tier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# (lower bound, tier), lower edge inclusive
TIER_THRESHOLDS = [
    (0.75, Tier.HIGH),
    (0.5, Tier.MEDIUM),
    (0.0, Tier.LOW),
]


@dataclass(frozen=True)
class ActivityReport:
    state: ActivityState
    reference: datetime
    seconds: int
    progress: float | None = None
    tier: Tier | None = None

    @property
    def is_active(self) -> bool:
        return self.state is ActivityState.ACTIVE

    @property
    def is_expired(self) -> bool:
        return self.state is ActivityState.EXPIRED


def tier_for(progress: float) -> Tier:
    for lower, tier in TIER_THRESHOLDS:
        if progress >= lower:
            return tier
    return Tier.LOW


def _whole_seconds(later: datetime, earlier: datetime) -> int:
    return max(0, int((later - earlier).total_seconds()))


def classify(occurrence: Occurrence, now: datetime) -> ActivityReport:
    start, end, at = as_utc(occurrence.start), as_utc(occurrence.end), as_utc(now)

    if at < start:
        return ActivityReport(ActivityState.INACTIVE, occurrence.start, _whole_seconds(start, at))

    if at < end:
        progress = (at - start).total_seconds() / (end - start).total_seconds()
        return ActivityReport(
            ActivityState.ACTIVE,
            occurrence.end,
            _whole_seconds(end, at),
            progress=progress,
            tier=tier_for(progress),
        )

    return ActivityReport(ActivityState.EXPIRED, occurrence.end, _whole_seconds(at, end))


def split_countdown(seconds: int) -> tuple[int, int, int]:
    """Whole (days, hours, minutes) in a second count; leftover seconds are dropped."""
    seconds = max(0, int(seconds))
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    return days, hours, minutes


def format_countdown(seconds: int) -> str:
    days, hours, minutes = split_countdown(seconds)
    prefix = f"{days} Days " if days > 0 else ""
    return f"{prefix}{hours} Hours {minutes} Minutes"
