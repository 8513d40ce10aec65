from datetime import timedelta

import pytest

from conftest import at
from timerbot.core.activity import (
    ActivityState, Tier, classify, format_countdown, split_countdown, tier_for,
)
from timerbot.core.recurrence import Occurrence, resolve_occurrence


def test_running_raid_is_active_low_tier(raid):
    now = at(6, 15, 0)
    report = classify(resolve_occurrence(raid, now), now)
    assert report.state is ActivityState.ACTIVE
    assert report.progress == pytest.approx(0.2)
    assert report.tier is Tier.LOW
    assert report.seconds == 2 * 3600
    assert report.reference == at(6, 17, 0)


def test_upcoming_counts_down_to_start():
    occurrence = Occurrence(at(6, 14, 30), at(6, 17, 0))
    report = classify(occurrence, at(6, 12, 29, 30))
    assert report.state is ActivityState.INACTIVE
    assert report.seconds == 2 * 3600 + 30
    assert report.reference == occurrence.start
    assert report.progress is None and report.tier is None


def test_start_instant_is_active_with_zero_progress():
    occurrence = Occurrence(at(6, 14, 0), at(6, 15, 40))
    report = classify(occurrence, occurrence.start)
    assert report.is_active
    assert report.progress == 0.0
    assert report.tier is Tier.LOW


def test_end_instant_is_expired():
    occurrence = Occurrence(at(6, 14, 0), at(6, 15, 40))
    report = classify(occurrence, occurrence.end)
    assert report.is_expired
    assert report.seconds == 0
    assert report.reference == occurrence.end

    later = classify(occurrence, occurrence.end + timedelta(minutes=5))
    assert later.seconds == 300


@pytest.mark.parametrize("minutes_in,tier", [
    (0, Tier.LOW),
    (49, Tier.LOW),
    (50, Tier.MEDIUM),
    (74, Tier.MEDIUM),
    (75, Tier.HIGH),
    (99, Tier.HIGH),
])
def test_tier_boundaries_include_lower_edge(minutes_in, tier):
    occurrence = Occurrence(at(6, 10, 0), at(6, 11, 40))
    report = classify(occurrence, occurrence.start + timedelta(minutes=minutes_in))
    assert report.tier is tier
    assert 0 <= report.progress < 1


def test_tiers_cover_the_whole_window():
    assert tier_for(0.0) is Tier.LOW
    assert tier_for(0.4999) is Tier.LOW
    assert tier_for(0.5) is Tier.MEDIUM
    assert tier_for(0.7499) is Tier.MEDIUM
    assert tier_for(0.75) is Tier.HIGH
    assert tier_for(0.9999) is Tier.HIGH


def test_countdown_drops_seconds():
    assert split_countdown(90061) == (1, 1, 1)
    assert split_countdown(59) == (0, 0, 0)
    assert format_countdown(90061) == "1 Days 1 Hours 1 Minutes"
    assert format_countdown(3599) == "0 Hours 59 Minutes"
