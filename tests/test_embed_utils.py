from conftest import at

from timerbot.core.activity import Tier, classify
from timerbot.core.recurrence import Occurrence, make_schedule
from timerbot.utils.embed_utils import (
    COLORS, TIER_COLORS, countdown_text, event_list_embed, timer_embed,
)

SCHEDULE = make_schedule("Raid Boss", "14:30", 150, {1})
OCCURRENCE = Occurrence(at(6, 14, 30), at(6, 17, 0))


def test_upcoming_timer_embed():
    report = classify(OCCURRENCE, at(6, 12, 0))
    embed = timer_embed(SCHEDULE, OCCURRENCE, report)
    assert embed.title == "⏰ Raid Boss"
    assert embed.color.value == COLORS["inactive"]
    assert embed.description == "2 Hours 30 Minutes Till Event"
    assert embed.fields[0].name == "⏳ Next Event"
    assert f"<t:{int(OCCURRENCE.start.timestamp())}:R>" in embed.fields[0].value
    assert embed.footer.text == "Duration: 2h 30m"


def test_active_timer_colour_follows_tier():
    report = classify(OCCURRENCE, at(6, 16, 45))
    embed = timer_embed(SCHEDULE, OCCURRENCE, report)
    assert report.tier is Tier.HIGH
    assert embed.color.value == TIER_COLORS[Tier.HIGH]
    assert embed.fields[0].name == "🟢 Event Active"
    assert countdown_text(report) == "0 Hours 15 Minutes Remaining"


def test_event_list_embed():
    embed = event_list_embed([SCHEDULE], channel_set=False)
    assert "**Raid Boss**" in embed.description
    assert "📅 Mon" in embed.description
    assert embed.footer.text == "Channel: Not set"
