import asyncio
from types import SimpleNamespace

import pytest

from conftest import FakeChannel, at, make_bot, make_timer_cog
from timerbot.cogs.timer_commands import TimerCommands
from timerbot.core.configurations import Config
from timerbot.core.registry import TimerRegistry
from timerbot.utils.embed_utils import COLORS


class FakeResponse:
    def __init__(self, sent):
        self.sent = sent
        self.deferred = False

    def is_done(self):
        return self.deferred or bool(self.sent)

    async def send_message(self, *, embed, ephemeral=False):
        self.sent.append(embed)

    async def defer(self, *, ephemeral=False):
        self.deferred = True


class FakeFollowup:
    def __init__(self, sent):
        self.sent = sent

    async def send(self, *, embed, ephemeral=False):
        self.sent.append(embed)


class FakeInteraction:
    def __init__(self, guild_id=1, user_id=42):
        self.guild_id = guild_id
        self.user = SimpleNamespace(id=user_id)
        self.replies = []
        self.response = FakeResponse(self.replies)
        self.followup = FakeFollowup(self.replies)


class FakeDatabase:
    def __init__(self, user_offsets=None):
        self.user_offsets = user_offsets or {}
        self.events = {}

    async def get_user_timezone(self, user_id):
        return self.user_offsets.get(user_id)

    async def save_event(self, gid, schedule):
        self.events[(gid, schedule.name)] = schedule

    async def delete_event(self, gid, name):
        return self.events.pop((gid, name), None) is not None


class RecordingTimers:
    def __init__(self):
        self.refreshed = []

    async def update_guild(self, gid):
        self.refreshed.append(gid)


def make_commands(user_offsets=None, channel_id=10):
    registry = TimerRegistry()
    if channel_id:
        registry.set_channel(1, channel_id)
    db = FakeDatabase(user_offsets)
    bot = make_bot(registry, FakeChannel(), cfg=Config({"timers": {"timezone": "UTC"}}), db=db)
    return TimerCommands(bot), bot


def run_command(command, cog, interaction, *args):
    asyncio.run(command.callback(cog, interaction, *args))
    return interaction.replies[-1]


def test_addevent_converts_user_time_to_server_time():
    cog, bot = make_commands(user_offsets={42: 9})
    reply = run_command(TimerCommands.addevent, cog, FakeInteraction(), "Raid", "23:30", "02:30", "Mon")

    schedule = bot.registry.events_for(1)[0]
    assert schedule.start_time == "14:30"
    assert bot.db.events[(1, "Raid")] == schedule
    assert "Your time: 23:30 UTC+9 (JST)" in reply.description
    assert "Server time: 14:30 UTC+0 (GMT/UTC)" in reply.description


def test_addevent_without_timezone_uses_server_time():
    cog, bot = make_commands()
    reply = run_command(TimerCommands.addevent, cog, FakeInteraction(), "Raid", "23:30", "02:30", "Mon")

    assert bot.registry.events_for(1)[0].start_time == "23:30"
    assert "No timezone set" in reply.description


@pytest.mark.parametrize("time,duration,days,expected", [
    ("25:00", "02:30", "Mon", "Invalid time format"),
    ("14:30", "90", "Mon", "Invalid duration format"),
    ("14:30", "00:00", "Mon", "longer than zero"),
    ("14:30", "02:30", "Someday", "Invalid days"),
])
def test_addevent_rejects_invalid_input_with_error_embed(time, duration, days, expected):
    cog, bot = make_commands()
    reply = run_command(TimerCommands.addevent, cog, FakeInteraction(), "Raid", time, duration, days)

    assert reply.color.value == COLORS["error"]
    assert expected in reply.description
    assert bot.registry.events_for(1) == []
    assert bot.db.events == {}


def test_addevent_reports_added_then_updated():
    cog, bot = make_commands()
    timers = RecordingTimers()
    bot.cogs["EventTimers"] = timers

    first = run_command(TimerCommands.addevent, cog, FakeInteraction(), "Raid", "14:30", "02:30", "Mon")
    second = run_command(TimerCommands.addevent, cog, FakeInteraction(), "Raid", "15:00", "01:00", "Daily")

    assert first.description.startswith("Added event **Raid**")
    assert second.description.startswith("Updated event **Raid**")
    assert bot.registry.events_for(1)[0].start_time == "15:00"
    assert timers.refreshed == [1, 1]


def test_removeevent_deletes_the_timer_message(raid):
    cog, bot = make_commands()
    channel = FakeChannel()
    timers = make_timer_cog(bot.registry, channel, bot=bot)
    bot.get_channel = lambda cid: channel
    bot.cogs["EventTimers"] = timers
    bot.registry.upsert_event(1, raid)
    asyncio.run(bot.db.save_event(1, raid))
    asyncio.run(timers._update_guild(1, 10, at(6, 12, 0)))
    assert len(channel.messages) == 1

    reply = run_command(TimerCommands.removeevent, cog, FakeInteraction(), "  Raid Boss ")

    assert reply.description == "Removed event **Raid Boss**"
    assert channel.messages == {}
    assert bot.registry.events_for(1) == []
    assert bot.registry.message_for(1, "Raid Boss") is None


def test_removeevent_reports_unknown_name():
    cog, bot = make_commands()
    reply = run_command(TimerCommands.removeevent, cog, FakeInteraction(), "Nope")

    assert reply.color.value == COLORS["error"]
    assert "No event named" in reply.description


def test_refreshtimers_requires_a_channel():
    cog, bot = make_commands(channel_id=None)
    timers = RecordingTimers()
    bot.cogs["EventTimers"] = timers

    reply = run_command(TimerCommands.refreshtimers, cog, FakeInteraction())

    assert reply.color.value == COLORS["error"]
    assert "No channel set" in reply.description
    assert timers.refreshed == []


def test_refreshtimers_reposts_for_bound_guild():
    cog, bot = make_commands()
    bot.registry.remember_message(1, "Raid", 555)
    timers = RecordingTimers()
    bot.cogs["EventTimers"] = timers

    run_command(TimerCommands.refreshtimers, cog, FakeInteraction())

    assert bot.registry.message_for(1, "Raid") is None
    assert timers.refreshed == [1]
