import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import discord
import pytest

from timerbot.cogs.event_timers import EventTimers
from timerbot.core.configurations import Config
from timerbot.core.recurrence import make_schedule

UTC = timezone.utc


def at(day: int, hour: int, minute: int = 0, second: int = 0, month: int = 1, year: int = 2025) -> datetime:
    """January 2025: the 5th is a Sunday, the 6th a Monday."""
    return datetime(year, month, day, hour, minute, second, tzinfo=UTC)


@pytest.fixture
def raid():
    return make_schedule("Raid Boss", "14:30", 150, {1})


class FakeMessage:
    def __init__(self, channel, message_id, embed):
        self.channel = channel
        self.id = message_id
        self.embed = embed
        self.edits = 0

    async def edit(self, *, embed):
        self.embed = embed
        self.edits += 1

    async def delete(self):
        self.channel.messages.pop(self.id, None)


class FakeChannel(discord.abc.Messageable):
    def __init__(self):
        self.messages = {}
        self.sent = 0

    async def _get_channel(self):
        return self

    async def send(self, *, embed):
        self.sent += 1
        msg = FakeMessage(self, 1000 + self.sent, embed)
        self.messages[msg.id] = msg
        return msg

    async def fetch_message(self, message_id):
        if message_id not in self.messages:
            raise discord.NotFound(SimpleNamespace(status=404, reason="Not Found"), "Unknown Message")
        return self.messages[message_id]


def make_bot(registry, channel, cfg=None, db=None):
    async def fetch_channel(cid):
        return channel

    cogs = {}
    return SimpleNamespace(
        cfg=cfg or Config({}),
        registry=registry,
        db=db,
        cogs=cogs,
        get_cog=cogs.get,
        get_channel=lambda cid: channel,
        fetch_channel=fetch_channel,
    )


def make_timer_cog(registry, channel, bot=None):
    bot = bot or make_bot(registry, channel)
    # Skip __init__ so the background loop is not started
    cog = EventTimers.__new__(EventTimers)
    cog.bot = bot
    cog.registry = registry
    cog._tick_lock = asyncio.Lock()
    return cog
