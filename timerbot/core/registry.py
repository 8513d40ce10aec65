from __future__ import annotations

from timerbot.core.recurrence import EventSchedule


class TimerRegistry:
    """
    In-memory view of what the bot is tracking, keyed by guild.

    - channels: guild_id -> timer channel id
    - events: guild_id -> {event name -> EventSchedule}
    - messages: (guild_id, event name) -> timer message id

    Owned by the bot and handed to cogs; loaded from the database on ready.
    """

    def __init__(self):
        self.channels: dict[int, int] = {}
        self.events: dict[int, dict[str, EventSchedule]] = {}
        self.messages: dict[tuple[int, str], int] = {}

    # -------------------------
    # Channels
    # -------------------------
    def set_channel(self, guild_id: int, channel_id: int):
        self.channels[guild_id] = channel_id

    def channel_for(self, guild_id: int) -> int | None:
        return self.channels.get(guild_id)

    def bound_guilds(self) -> list[tuple[int, int]]:
        return [(gid, cid) for gid, cid in self.channels.items() if cid]

    # -------------------------
    # Events
    # -------------------------
    def load_guild(self, guild_id: int, channel_id: int | None, schedules: list[EventSchedule]):
        if channel_id:
            self.channels[guild_id] = channel_id
        if schedules:
            self.events[guild_id] = {s.name: s for s in schedules}

    def events_for(self, guild_id: int) -> list[EventSchedule]:
        return list(self.events.get(guild_id, {}).values())

    def upsert_event(self, guild_id: int, schedule: EventSchedule) -> bool:
        """Store a schedule; returns True if it replaced one with the same name."""
        guild_events = self.events.setdefault(guild_id, {})
        existed = schedule.name in guild_events
        guild_events[schedule.name] = schedule
        return existed

    def remove_event(self, guild_id: int, name: str) -> bool:
        return self.events.get(guild_id, {}).pop(name, None) is not None

    # -------------------------
    # Timer messages
    # -------------------------
    def message_for(self, guild_id: int, name: str) -> int | None:
        return self.messages.get((guild_id, name))

    def remember_message(self, guild_id: int, name: str, message_id: int):
        self.messages[(guild_id, name)] = message_id

    def forget_message(self, guild_id: int, name: str) -> int | None:
        return self.messages.pop((guild_id, name), None)

    def clear_messages(self, guild_id: int):
        for key in [k for k in self.messages if k[0] == guild_id]:
            del self.messages[key]
