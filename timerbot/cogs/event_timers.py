"""
Event Timers

Single heartbeat that keeps one timer message per tracked event up to date:
- evaluates every event of every bound guild against the same instant
- edits the existing timer message, or posts a new one if it was deleted
- one failing event never stops the others
"""

from __future__ import annotations
import asyncio
import traceback
import discord
from discord.ext import commands, tasks

from timerbot.core.registry import TimerRegistry
from timerbot.core.timezones import now_local
from timerbot.core.tracker import EventStatus, evaluate_events
from timerbot.utils.embed_utils import timer_embed

DEFAULT_TICK_SECONDS = 90


class EventTimers(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.registry: TimerRegistry = bot.registry
        self._tick_lock = asyncio.Lock()

        self.timer_loop.change_interval(seconds=bot.cfg.update_interval)
        self.timer_loop.start()

    def cog_unload(self):
        self.timer_loop.cancel()

    # -------------------------
    # Heartbeat
    # -------------------------
    @tasks.loop(seconds=DEFAULT_TICK_SECONDS)
    async def timer_loop(self):
        # Waits out a running single-guild refresh; the other guilds still need this tick
        await self.update_all_events()

    @timer_loop.before_loop
    async def before_timer_loop(self):
        await self.bot.wait_until_ready()

    @timer_loop.error
    async def timer_loop_error(self, error: BaseException):
        print(f"✗ Timer loop error: {error}")
        traceback.print_exception(type(error), error, error.__traceback__)

    async def update_all_events(self):
        """Refresh every bound guild. Serialized so ticks and manual refreshes never overlap."""
        async with self._tick_lock:
            now = now_local(self.bot.cfg)
            for gid, cid in self.registry.bound_guilds():
                try:
                    await self._update_guild(gid, cid, now)
                except Exception as e:
                    print(f"✗ Error updating events for guild {gid}: {e}")

    async def update_guild(self, gid: int):
        cid = self.registry.channel_for(gid)
        if not cid:
            return
        async with self._tick_lock:
            await self._update_guild(gid, cid, now_local(self.bot.cfg))

    async def _update_guild(self, gid: int, cid: int, now):
        channel = self.bot.get_channel(cid) or await self.bot.fetch_channel(cid)
        if not isinstance(channel, discord.abc.Messageable):
            print(f"⚠ Timer channel {cid} in guild {gid} is not a text channel")
            return

        for status in evaluate_events(self.registry.events_for(gid), now):
            if not status.ok:
                print(f"✗ Error updating {status.schedule.name} in guild {gid}: {status.error}")
                continue
            try:
                await self._publish(channel, gid, status)
            except Exception as e:
                print(f"✗ Error posting {status.schedule.name} in guild {gid}: {e}")

    async def _publish(self, channel: discord.abc.Messageable, gid: int, status: EventStatus):
        embed = timer_embed(status.schedule, status.occurrence, status.report)
        name = status.schedule.name

        msg_id = self.registry.message_for(gid, name)
        if msg_id:
            try:
                msg = await channel.fetch_message(msg_id)
                await msg.edit(embed=embed)
                return
            except (discord.NotFound, discord.Forbidden):
                # Deleted or no longer ours: post a fresh one
                pass

        new_msg = await channel.send(embed=embed)
        self.registry.remember_message(gid, name, new_msg.id)

    async def delete_timer_message(self, gid: int, name: str):
        msg_id = self.registry.forget_message(gid, name)
        cid = self.registry.channel_for(gid)
        if not msg_id or not cid:
            return
        try:
            channel = self.bot.get_channel(cid) or await self.bot.fetch_channel(cid)
            msg = await channel.fetch_message(msg_id)
            await msg.delete()
        except discord.HTTPException as e:
            print(f"⚠ Could not delete timer message for {name} in guild {gid}: {e}")


async def setup(bot: commands.Bot):
    await bot.add_cog(EventTimers(bot))
