from __future__ import annotations
import discord
from discord.ext import commands
from discord import app_commands

from timerbot.core.durations import format_duration
from timerbot.core.errors import TimerError
from timerbot.core.recurrence import format_days, make_schedule
from timerbot.core.registry import TimerRegistry
from timerbot.core.timezones import (
    describe_offset, host_offset_hours, now_local, parse_hhmm, to_host_time, validate_offset,
)
from timerbot.utils.embed_utils import error_embed, event_list_embed, success_embed


class TimerCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.registry: TimerRegistry = bot.registry

    def _timers(self):
        return self.bot.get_cog("EventTimers")

    def _host_offset(self) -> float:
        return host_offset_hours(now_local(self.bot.cfg))

    async def _refresh(self, gid: int):
        timers = self._timers()
        if timers:
            await timers.update_guild(gid)

    # /setchannel <channel>
    @app_commands.command(name="setchannel", description="Set the channel for event timers")
    @app_commands.describe(channel="The channel to post timers in")
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.guild_only()
    async def setchannel(self, interaction: discord.Interaction, channel: discord.TextChannel):
        gid = interaction.guild_id
        await self.bot.db.set_server_channel(gid, channel.id)
        self.registry.set_channel(gid, channel.id)
        self.registry.clear_messages(gid)

        await interaction.response.send_message(
            embed=success_embed(f"Timer channel set to {channel.mention}. Timers will appear here!"),
            ephemeral=True
        )
        await self._refresh(gid)

    # /settimezone <offset>
    @app_commands.command(name="settimezone", description="Set your timezone for automatic time conversion")
    @app_commands.describe(offset="UTC offset (e.g., 9 for JST, -6 for CST, -5 for EST, 5.5 for IST, 0 for GMT)")
    async def settimezone(self, interaction: discord.Interaction, offset: app_commands.Range[float, -12.0, 14.0]):
        try:
            value = validate_offset(offset)
        except TimerError as e:
            return await interaction.response.send_message(embed=error_embed(str(e)), ephemeral=True)

        await self.bot.db.set_user_timezone(interaction.user.id, value)

        await interaction.response.send_message(
            embed=success_embed(
                f"Timezone set to {describe_offset(value)}\n"
                f"Server timezone: {describe_offset(self._host_offset())}\n\n"
                "When you create events, times will be automatically converted!"
            ),
            ephemeral=True
        )

    # /addevent <name> <time> <duration> <days>
    @app_commands.command(name="addevent", description="Add a new event timer")
    @app_commands.describe(
        name="Event name",
        time="Start time in 24hr format (HH:MM, e.g., 14:30)",
        duration="Event duration (DD:HH:MM or HH:MM, e.g., 01:02:15 or 02:30)",
        days='Days of week (Sun,Mon,Tue,Wed,Thu,Fri,Sat or "Daily")',
    )
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.guild_only()
    async def addevent(self, interaction: discord.Interaction, name: str, time: str, duration: str, days: str):
        gid = interaction.guild_id
        user_offset = await self.bot.db.get_user_timezone(interaction.user.id)
        host_offset = self._host_offset()

        try:
            parse_hhmm(time)
            if user_offset is not None:
                host_time = to_host_time(time, user_offset, host_offset)
                time_info = (
                    f"\n🌍 Your time: {time} {describe_offset(user_offset)}"
                    f"\n⏰ Server time: {host_time} {describe_offset(host_offset)}"
                )
            else:
                host_time = time
                time_info = "\n⚠️ No timezone set. Using server time. Use `/settimezone` to set your timezone."
            schedule = make_schedule(name, host_time, duration, days)
        except TimerError as e:
            return await interaction.response.send_message(embed=error_embed(str(e)), ephemeral=True)

        await self.bot.db.save_event(gid, schedule)
        updated = self.registry.upsert_event(gid, schedule)

        await interaction.response.send_message(
            embed=success_embed(
                f"{'Updated' if updated else 'Added'} event **{schedule.name}**{time_info}\n"
                f"Duration: {format_duration(schedule.duration_minutes)} | Days: {format_days(schedule.days)}"
            ),
            ephemeral=True
        )
        await self._refresh(gid)

    # /removeevent <name>
    @app_commands.command(name="removeevent", description="Remove an event timer")
    @app_commands.describe(name="Event name to remove")
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.guild_only()
    async def removeevent(self, interaction: discord.Interaction, name: str):
        gid = interaction.guild_id
        name = name.strip()
        await interaction.response.defer(ephemeral=True)

        stored = await self.bot.db.delete_event(gid, name)
        tracked = self.registry.remove_event(gid, name)

        timers = self._timers()
        if timers:
            await timers.delete_timer_message(gid, name)
        else:
            self.registry.forget_message(gid, name)

        if not (stored or tracked):
            return await interaction.followup.send(embed=error_embed(f"No event named **{name}**"), ephemeral=True)
        await interaction.followup.send(embed=success_embed(f"Removed event **{name}**"), ephemeral=True)

    # /listevents
    @app_commands.command(name="listevents", description="List all configured events")
    @app_commands.guild_only()
    async def listevents(self, interaction: discord.Interaction):
        gid = interaction.guild_id
        schedules = self.registry.events_for(gid)
        if not schedules:
            return await interaction.response.send_message(
                embed=success_embed("📋 No events configured yet. Use `/addevent` to add one!"),
                ephemeral=True
            )

        await interaction.response.send_message(
            embed=event_list_embed(schedules, bool(self.registry.channel_for(gid))),
            ephemeral=True
        )

    # /refreshtimers
    @app_commands.command(name="refreshtimers", description="Manually refresh all timer messages")
    @app_commands.default_permissions(manage_channels=True)
    @app_commands.guild_only()
    async def refreshtimers(self, interaction: discord.Interaction):
        gid = interaction.guild_id
        if not self.registry.channel_for(gid):
            return await interaction.response.send_message(
                embed=error_embed("No channel set. Use `/setchannel` first."),
                ephemeral=True
            )

        self.registry.clear_messages(gid)
        await interaction.response.send_message(embed=success_embed("Refreshing all timers..."), ephemeral=True)
        await self._refresh(gid)


async def setup(bot: commands.Bot):
    await bot.add_cog(TimerCommands(bot))
