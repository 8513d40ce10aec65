"""
Centralized embed utility for the timer bot.
Builds timer, listing and command-reply embeds with consistent colours.
"""
from __future__ import annotations
from datetime import datetime, timezone
import discord

from timerbot.core.activity import ActivityReport, ActivityState, Tier, format_countdown
from timerbot.core.durations import format_duration
from timerbot.core.recurrence import EventSchedule, Occurrence, format_days

# Embed colors for different message types
COLORS = {
    "info": 0x5865F2,        # Blurple - listings
    "success": 0x2ECC71,     # Green - confirmation
    "warning": 0xF39C12,     # Orange - warnings
    "error": 0xE74C3C,       # Red - rejected input
    "inactive": 0x808080,    # Gray - waiting for next occurrence
}

TIER_COLORS = {
    Tier.LOW: 0x00FF00,      # Green (0-50%)
    Tier.MEDIUM: 0xFFFF00,   # Yellow (50-75%)
    Tier.HIGH: 0xFF0000,     # Red (75-100%)
}


def create_embed(
    description: str,
    title: str | None = None,
    color: str | int = "info",
    fields: list[dict] | None = None,
    footer: str | None = None,
    timestamp: datetime | None = None,
) -> discord.Embed:
    """
    Create a standardized embed.

    Args:
        description: The embed description
        title: Optional embed title
        color: Color name (from COLORS) or hex int
        fields: List of field dicts with 'name', 'value', and optional 'inline'
        footer: Optional footer text
        timestamp: Optional embed timestamp

    Returns:
        discord.Embed with appropriate styling
    """
    if isinstance(color, str):
        embed_color = COLORS.get(color, COLORS["info"])
    else:
        embed_color = color

    embed = discord.Embed(title=title, description=description, color=embed_color, timestamp=timestamp)

    if fields:
        for field in fields:
            embed.add_field(
                name=field.get("name", ""),
                value=field.get("value", ""),
                inline=field.get("inline", False)
            )

    if footer:
        embed.set_footer(text=footer)

    return embed


def success_embed(desc: str, title: str | None = None) -> discord.Embed:
    return create_embed(description=desc, title=title, color="success")


def error_embed(desc: str, title: str | None = None) -> discord.Embed:
    return create_embed(description=desc, title=title, color="error")


def report_color(report: ActivityReport) -> int:
    if report.state is ActivityState.ACTIVE and report.tier is not None:
        return TIER_COLORS[report.tier]
    return COLORS["inactive"]


def countdown_text(report: ActivityReport) -> str:
    suffix = "Remaining" if report.is_active else "Till Event"
    return f"{format_countdown(report.seconds)} {suffix}"


def discord_ts(dt: datetime, style: str) -> str:
    return f"<t:{int(dt.timestamp())}:{style}>"


def timer_embed(schedule: EventSchedule, occurrence: Occurrence, report: ActivityReport) -> discord.Embed:
    """The per-event message the driver keeps editing."""
    return create_embed(
        description=countdown_text(report),
        title=f"⏰ {schedule.name}",
        color=report_color(report),
        fields=[{
            "name": "🟢 Event Active" if report.is_active else "⏳ Next Event",
            "value": f"{discord_ts(occurrence.start, 'F')}\n{discord_ts(occurrence.start, 'R')}",
            "inline": False,
        }],
        footer=f"Duration: {format_duration(schedule.duration_minutes)}",
        timestamp=datetime.now(tz=timezone.utc),
    )


def event_line(schedule: EventSchedule) -> str:
    return (
        f"**{schedule.name}**\n"
        f"⏰ {schedule.start_time} | ⏳ {format_duration(schedule.duration_minutes)} | 📅 {format_days(schedule.days)}"
    )


def event_list_embed(schedules: list[EventSchedule], channel_set: bool) -> discord.Embed:
    return create_embed(
        description="\n\n".join(event_line(s) for s in schedules),
        title="📋 Configured Events",
        color="info",
        footer=f"Channel: {'Set' if channel_set else 'Not set'}",
    )
