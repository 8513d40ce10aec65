from __future__ import annotations

import asyncio
import os
import sys
import traceback
from itertools import islice
import discord
from discord.ext import commands
from discord import app_commands

from timerbot.core.configurations import Config
from timerbot.core.db import Database
from timerbot.core.registry import TimerRegistry
from timerbot.utils.health import start_health_server

BOT_DIR = os.path.dirname(os.path.abspath(__file__))

COGS = [
    "timerbot.cogs.event_timers",     # Heartbeat: resolve, classify, post/edit timer messages
    "timerbot.cogs.timer_commands",   # Commands: setchannel, settimezone, addevent, removeevent, listevents, refreshtimers
]

# Constants
SEPARATOR = "=" * 60
SYNC_ERROR_MESSAGES = {
    "missing_permission": "Bot missing 'Use Application Commands' permission",
    "missing_scope": "Missing 'applications.commands' scope in invite URL",
}

# Config template for environment variable creation
DEFAULT_CONFIG_TEMPLATE = """token: "{token}"

# Optional: sync commands to these guilds only (faster than global sync)
guilds: []

timers:
  update_interval_seconds: 90
  timezone: "{timezone}"

health:
  enabled: true
  port: {port}

database:
  path: "timerbot.sqlite3"
"""


# Helper functions for consistent output formatting
def _print_section(title: str = ""):
    """Print a section separator with optional title."""
    print(f"\n{SEPARATOR}")
    if title:
        print(title)
        print(SEPARATOR)


def _print_list(items: list, max_items: int = 10, prefix: str = "  "):
    """Print a list with truncation."""
    for item in items[:max_items]:
        print(f"{prefix}- {item}")
    if len(items) > max_items:
        print(f"{prefix}... and {len(items) - max_items} more")


def parse_guild_ids(raw) -> list[int]:
    """Guild IDs from a YAML list or a comma-separated string; invalid entries are skipped."""
    if not raw:
        return []
    items = raw if isinstance(raw, (list, tuple)) else str(raw).split(",")
    guild_ids = []
    for item in items:
        s = str(item).strip()
        if not s:
            continue
        try:
            guild_ids.append(int(s))
        except ValueError:
            print(f"✗ Error: Invalid guild ID format '{s}'")
    return guild_ids


class TimerBot(commands.Bot):
    def __init__(self, cfg: Config, db: Database):
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
        )
        self.cfg = cfg
        self.db = db
        self.registry = TimerRegistry()
        self._health_runner = None
        self._commands_synced = False
        self.tree.on_error = self.on_app_command_error

    async def setup_hook(self):
        """Called when the bot is setting up. Initialize database and load cogs."""
        _print_section("Initializing TimerBot...")

        try:
            await self.db.connect()
            print("✓ Database connected")
            await self.db.migrate()
            print("✓ Database migrations completed")
        except Exception as e:
            print(f"✗ Database error during setup: {e}")
            traceback.print_exc()
            raise

        if self.cfg.get("health", "enabled", default=True):
            try:
                self._health_runner = await start_health_server(self.cfg.health_port)
            except (OSError, ValueError) as e:
                print(f"⚠ Health check server not started: {e}")

        loaded_count = 0
        failed_count = 0
        for ext in COGS:
            try:
                await self.load_extension(ext)
                loaded_count += 1
                print(f"✓ Loaded: {ext}")
            except Exception as e:
                failed_count += 1
                print(f"✗ Failed to load {ext}: {e}")
                traceback.print_exc()

        _print_section(f"Extensions: {loaded_count} loaded, {failed_count} failed")
        print("Waiting for bot to be ready...")
        print()

    async def load_guild_data(self, gid: int, channel_id: int | None = None):
        if channel_id is None:
            channel_id = await self.db.get_server_channel(gid)
        schedules = await self.db.get_events(gid)
        self.registry.load_guild(gid, channel_id, schedules)
        return len(schedules)

    async def _sync_commands(self):
        guild_ids = parse_guild_ids(self.cfg.get("guilds", default=[]))

        if guild_ids:
            bot_guild_ids = {g.id for g in self.guilds}
            for gid in guild_ids:
                if gid not in bot_guild_ids:
                    print(f"⚠ Warning: Bot is not in guild {gid}")
                    continue
                try:
                    guild_obj = discord.Object(id=gid)
                    self.tree.copy_global_to(guild=guild_obj)
                    synced = await self.tree.sync(guild=guild_obj)
                    print(f"✓ Successfully synced {len(synced)} commands to guild {gid}")
                except discord.HTTPException as e:
                    print(f"✗ HTTP Error {e.status} syncing guild {gid}: {e}")
                    if e.status == 403:
                        for msg in SYNC_ERROR_MESSAGES.values():
                            print(f"  - {msg}")
        else:
            print("No specific guild IDs found in config. Syncing globally...")
            try:
                synced = await self.tree.sync()
                print(f"✓ Synced {len(synced)} global commands")
                if synced:
                    _print_list([cmd.name for cmd in synced])
            except discord.HTTPException as e:
                print(f"✗ Global sync failed: {e}")
                traceback.print_exc()

        self._commands_synced = True

    async def on_ready(self):
        """Called when the bot is ready. Load guild data and sync commands."""
        _print_section()
        print(f"Bot is ready! Logged in as {self.user} (ID: {self.user.id})")
        print(f"Connected to {len(self.guilds)} guild(s)")
        _print_list([f"{g.name} (ID: {g.id})" for g in islice(self.guilds, 3)], max_items=3)

        channels = await self.db.get_all_server_channels()
        event_count = 0
        for guild in self.guilds:
            try:
                event_count += await self.load_guild_data(guild.id, channels.get(guild.id, 0))
            except Exception as e:
                print(f"✗ Failed to load data for guild {guild.id}: {e}")
        print(f"✓ Loaded {event_count} event(s) for {len(self.guilds)} guild(s)")

        if not self._commands_synced:
            await self._sync_commands()

        timers = self.get_cog("EventTimers")
        if timers:
            await timers.update_all_events()
        print("Bot ready!")

    async def on_guild_join(self, guild: discord.Guild):
        print(f"Joined new guild: {guild.name} ({guild.id})")
        await self.load_guild_data(guild.id)

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """Global error handler for app commands."""
        error_messages = {
            app_commands.CommandOnCooldown: lambda e: f"This command is on cooldown. Try again in {e.retry_after:.1f} seconds.",
            app_commands.MissingPermissions: "You don't have permission to use this command.",
            app_commands.BotMissingPermissions: "I don't have the required permissions to execute this command.",
            app_commands.NoPrivateMessage: "This command only works in a server.",
        }

        message = None
        for error_type, msg in error_messages.items():
            if isinstance(error, error_type):
                message = msg(error) if callable(msg) else msg
                break

        if message is None:
            print(f"Unhandled command error: {error}")
            traceback.print_exception(type(error), error, error.__traceback__)
            message = "An error occurred while executing this command."

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException:
            pass

    async def on_error(self, event_method: str, *args, **kwargs):
        """Global error handler for events."""
        print(f"Error in event {event_method}:")
        traceback.print_exc()

    async def close(self):
        await super().close()
        if self._health_runner:
            await self._health_runner.cleanup()
        await self.db.close()


def ensure_config(config_path: str) -> None:
    """Create config.yml from environment variables if it doesn't exist."""
    if os.path.exists(config_path):
        return

    _print_section("config.yml not found. Attempting to create from environment variables...")

    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("ERROR: config.yml file not found and DISCORD_BOT_TOKEN not set!")
        print(SEPARATOR)
        print(f"Expected location: {config_path}")
        print("\nTo fix this:")
        print("1. Create config.yml in the timerbot/ directory, OR")
        print("2. Set DISCORD_BOT_TOKEN environment variable")
        print(SEPARATOR)
        sys.exit(1)

    config_content = DEFAULT_CONFIG_TEMPLATE.format(
        token=token,
        timezone=os.getenv("TIMERBOT_TIMEZONE", "UTC"),
        port=os.getenv("PORT", "3000"),
    )

    try:
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(config_content)
        print(f"✓ Created config.yml from environment variables at {config_path}")
    except OSError as e:
        print(f"✗ Failed to create config.yml: {e}")
        sys.exit(1)


async def main():
    config_path = os.getenv("TIMERBOT_CONFIG", os.path.join(BOT_DIR, "config.yml"))
    ensure_config(config_path)
    cfg = Config.load(config_path)

    token = cfg.get("token")
    if not token or token == "PUT_YOUR_BOT_TOKEN_HERE":
        _print_section("ERROR: Bot token not configured!")
        print("Please set your bot token in config.yml")
        sys.exit(1)

    db_path = cfg.get("database", "path", default="timerbot.sqlite3")
    if not os.path.isabs(db_path):
        db_path = os.path.join(BOT_DIR, db_path)

    db = Database(db_path)
    bot = TimerBot(cfg, db)

    # Retry logic for rate limiting
    max_retries = 5
    for attempt in range(max_retries):
        try:
            await bot.start(token)
            break
        except discord.HTTPException as e:
            if e.status == 429:
                if attempt < max_retries - 1:
                    wait_time = 5 * (2 ** attempt)  # Exponential backoff: 5, 10, 20, 40, 80 seconds
                    print(f"Rate limited (429). Waiting {wait_time} seconds before retry ({attempt + 1}/{max_retries})...")
                    await asyncio.sleep(wait_time)
                    continue
                print(f"ERROR: Rate limited after {max_retries} attempts. Please wait and try again later.")
                sys.exit(1)
            raise
        except discord.LoginFailure as e:
            print(f"ERROR: Discord Login Failure: {e}")
            print("Please check your bot token in config.yml or DISCORD_BOT_TOKEN environment variable.")
            sys.exit(1)


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot shutdown requested by user")


if __name__ == "__main__":
    run()
