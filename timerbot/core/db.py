from __future__ import annotations
import json
import time
import aiosqlite
from contextlib import asynccontextmanager

from timerbot.core.recurrence import EventSchedule, make_schedule


def now_ts() -> int:
    return int(time.time())


class Database:
    def __init__(self, path: str):
        self.path = path
        self.conn: aiosqlite.Connection | None = None
        self._in_tx: bool = False

    async def connect(self):
        self.conn = await aiosqlite.connect(self.path)
        self.conn.row_factory = aiosqlite.Row
        await self.conn.execute("PRAGMA journal_mode=WAL;")
        await self.conn.execute("PRAGMA synchronous=NORMAL;")
        await self.conn.commit()

    async def close(self):
        if self.conn:
            await self.conn.close()
            self.conn = None

    async def execute(self, sql: str, params=(), commit: bool = True):
        """Execute SQL statement. If commit=False, don't commit (for use in transactions)."""
        assert self.conn
        await self.conn.execute(sql, params)
        # Only commit if explicitly requested AND not inside a transaction
        if commit and not self._in_tx:
            await self.conn.commit()

    @asynccontextmanager
    async def transaction(self):
        """Transaction context manager: BEGIN on enter, COMMIT on success, ROLLBACK on exception."""
        assert self.conn
        self._in_tx = True
        try:
            await self.conn.execute("BEGIN")
            yield self
            await self.conn.commit()
        except Exception:
            await self.conn.rollback()
            raise
        finally:
            self._in_tx = False

    async def fetchone(self, sql: str, params=()):
        assert self.conn
        cur = await self.conn.execute(sql, params)
        row = await cur.fetchone()
        await cur.close()
        return row

    async def fetchall(self, sql: str, params=()):
        assert self.conn
        cur = await self.conn.execute(sql, params)
        rows = await cur.fetchall()
        await cur.close()
        return rows

    async def migrate(self):
        """Create tables if missing. Wrapped in a single transaction."""
        try:
            async with self.transaction():
                await self._migrate_tables()
        except Exception as e:
            print(f"Database migration error: {e}")
            print(f"Error type: {type(e).__name__}")
            raise

    async def _migrate_tables(self):
        await self.execute("""
        CREATE TABLE IF NOT EXISTS events (
          guild_id   INTEGER NOT NULL,
          name       TEXT NOT NULL,
          start_time TEXT NOT NULL,
          duration   INTEGER NOT NULL,
          days       TEXT NOT NULL,
          created_ts INTEGER NOT NULL,
          PRIMARY KEY (guild_id, name)
        );
        """)

        await self.execute("""
        CREATE TABLE IF NOT EXISTS user_timezones (
          user_id         INTEGER PRIMARY KEY,
          timezone_offset REAL NOT NULL,
          updated_ts      INTEGER NOT NULL
        );
        """)

        await self.execute("""
        CREATE TABLE IF NOT EXISTS server_configs (
          guild_id   INTEGER PRIMARY KEY,
          channel_id INTEGER,
          updated_ts INTEGER NOT NULL
        );
        """)

    # -------------------------
    # Events
    # -------------------------
    async def save_event(self, gid: int, schedule: EventSchedule):
        await self.execute(
            """
            INSERT INTO events(guild_id,name,start_time,duration,days,created_ts)
            VALUES(?,?,?,?,?,?)
            ON CONFLICT(guild_id,name) DO UPDATE SET
              start_time=excluded.start_time, duration=excluded.duration, days=excluded.days
            """,
            (gid, schedule.name, schedule.start_time, int(schedule.duration_minutes),
             json.dumps(sorted(schedule.days)), now_ts())
        )

    async def get_events(self, gid: int) -> list[EventSchedule]:
        rows = await self.fetchall(
            "SELECT name,start_time,duration,days FROM events WHERE guild_id=? ORDER BY name",
            (gid,)
        )
        return [
            make_schedule(r["name"], r["start_time"], int(r["duration"]), json.loads(r["days"]))
            for r in rows
        ]

    async def delete_event(self, gid: int, name: str) -> bool:
        row = await self.fetchone("SELECT 1 FROM events WHERE guild_id=? AND name=?", (gid, name))
        await self.execute("DELETE FROM events WHERE guild_id=? AND name=?", (gid, name))
        return row is not None

    # -------------------------
    # Server config
    # -------------------------
    async def set_server_channel(self, gid: int, channel_id: int):
        await self.execute(
            """
            INSERT INTO server_configs(guild_id,channel_id,updated_ts)
            VALUES(?,?,?)
            ON CONFLICT(guild_id) DO UPDATE SET channel_id=excluded.channel_id, updated_ts=excluded.updated_ts
            """,
            (gid, channel_id, now_ts())
        )

    async def get_server_channel(self, gid: int) -> int | None:
        row = await self.fetchone("SELECT channel_id FROM server_configs WHERE guild_id=?", (gid,))
        if not row or row["channel_id"] is None:
            return None
        return int(row["channel_id"])

    async def get_all_server_channels(self) -> dict[int, int]:
        rows = await self.fetchall(
            "SELECT guild_id,channel_id FROM server_configs WHERE channel_id IS NOT NULL"
        )
        return {int(r["guild_id"]): int(r["channel_id"]) for r in rows}

    # -------------------------
    # User time zones
    # -------------------------
    async def set_user_timezone(self, uid: int, offset_hours: float):
        await self.execute(
            """
            INSERT INTO user_timezones(user_id,timezone_offset,updated_ts)
            VALUES(?,?,?)
            ON CONFLICT(user_id) DO UPDATE SET timezone_offset=excluded.timezone_offset, updated_ts=excluded.updated_ts
            """,
            (uid, float(offset_hours), now_ts())
        )

    async def get_user_timezone(self, uid: int) -> float | None:
        row = await self.fetchone("SELECT timezone_offset FROM user_timezones WHERE user_id=?", (uid,))
        return float(row["timezone_offset"]) if row else None
