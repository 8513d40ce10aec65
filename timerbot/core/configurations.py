from __future__ import annotations
import os
import yaml
from typing import Any

DEFAULT_UPDATE_INTERVAL = 90
DEFAULT_HEALTH_PORT = 3000


class Config(dict):
    @staticmethod
    def load(path: str) -> "Config":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return Config(data)

    def get(self, *keys, default=None):
        cur: Any = self
        for k in keys:
            if isinstance(cur, dict) and k in cur:
                cur = cur[k]
            else:
                return default
        return cur

    @property
    def update_interval(self) -> int:
        """Seconds between timer refreshes; never below 10."""
        raw = self.get("timers", "update_interval_seconds", default=DEFAULT_UPDATE_INTERVAL)
        try:
            return max(10, int(raw))
        except (TypeError, ValueError):
            return DEFAULT_UPDATE_INTERVAL

    @property
    def health_port(self) -> int:
        """Configured port, then $PORT, then 3000; unparseable values fall back to 3000."""
        raw = self.get("health", "port", default=None) or os.getenv("PORT") or DEFAULT_HEALTH_PORT
        try:
            return int(raw)
        except (TypeError, ValueError):
            print(f"⚠ Invalid health port {raw!r}, using {DEFAULT_HEALTH_PORT}")
            return DEFAULT_HEALTH_PORT
