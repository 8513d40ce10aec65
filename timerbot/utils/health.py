"""
Health check server for hosting platforms that probe an HTTP port.
"""

from __future__ import annotations
from aiohttp import web

HEALTH_TEXT = "Bot is running!"


async def _health(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_TEXT)


def make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", _health)
    app.router.add_get("/health", _health)
    return app


async def start_health_server(port: int) -> web.AppRunner:
    runner = web.AppRunner(make_app())
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", port)
    await site.start()
    print(f"✓ Health check server running on port {port}")
    return runner
