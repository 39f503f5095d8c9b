"""
Health check web server for Latesh Analysis Bot
Runs on the bot's event loop and answers status checks from the hosting platform
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from aiohttp import web

from . import config

logger = logging.getLogger(__name__)

STARTED_AT = web.AppKey("started_at", float)

NOT_FOUND_BODY = {
    "error": "Not Found",
    "message": "The requested endpoint does not exist",
}
SERVER_ERROR_BODY = {
    "error": "Internal Server Error",
    "message": "Something went wrong on the server",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@web.middleware
async def json_error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response(NOT_FOUND_BODY, status=404)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.error(f"Server error on {request.method} {request.path}: {e}", exc_info=e)
        return web.json_response(SERVER_ERROR_BODY, status=500)


async def index(request: web.Request) -> web.Response:
    return web.json_response({
        "name": "Latesh Analysis",
        "description": "Discord bot for FRC match analysis and webhook management",
        "version": config.APP_VERSION,
        "status": "online",
        "endpoints": {
            "health": "/health",
            "webhook": "/webhook",
        },
    })


async def health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "healthy",
        "timestamp": _now_iso(),
        "uptime": time.monotonic() - request.app[STARTED_AT],
    })


async def receive_webhook(request: web.Request) -> web.Response:
    """Accept an external integration payload and log it"""
    try:
        body = await request.json()
    except ValueError:
        body = await request.text()
    logger.info(f"Webhook received: {body}")

    return web.json_response({
        "success": True,
        "message": "Webhook received",
        "timestamp": _now_iso(),
    })


def create_app() -> web.Application:
    app = web.Application(middlewares=[json_error_middleware])
    app[STARTED_AT] = time.monotonic()
    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    app.router.add_post("/webhook", receive_webhook)
    return app


async def start_web_server(port: Optional[int] = None) -> web.AppRunner:
    """Start the health server on the running loop. Returns the runner for cleanup."""
    port = port or config.PORT
    runner = web.AppRunner(create_app())
    await runner.setup()
    site = web.TCPSite(runner, "0.0.0.0", port)
    await site.start()
    print(f"🌐 Web server running on port {port}")
    print(f"📊 Health check: http://localhost:{port}/health")
    return runner
