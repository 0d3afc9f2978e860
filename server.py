"""HTTP host for the enrichment trigger.

Routes:
    POST /enrich   Run one batch; body {"articleIds": [...]}
    GET  /health   Liveness check

Batches are serialized with a single lock: concurrent requests queue
rather than interleave, so the dedup check stays race-free across
requests and AI calls stay globally sequential.
"""

import asyncio
import logging
from typing import Any

from aiohttp import web

from config import Config
from database import DocumentStore
from handler import handle_request

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", Config)
LOCK_KEY = web.AppKey("batch_lock", asyncio.Lock)
STORE_KEY = web.AppKey("store", object)
RESPONDER_KEY = web.AppKey("responder", object)


async def enrich(request: web.Request) -> web.Response:
    """Handle POST /enrich."""
    body = await request.read()
    async with request.app[LOCK_KEY]:
        status, payload = await handle_request(
            body,
            request.app[CONFIG_KEY],
            store=request.app[STORE_KEY],
            responder=request.app[RESPONDER_KEY],
        )
    return web.json_response(payload, status=status)


async def health(request: web.Request) -> web.Response:
    """Handle GET /health."""
    return web.json_response({"status": "ok"})


def create_app(
    config: Config,
    store: DocumentStore | None = None,
    responder: Any | None = None,
) -> web.Application:
    """Build the aiohttp application.

    Args:
        config: Application configuration
        store: Optional shared store; when omitted each request opens its own
        responder: Optional shared AI responder; when omitted each request creates one

    Returns:
        Configured web.Application
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[LOCK_KEY] = asyncio.Lock()
    app[STORE_KEY] = store
    app[RESPONDER_KEY] = responder
    app.router.add_post("/enrich", enrich)
    app.router.add_get("/health", health)
    return app


def serve(config: Config, host: str | None = None, port: int | None = None) -> None:
    """Run the HTTP host until interrupted."""
    host = host or config.server_host
    port = port or config.server_port
    logger.info("Serving enrichment trigger | host=%s port=%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)
