"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from deckbridge.state.runtime import RuntimeDeps
from deckbridge.handlers.connection import Connection
from deckbridge.config.protocol import ERROR_SERVER_AT_CAPACITY
from deckbridge.config.websocket import WS_CLOSE_BUSY_CODE, WS_CLOSE_CLEAN_CODE

from .errors import reject_connection
from .lifecycle import WebSocketLifecycle
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    settings = runtime_deps.settings
    try:
        await ws.accept()
    except Exception:
        logger.debug("WebSocket accept failed", exc_info=True)
        return

    conn = Connection(ws, send_queue_max=settings.websocket.send_queue_max)
    if not await runtime_deps.store.attach(conn):
        logger.warning("rejecting control surface: %s connections open", runtime_deps.store.registry.count())
        await reject_connection(
            ws,
            error_code=ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return

    lifecycle = WebSocketLifecycle(
        conn,
        idle_timeout_s=settings.websocket.idle_timeout_s,
        watchdog_tick_s=settings.websocket.watchdog_tick_s,
    )
    lifecycle.start()
    try:
        await run_message_loop(ws, conn, lifecycle, runtime_deps)
    finally:
        with contextlib.suppress(Exception):
            await lifecycle.stop()
        with contextlib.suppress(Exception):
            await runtime_deps.store.detach(conn)
        with contextlib.suppress(Exception):
            await conn.close(code=WS_CLOSE_CLEAN_CODE)


__all__ = ["handle_websocket_connection"]
