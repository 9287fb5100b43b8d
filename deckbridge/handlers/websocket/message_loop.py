"""Per-connection inbound loop: keep-alive, decode, dispatch, respond."""

from __future__ import annotations

import asyncio
import logging

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from deckbridge.errors import DecodeError
from deckbridge.state.runtime import RuntimeDeps
from deckbridge.handlers.connection import Connection
from deckbridge.handlers.dispatch import ActionContext
from deckbridge.config.protocol import KEY_TYPE, TYPE_PONG, KEY_TIMESTAMP
from deckbridge.protocol.envelope import now_ms, build_error_response

from .lifecycle import WebSocketLifecycle
from .parser import PingMessage, parse_client_message

logger = logging.getLogger(__name__)

_DISCONNECT = "websocket.disconnect"


async def _recv_with_watchdog(ws: WebSocket, lifecycle: WebSocketLifecycle) -> tuple[str | bytes | None, bool]:
    try:
        message = await asyncio.wait_for(ws.receive(), timeout=lifecycle.watchdog_tick_s * 2)
    except asyncio.TimeoutError:
        return None, lifecycle.should_close()
    if message.get("type") == _DISCONNECT:
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))
    text = message.get("text")
    return (text if text is not None else message.get("bytes")), False


def _pong() -> str:
    return orjson.dumps({KEY_TYPE: TYPE_PONG, KEY_TIMESTAMP: now_ms()}).decode("utf-8")


async def _handle_frame(raw: str | bytes, conn: Connection, runtime_deps: RuntimeDeps) -> None:
    try:
        msg = parse_client_message(raw)
    except DecodeError as exc:
        logger.debug("rejected frame id=%s code=%s", conn.id, exc.code)
        conn.offer_envelope(build_error_response(exc.code, exc.message))
        return

    if isinstance(msg, PingMessage):
        if msg.is_ping:
            conn.offer(_pong())
        return

    runtime_deps.store.touch()
    ctx = ActionContext(connection=conn, store=runtime_deps.store, commands=runtime_deps.commands)
    response = await runtime_deps.dispatcher.dispatch(ctx, msg.action, msg.payload)
    if not conn.offer_envelope(response):
        logger.debug("response dropped id=%s action=%s", conn.id, response.action)


async def run_message_loop(
    ws: WebSocket,
    conn: Connection,
    lifecycle: WebSocketLifecycle,
    runtime_deps: RuntimeDeps,
) -> None:
    """Process frames in arrival order until the peer leaves or the connection is closed."""
    try:
        while not conn.closed:
            raw, should_exit = await _recv_with_watchdog(ws, lifecycle)
            if should_exit:
                return
            if raw is None:
                continue

            conn.touch()
            await _handle_frame(raw, conn, runtime_deps)
    except WebSocketDisconnect:
        return


__all__ = ["run_message_loop"]
