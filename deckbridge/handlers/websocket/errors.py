"""Send helpers that never raise, and connection rejection."""

from __future__ import annotations

import logging

from fastapi import WebSocket, WebSocketDisconnect

from deckbridge.protocol.envelope import Envelope, dumps, build_error_response

logger = logging.getLogger(__name__)


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_envelope(ws: WebSocket, envelope: Envelope) -> bool:
    return await safe_send_text(ws, dumps(envelope))


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    """Tell an already-accepted socket why it is being turned away, then close it."""
    await safe_send_envelope(ws, build_error_response(error_code, message))
    try:
        await ws.close(code=close_code, reason=message)
    except Exception:
        return


__all__ = ["reject_connection", "safe_send_envelope", "safe_send_text"]
