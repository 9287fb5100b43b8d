"""WebSocket endpoint for control surfaces."""

from __future__ import annotations

from .manager import handle_websocket_connection

__all__ = ["handle_websocket_connection"]
