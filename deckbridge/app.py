"""FastAPI application exposing the control-surface endpoint."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import Callable

from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from deckbridge.state.runtime import RuntimeDeps
from deckbridge.config.websocket import WS_ENDPOINT_PATH
from deckbridge.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)


def create_app(runtime_deps: RuntimeDeps, *, status_fn: Callable[[], dict[str, Any]] | None = None) -> FastAPI:
    app = FastAPI(default_response_class=ORJSONResponse)
    app.state.runtime_deps = runtime_deps

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/status")
    async def status() -> dict[str, Any]:
        if status_fn is not None:
            return status_fn()
        store = runtime_deps.store
        return {
            "running": True,
            "port": store.server_port,
            "connections": store.registry.count(),
            "lastActivity": store.last_activity,
        }

    @app.websocket(WS_ENDPOINT_PATH)
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await handle_websocket_connection(websocket, app.state.runtime_deps)

    return app


__all__ = ["create_app"]
