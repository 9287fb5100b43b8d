"""Configuration module exports (env names and defaults only)."""

from .websocket import DEFAULT_HOST, DEFAULT_PORT, WS_ENDPOINT_PATH

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "WS_ENDPOINT_PATH",
]
