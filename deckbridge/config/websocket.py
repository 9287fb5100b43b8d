"""WebSocket protocol configuration and constants."""

from __future__ import annotations

# Listening endpoint. The host only ever binds to loopback.
ENV_HOST = "DECKBRIDGE_HOST"
ENV_PORT = "DECKBRIDGE_PORT"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8888
MIN_PORT = 1024
MAX_PORT = 65535

WS_ENDPOINT_PATH = "/"

# Close codes
WS_CLOSE_CLEAN_CODE = 1000
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_SLOW_CONSUMER_CODE = 4003

WS_CLOSE_SHUTDOWN_REASON = "Server shutting down"
WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_SLOW_CONSUMER_REASON = "client too slow"
WS_CLOSE_BUSY_REASON = "server at capacity"

# Idle watchdog
ENV_WS_IDLE_TIMEOUT_S = "DECKBRIDGE_IDLE_TIMEOUT_S"
ENV_WS_WATCHDOG_TICK_S = "DECKBRIDGE_WATCHDOG_TICK_S"
DEFAULT_WS_IDLE_TIMEOUT_S = 150.0
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
# Also bounds the receive wait, so a zero tick would spin.
MIN_WS_WATCHDOG_TICK_S = 0.01

# Outbound buffering per connection. A client that falls this far behind is dropped.
ENV_WS_SEND_QUEUE_MAX = "DECKBRIDGE_SEND_QUEUE_MAX"
DEFAULT_WS_SEND_QUEUE_MAX = 256

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_SEND_QUEUE_MAX",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "ENV_HOST",
    "ENV_PORT",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_SEND_QUEUE_MAX",
    "ENV_WS_WATCHDOG_TICK_S",
    "MAX_PORT",
    "MIN_PORT",
    "MIN_WS_WATCHDOG_TICK_S",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_BUSY_REASON",
    "WS_CLOSE_CLEAN_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_SHUTDOWN_REASON",
    "WS_CLOSE_SLOW_CONSUMER_CODE",
    "WS_CLOSE_SLOW_CONSUMER_REASON",
    "WS_ENDPOINT_PATH",
]
