"""Client reconnection policy (env names and defaults only)."""

from __future__ import annotations

ENV_RECONNECT_BASE_DELAY_MS = "DECKBRIDGE_RECONNECT_BASE_DELAY_MS"
ENV_RECONNECT_MULTIPLIER = "DECKBRIDGE_RECONNECT_MULTIPLIER"
ENV_RECONNECT_MAX_DELAY_MS = "DECKBRIDGE_RECONNECT_MAX_DELAY_MS"
ENV_RECONNECT_MAX_ATTEMPTS = "DECKBRIDGE_RECONNECT_MAX_ATTEMPTS"
ENV_RECONNECT_SLOW_DELAY_MS = "DECKBRIDGE_RECONNECT_SLOW_DELAY_MS"
ENV_HEALTH_PING_INTERVAL_MS = "DECKBRIDGE_HEALTH_PING_INTERVAL_MS"
ENV_CONNECT_TIMEOUT_S = "DECKBRIDGE_CONNECT_TIMEOUT_S"

DEFAULT_RECONNECT_BASE_DELAY_MS = 3000.0
DEFAULT_RECONNECT_MULTIPLIER = 1.5
DEFAULT_RECONNECT_MAX_DELAY_MS = 30000.0
# After this many fast attempts the client falls back to slow polling.
DEFAULT_RECONNECT_MAX_ATTEMPTS = 10
DEFAULT_RECONNECT_SLOW_DELAY_MS = 60000.0
DEFAULT_HEALTH_PING_INTERVAL_MS = 30000.0
DEFAULT_CONNECT_TIMEOUT_S = 5.0

# Two play/pause presses closer than this while disconnected force a reconnect.
DOUBLE_TAP_THRESHOLD_S = 0.5

DEFAULT_VOLUME_STEP = 0.1

__all__ = [
    "DEFAULT_CONNECT_TIMEOUT_S",
    "DEFAULT_HEALTH_PING_INTERVAL_MS",
    "DEFAULT_RECONNECT_BASE_DELAY_MS",
    "DEFAULT_RECONNECT_MAX_ATTEMPTS",
    "DEFAULT_RECONNECT_MAX_DELAY_MS",
    "DEFAULT_RECONNECT_MULTIPLIER",
    "DEFAULT_RECONNECT_SLOW_DELAY_MS",
    "DEFAULT_VOLUME_STEP",
    "DOUBLE_TAP_THRESHOLD_S",
    "ENV_CONNECT_TIMEOUT_S",
    "ENV_HEALTH_PING_INTERVAL_MS",
    "ENV_RECONNECT_BASE_DELAY_MS",
    "ENV_RECONNECT_MAX_ATTEMPTS",
    "ENV_RECONNECT_MAX_DELAY_MS",
    "ENV_RECONNECT_MULTIPLIER",
    "ENV_RECONNECT_SLOW_DELAY_MS",
]
