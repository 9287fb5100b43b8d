"""Admission control and handler limits (env names and defaults only)."""

from __future__ import annotations

ENV_MAX_CONNECTIONS = "DECKBRIDGE_MAX_CONNECTIONS"
DEFAULT_MAX_CONNECTIONS = 16

# Upper bound on a single domain command. Handlers only enqueue work for the
# host, so this only trips when the host stops draining its command queue.
ENV_HANDLER_TIMEOUT_S = "DECKBRIDGE_HANDLER_TIMEOUT_S"
DEFAULT_HANDLER_TIMEOUT_S = 5.0

ENV_COMMAND_QUEUE_MAX = "DECKBRIDGE_COMMAND_QUEUE_MAX"
DEFAULT_COMMAND_QUEUE_MAX = 64

ENV_DEDUP_WINDOW_MS = "DECKBRIDGE_DEDUP_WINDOW_MS"
DEFAULT_DEDUP_WINDOW_MS = 500

# Hotkey tabs addressable from a control surface.
MIN_TAB_NUMBER = 1
MAX_TAB_NUMBER = 5

__all__ = [
    "DEFAULT_COMMAND_QUEUE_MAX",
    "DEFAULT_DEDUP_WINDOW_MS",
    "DEFAULT_HANDLER_TIMEOUT_S",
    "DEFAULT_MAX_CONNECTIONS",
    "ENV_COMMAND_QUEUE_MAX",
    "ENV_DEDUP_WINDOW_MS",
    "ENV_HANDLER_TIMEOUT_S",
    "ENV_MAX_CONNECTIONS",
    "MAX_TAB_NUMBER",
    "MIN_TAB_NUMBER",
]
