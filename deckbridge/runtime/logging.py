"""Logging initialization."""

from __future__ import annotations

import os
import logging

from deckbridge.config.logging import LOG_LEVEL, LOG_FORMAT, ENV_SHOW_TRANSPORT_LOGS

_TRANSPORT_LOGGERS = ("uvicorn.access", "uvicorn.error", "websockets")


def configure_logging() -> None:
    # Per-frame transport chatter drowns the bridge's own logs. Keep it tame unless explicitly enabled.
    if (os.getenv(ENV_SHOW_TRANSPORT_LOGS) or "").strip().lower() not in {"1", "true", "yes"}:
        for name in _TRANSPORT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
