"""Control-surface side: reconnection engine, optimistic state and buttons."""

from __future__ import annotations

from .surface import LocalSurfaceState
from .engine import ReconnectionEngine
from .backoff import BackoffPolicy, fast_delay
from .controller import ControlSurfaceClient

__all__ = ["BackoffPolicy", "ControlSurfaceClient", "LocalSurfaceState", "ReconnectionEngine", "fast_delay"]
